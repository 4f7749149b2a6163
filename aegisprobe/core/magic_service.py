from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Optional, Tuple, Union

from aegisprobe.core.classifier import classify_encoding, detect_possible_formats, matches_format
from aegisprobe.core.entropy import shannon_entropy
from aegisprobe.core.errors import MagicOperationFailed
from aegisprobe.core.models import DecodeResult, MagicAnalysisReport
from aegisprobe.infra.cache import TTLCache
from aegisprobe.infra.logging_utils import LOGGER
from aegisprobe.plugins.base import Decoder, PluginRegistry
from aegisprobe.plugins.decoders import default_decoder_registry

HIGH_ENTROPY_THRESHOLD = 4.5

MagicInput = Union[str, bytes, bytearray, memoryview]


def suggest_transformations(text: str, entropy: Optional[float] = None, threshold: float = HIGH_ENTROPY_THRESHOLD) -> List[str]:
    if entropy is None:
        entropy = shannon_entropy(text)
    suggestions: List[str] = []
    if entropy > threshold:
        suggestions.append("This might be encrypted or compressed data")
    if matches_format(text, "base64"):
        suggestions.append("Try Base64 decode")
    if matches_format(text, "hex"):
        suggestions.append("Try Hex decode")
    if "%" in text:
        suggestions.append("Try URL decode")
    if "\\u" in text:
        suggestions.append("Try Unicode decode")
    return suggestions


def _normalize(data: MagicInput) -> Tuple[str, Union[str, bytes]]:
    if isinstance(data, str):
        return data, data
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        return raw.decode("utf-8", errors="replace"), raw
    raise TypeError(f"expected text or bytes, got {type(data).__name__}")


class MagicService:
    def __init__(
        self,
        decoders: Optional[PluginRegistry[Decoder]] = None,
        cache: Optional[TTLCache] = None,
        high_entropy_threshold: float = HIGH_ENTROPY_THRESHOLD,
    ) -> None:
        self.decoders = decoders if decoders is not None else default_decoder_registry()
        self.cache = cache
        self.high_entropy_threshold = high_entropy_threshold

    def decode_attempts(self, text: str) -> List[DecodeResult]:
        return [decoder.decode(text) for decoder in self.decoders]

    def try_decode(self, text: str) -> Dict[str, Optional[str]]:
        results: Dict[str, Optional[str]] = {}
        for attempt in self.decode_attempts(text):
            results[attempt.decoder] = attempt.value if attempt.ok else None
        return results

    def magic(self, data: MagicInput) -> MagicAnalysisReport:
        try:
            return self._magic(data)
        except Exception as exc:
            LOGGER.error("Magic operation failed", extra={"extra_data": {"error": repr(exc)}})
            raise MagicOperationFailed(exc) from exc

    def _magic(self, data: MagicInput) -> MagicAnalysisReport:
        text, measured = _normalize(data)
        cache_key = ("magic", measured)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached
        entropy = shannon_entropy(measured)
        report = MagicAnalysisReport(
            possible_formats=tuple(detect_possible_formats(text)),
            encoding=tuple(classify_encoding(text)),
            entropy=entropy,
            transformations=tuple(suggest_transformations(text, entropy, self.high_entropy_threshold)),
            decoded_results=MappingProxyType(self.try_decode(text)),
        )
        if self.cache is not None:
            self.cache.set(cache_key, report)
        LOGGER.debug(
            "Magic analysis complete",
            extra={"extra_data": {"entropy": entropy, "formats": list(report.possible_formats)}},
        )
        return report
