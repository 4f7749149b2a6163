from __future__ import annotations

from typing import Callable

from aegisprobe.core import transforms
from aegisprobe.core.models import DecodeResult
from aegisprobe.plugins.base import Decoder, PluginRegistry


class FunctionDecoder(Decoder):
    """Adapts a text transform to the Decoder interface.

    ValueError (which covers binascii and Unicode errors) becomes a failed
    result; anything else is a bug and propagates.
    """

    def __init__(self, name: str, transform: Callable[[str], str]) -> None:
        self.name = name
        self.transform = transform

    def decode(self, text: str) -> DecodeResult:
        try:
            return DecodeResult.success(self.name, self.transform(text))
        except ValueError as exc:
            return DecodeResult.failure(self.name, str(exc) or type(exc).__name__)


def _base64_text(text: str) -> str:
    return transforms.decode(text, "base64").decode("utf-8", errors="replace")


def _hex_text(text: str) -> str:
    return transforms.decode(text, "hex").decode("utf-8", errors="replace")


def default_decoder_registry() -> PluginRegistry[Decoder]:
    registry: PluginRegistry[Decoder] = PluginRegistry()
    registry.register(FunctionDecoder("base64", _base64_text))
    registry.register(FunctionDecoder("hex", _hex_text))
    registry.register(FunctionDecoder("url", transforms.url_decode))
    registry.register(FunctionDecoder("unicode", transforms.decode_unicode))
    registry.register(FunctionDecoder("rot13", transforms.rot13))
    registry.register(FunctionDecoder("binary", transforms.binary_to_string))
    return registry
