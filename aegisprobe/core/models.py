from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from aegisprobe.core.errors import DecodeError

DECODE_FAILED = -1.0


@dataclass(frozen=True)
class EncodingCandidate:
    encoding: str
    score: float

    @property
    def failed(self) -> bool:
        return self.score == DECODE_FAILED


@dataclass(frozen=True)
class DecodeResult:
    decoder: str
    value: Optional[str] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, decoder: str, value: str) -> "DecodeResult":
        return cls(decoder=decoder, value=value)

    @classmethod
    def failure(cls, decoder: str, reason: str) -> "DecodeResult":
        return cls(decoder=decoder, error=DecodeError(decoder, reason))


@dataclass(frozen=True)
class MagicAnalysisReport:
    possible_formats: Tuple[str, ...]
    encoding: Tuple[EncodingCandidate, ...]
    entropy: float
    transformations: Tuple[str, ...]
    # read-only view; reports may be shared through a cache
    decoded_results: Mapping[str, Optional[str]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "possible_formats": list(self.possible_formats),
            "encoding": [candidate.encoding for candidate in self.encoding],
            "encoding_scores": {candidate.encoding: candidate.score for candidate in self.encoding},
            "entropy": self.entropy,
            "transformations": list(self.transformations),
            "decoded_results": dict(self.decoded_results),
        }


@dataclass(frozen=True)
class MitigationReport:
    aslr: bool = False
    dep: bool = False
    stack_canary: bool = False
    relro: bool = False
    pie: bool = False
    nx: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class FileHashes:
    md5: str
    sha1: str
    sha256: str
    blake3: str


@dataclass(frozen=True)
class FileMetadata:
    name: str
    size: int
    created: str
    modified: str
    type: str
    hash: FileHashes


@dataclass(frozen=True)
class SectionInfo:
    index: int
    name: str
    size: int
    vma: int
    lma: int
    file_offset: int
    alignment: int
    flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SymbolInfo:
    address: int
    flags: str
    section: str
    size: int
    name: str
    version: str = ""

    @property
    def undefined(self) -> bool:
        return self.section == "*UND*"


@dataclass(frozen=True)
class ResourceRow:
    """One row of an objdump section dump: offset, hex words, ASCII column."""

    offset: int
    data: str
    text: str = ""


@dataclass(frozen=True)
class BinaryLayout:
    sections: Tuple[SectionInfo, ...] = ()
    imports: Tuple[SymbolInfo, ...] = ()
    exports: Tuple[SymbolInfo, ...] = ()
    resources: Tuple[ResourceRow, ...] = ()
    # objdump options whose run hit the tool timeout
    timed_out: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileAnalysis:
    metadata: FileMetadata
    strings: Tuple[str, ...]
    entropy: float
    security: MitigationReport
    sections: Tuple[SectionInfo, ...] = ()
    imports: Tuple[SymbolInfo, ...] = ()
    exports: Tuple[SymbolInfo, ...] = ()
    resources: Tuple[ResourceRow, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["strings"] = list(self.strings)
        for key in ("sections", "imports", "exports", "resources"):
            payload[key] = list(payload[key])
        return payload
