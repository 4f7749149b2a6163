from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

UNKNOWN_FORMAT = "Unknown"
PREFIX_LENGTH = 8


@dataclass(frozen=True)
class FormatSignature:
    prefix_hex: str
    name: str

    def matches(self, header_hex: str) -> bool:
        return header_hex.startswith(self.prefix_hex)


# Searched in order; the first match wins.
FORMAT_SIGNATURES: Tuple[FormatSignature, ...] = (
    FormatSignature("4D5A", "PE/COFF"),
    FormatSignature("7F454C46", "ELF"),
    FormatSignature("454C46", "ELF"),
    FormatSignature("504B", "ZIP"),
    FormatSignature("52617221", "RAR"),
    FormatSignature("25504446", "PDF"),
    FormatSignature("D0CF11E0", "Office Document"),
    FormatSignature("89504E47", "PNG"),
    FormatSignature("FFD8FF", "JPEG"),
    FormatSignature("47494638", "GIF"),
    FormatSignature("424D", "BMP"),
)


def detect_format(data: bytes, signatures: Tuple[FormatSignature, ...] = FORMAT_SIGNATURES) -> str:
    header_hex = bytes(data[:PREFIX_LENGTH]).hex().upper()
    for signature in signatures:
        if signature.matches(header_hex):
            return signature.name
    return UNKNOWN_FORMAT
