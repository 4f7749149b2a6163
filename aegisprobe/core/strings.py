from __future__ import annotations

from typing import List

PRINTABLE_MIN = 32
PRINTABLE_MAX = 126


def extract_strings(data: bytes, min_length: int = 4) -> List[str]:
    """Printable ASCII runs of at least ``min_length`` bytes, in file order."""
    strings: List[str] = []
    current = bytearray()
    for byte in data:
        if PRINTABLE_MIN <= byte <= PRINTABLE_MAX:
            current.append(byte)
            continue
        if len(current) >= min_length:
            strings.append(current.decode("ascii"))
        current.clear()
    if len(current) >= min_length:
        strings.append(current.decode("ascii"))
    return strings
