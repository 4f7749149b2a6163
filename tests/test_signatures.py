import pytest

from aegisprobe.core.signatures import FORMAT_SIGNATURES, UNKNOWN_FORMAT, detect_format


@pytest.mark.parametrize(
    "header, expected",
    [
        (b"MZ\x90\x00\x03\x00\x00\x00", "PE/COFF"),
        (b"\x7fELF\x02\x01\x01\x00", "ELF"),
        (b"ELF-like", "ELF"),
        (b"PK\x03\x04\x14\x00", "ZIP"),
        (b"Rar!\x1a\x07\x00", "RAR"),
        (b"%PDF-1.7\n", "PDF"),
        (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "Office Document"),
        (b"\x89PNG\r\n\x1a\n", "PNG"),
        (b"\xff\xd8\xff\xe0\x00\x10JFIF", "JPEG"),
        (b"GIF89a", "GIF"),
        (b"BM6\x00\x00\x00", "BMP"),
    ],
)
def test_known_signatures(header: bytes, expected: str) -> None:
    assert detect_format(header + b"\x00" * 32) == expected


def test_short_unmatched_input_is_unknown() -> None:
    assert detect_format(b"\x01\x02") == UNKNOWN_FORMAT
    assert detect_format(b"") == UNKNOWN_FORMAT


def test_only_leading_bytes_are_considered() -> None:
    assert detect_format(b"\x00" * 8 + b"MZ") == UNKNOWN_FORMAT


def test_table_order_is_priority() -> None:
    names = [signature.name for signature in FORMAT_SIGNATURES]
    assert names[0] == "PE/COFF"
    # the raw ELF magic is checked before the bare "ELF" text prefix
    prefixes = [signature.prefix_hex for signature in FORMAT_SIGNATURES]
    assert prefixes.index("7F454C46") < prefixes.index("454C46")
