from __future__ import annotations

import base64
import binascii
import codecs
import re
from typing import Callable, Dict, Union
from urllib.parse import quote, unquote

Data = Union[str, bytes]

# encodeURIComponent leaves these unescaped
URL_SAFE_CHARS = "-_.!~*'()"

HTML_ENTITIES: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_HTML_ESCAPE_RE = re.compile(r"[&<>\"']")
_HTML_UNESCAPE_RE = re.compile(r"&(?:amp|lt|gt|quot|#39);")
_HTML_REVERSE = {entity: char for char, entity in HTML_ENTITIES.items()}

_UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")
_MALFORMED_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _urlsafe_b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


_ENCODERS: Dict[str, Callable[[bytes], str]] = {
    "base64": lambda raw: base64.b64encode(raw).decode("ascii"),
    "hex": lambda raw: raw.hex(),
    "utf8": lambda raw: raw.decode("utf-8", errors="replace"),
    "ascii": lambda raw: raw.decode("ascii", errors="replace"),
    "url-safe-base64": lambda raw: base64.urlsafe_b64encode(raw).decode("ascii").rstrip("="),
    "binary": lambda raw: raw.decode("latin-1"),
}

_DECODERS: Dict[str, Callable[[str], bytes]] = {
    "base64": lambda text: base64.b64decode(text, validate=True),
    "hex": bytes.fromhex,
    "utf8": lambda text: text.encode("utf-8"),
    "ascii": lambda text: text.encode("ascii"),
    "url-safe-base64": _urlsafe_b64decode,
    "binary": lambda text: text.encode("latin-1"),
}


def encode(data: Data, encoding: str = "base64") -> str:
    encoder = _ENCODERS.get(encoding)
    if encoder is None:
        raise ValueError(f"Unsupported encoding: {encoding}")
    return encoder(_as_bytes(data))


def decode(text: str, encoding: str = "base64") -> bytes:
    """Decode ``text`` to raw bytes; malformed input raises ValueError."""
    decoder = _DECODERS.get(encoding)
    if decoder is None:
        raise ValueError(f"Unsupported encoding: {encoding}")
    try:
        return decoder(text)
    except binascii.Error as exc:
        raise ValueError(f"Invalid {encoding} input: {exc}") from exc


def convert_format(text: str, from_encoding: str, to_encoding: str) -> str:
    return encode(decode(text, from_encoding), to_encoding)


def url_encode(text: str) -> str:
    return quote(text, safe=URL_SAFE_CHARS)


def url_decode(text: str) -> str:
    match = _MALFORMED_PERCENT_RE.search(text)
    if match:
        raise ValueError(f"Malformed percent escape at offset {match.start()}")
    return unquote(text, errors="strict")


def html_encode(text: str) -> str:
    return _HTML_ESCAPE_RE.sub(lambda m: HTML_ENTITIES[m.group()], text)


def html_decode(text: str) -> str:
    return _HTML_UNESCAPE_RE.sub(lambda m: _HTML_REVERSE[m.group()], text)


def rot13(text: str) -> str:
    return codecs.encode(text, "rot_13")


def decode_unicode(text: str) -> str:
    return _UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)


def binary_to_string(text: str) -> str:
    # the trailing group may be shorter than 8 digits
    groups = [text[i:i + 8] for i in range(0, len(text), 8)]
    return "".join(chr(int(group, 2)) for group in groups)


def string_to_binary(text: str) -> str:
    """Eight binary digits per character; round-trips code points below 256."""
    return "".join(format(ord(char), "08b") for char in text)
