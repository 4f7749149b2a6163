from __future__ import annotations

import re
from typing import Any, Dict, List, Tuple

from aegisprobe.core.entropy import shannon_entropy
from aegisprobe.core.models import DECODE_FAILED, EncodingCandidate
from aegisprobe.core.transforms import decode

# Declaration order is the tie-break for equal scores.
CANDIDATE_ENCODINGS: Tuple[str, ...] = ("utf8", "ascii", "base64", "hex")

FORMAT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("base64", re.compile(r"[A-Za-z0-9+/=]+")),
    ("hex", re.compile(r"[0-9A-Fa-f]+")),
    ("url-safe base64", re.compile(r"[A-Za-z0-9\-_]+")),
    ("base64url", re.compile(r"[A-Za-z0-9\-_]+={0,2}")),
)
_PATTERNS_BY_LABEL: Dict[str, "re.Pattern[str]"] = dict(FORMAT_PATTERNS)
VALIDATED_FORMATS = ("base64", "hex", "url-safe base64")


def _score(text: str, encoding: str) -> float:
    try:
        raw = decode(text, encoding)
    except ValueError:
        return DECODE_FAILED
    return shannon_entropy(raw)


def _rank_key(candidate: EncodingCandidate) -> Tuple[int, float]:
    if candidate.failed:
        return (1, 0.0)
    return (0, candidate.score)


def classify_encoding(text: str, encodings: Tuple[str, ...] = CANDIDATE_ENCODINGS) -> List[EncodingCandidate]:
    """Rank candidate encodings, lowest decoded entropy first.

    Failed decodes carry the -1 sentinel and always rank after valid scores.
    """
    candidates = [EncodingCandidate(encoding=name, score=_score(text, name)) for name in encodings]
    return sorted(candidates, key=_rank_key)


def matches_format(text: str, label: str) -> bool:
    pattern = _PATTERNS_BY_LABEL[label]
    return pattern.fullmatch(text) is not None


def detect_possible_formats(text: str) -> List[str]:
    return [label for label, pattern in FORMAT_PATTERNS if pattern.fullmatch(text)]


def validate_format(text: str, fmt: str) -> bool:
    if fmt not in VALIDATED_FORMATS:
        return False
    return matches_format(text, fmt)


def analyze_data(text: str) -> Dict[str, Any]:
    return {
        "entropy": shannon_entropy(text),
        "encoding": [candidate.encoding for candidate in classify_encoding(text)],
        "possible_formats": detect_possible_formats(text),
    }
