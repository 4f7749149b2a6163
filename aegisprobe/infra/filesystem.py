from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

import blake3

from aegisprobe.core.models import FileHashes

PathLike = Union[str, Path]


@dataclass(frozen=True)
class EvidenceFile:
    path: Path
    data: bytes
    size: int
    created: str
    modified: str


def _iso_utc(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def read_evidence(path: PathLike) -> EvidenceFile:
    p = Path(path)
    with p.open("rb") as f:
        stat = os.fstat(f.fileno())
        data = f.read()
    # st_birthtime only exists on some platforms; st_ctime is the closest on Linux
    created = getattr(stat, "st_birthtime", stat.st_ctime)
    return EvidenceFile(
        path=p,
        data=data,
        size=stat.st_size,
        created=_iso_utc(created),
        modified=_iso_utc(stat.st_mtime),
    )


def hash_bytes(data: bytes) -> FileHashes:
    return FileHashes(
        md5=hashlib.md5(data).hexdigest(),
        sha1=hashlib.sha1(data).hexdigest(),
        sha256=hashlib.sha256(data).hexdigest(),
        blake3=blake3.blake3(data).hexdigest(),
    )
