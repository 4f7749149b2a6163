from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable

from aegisprobe import __version__
from aegisprobe.core.models import FileAnalysis
from aegisprobe.infra.logging_utils import LOGGER


def generate_hash_manifest(analyses: Iterable[FileAnalysis], output_path: Path) -> Path:
    payload: Dict[str, Any] = {
        "version": __version__,
        "files": [
            {
                "name": analysis.metadata.name,
                "size": analysis.metadata.size,
                "type": analysis.metadata.type,
                "modified": analysis.metadata.modified,
                "md5": analysis.metadata.hash.md5,
                "sha1": analysis.metadata.hash.sha1,
                "sha256": analysis.metadata.hash.sha256,
                "blake3": analysis.metadata.hash.blake3,
            }
            for analysis in analyses
        ],
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    LOGGER.info("Hash manifest generated", extra={"extra_data": {"output": str(output_path), "count": len(payload["files"])}})
    return output_path
