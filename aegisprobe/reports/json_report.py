from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from aegisprobe import __app_name__, __version__
from aegisprobe.core.models import FileAnalysis, MagicAnalysisReport, MitigationReport
from aegisprobe.infra.logging_utils import LOGGER

Report = Union[FileAnalysis, MagicAnalysisReport, MitigationReport]


def report_payload(report: Report) -> Dict[str, Any]:
    return {
        "tool": __app_name__,
        "version": __version__,
        "generated": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "kind": type(report).__name__,
        "report": report.to_dict(),
    }


def write_json_report(report: Report, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report_payload(report), indent=2), encoding="utf-8")
    LOGGER.info("JSON report generated", extra={"extra_data": {"output": str(output_path)}})
    return output_path
