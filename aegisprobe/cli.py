"""Command line entry point.

Usage:
  aegisprobe magic <text> [--output report.json]
  aegisprobe file <path> [--output report.json]
  aegisprobe security <path>
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from aegisprobe import __app_name__, __version__
from aegisprobe.core.errors import AegisProbeError
from aegisprobe.core.file_analysis_service import FileAnalysisService
from aegisprobe.core.magic_service import MagicService
from aegisprobe.infra.cache import TTLCache
from aegisprobe.infra.config import load_settings
from aegisprobe.infra.logging_utils import configure_logging
from aegisprobe.reports.json_report import report_payload, write_json_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aegisprobe", description=f"{__app_name__} forensic data and binary analysis")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    magic = sub.add_parser("magic", help="classify and decode a text sample")
    magic.add_argument("data")
    magic.add_argument("--output", type=Path)

    file_cmd = sub.add_parser("file", help="full analysis of a file")
    file_cmd.add_argument("path")
    file_cmd.add_argument("--output", type=Path)

    security = sub.add_parser("security", help="mitigation report for an executable")
    security.add_argument("path")
    security.add_argument("--output", type=Path)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.logging_level)
    cache = TTLCache(settings.cache_ttl, settings.cache_max_entries)
    try:
        if args.command == "magic":
            report = MagicService(cache=cache, high_entropy_threshold=settings.high_entropy_threshold).magic(args.data)
        else:
            service = FileAnalysisService.from_settings(settings, cache=cache)
            if args.command == "file":
                report = service.analyze_file(args.path)
            else:
                report = service.detector.analyze_security(args.path)
    except AegisProbeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    if args.output:
        write_json_report(report, args.output)
    else:
        print(json.dumps(report_payload(report), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
