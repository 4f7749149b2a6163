import json
from pathlib import Path

from conftest import FakeRunner

from aegisprobe import __version__
from aegisprobe.core.binary_layout import BinaryLayoutInspector
from aegisprobe.core.file_analysis_service import FileAnalysisService
from aegisprobe.core.magic_service import MagicService
from aegisprobe.core.mitigation import MitigationDetector
from aegisprobe.core.models import MitigationReport
from aegisprobe.reports.hash_manifest import generate_hash_manifest
from aegisprobe.reports.json_report import report_payload, write_json_report


def test_magic_report_payload(tmp_path: Path) -> None:
    report = MagicService().magic("SGVsbG8gV29ybGQ=")
    output = write_json_report(report, tmp_path / "out" / "magic.json")
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["kind"] == "MagicAnalysisReport"
    assert payload["version"] == __version__
    assert payload["report"]["encoding"][0] == "base64"
    assert payload["report"]["decoded_results"]["base64"] == "Hello World"
    assert payload["report"]["decoded_results"]["hex"] is None


def test_mitigation_payload_has_all_fields() -> None:
    payload = report_payload(MitigationReport(nx=True))
    assert payload["report"] == {
        "aslr": False,
        "dep": False,
        "stack_canary": False,
        "relro": False,
        "pie": False,
        "nx": True,
    }
    assert payload["generated"].endswith("Z")


def test_hash_manifest(tmp_path: Path, fake_runner: FakeRunner) -> None:
    service = FileAnalysisService(MitigationDetector(fake_runner), BinaryLayoutInspector(fake_runner))
    analyses = []
    for name, content in (("a.pdf", b"%PDF-1.7 body"), ("b.zip", b"PK\x03\x04rest")):
        path = tmp_path / name
        path.write_bytes(content)
        analyses.append(service.analyze_file(path))
    manifest = generate_hash_manifest(analyses, tmp_path / "manifest.json")
    payload = json.loads(manifest.read_text(encoding="utf-8"))
    assert [entry["name"] for entry in payload["files"]] == ["a.pdf", "b.zip"]
    assert [entry["type"] for entry in payload["files"]] == ["PDF", "ZIP"]
    assert all(len(entry["blake3"]) == 64 for entry in payload["files"])
