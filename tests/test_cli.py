import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from aegisprobe import cli


def test_magic_command_writes_report(tmp_path: Path) -> None:
    output = tmp_path / "magic.json"
    assert cli.main(["magic", "48656c6c6f", "--output", str(output)]) == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["report"]["decoded_results"]["hex"] == "Hello"


def test_missing_file_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["file", str(tmp_path / "absent")]) == 2
    assert "File analysis failed" in capsys.readouterr().err


def test_bad_configuration_exits_with_error(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setenv("AEGISPROBE_TOOL_TIMEOUT", "never")
    assert cli.main(["magic", "abc"]) == 2
    assert "AEGISPROBE_TOOL_TIMEOUT" in capsys.readouterr().err


def test_stdout_is_a_single_json_document(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("plain notes about nothing")
    env = dict(os.environ, AEGISPROBE_READELF="no-such-readelf", AEGISPROBE_OBJDUMP="no-such-objdump")
    completed = subprocess.run(
        [sys.executable, "-m", "aegisprobe.cli", "file", str(notes)],
        capture_output=True,
        text=True,
        env=env,
        timeout=60,
    )
    assert completed.returncode == 0
    payload = json.loads(completed.stdout)
    assert payload["report"]["metadata"]["name"] == "notes.txt"
    log_lines = [json.loads(line) for line in completed.stderr.splitlines() if line.startswith("{")]
    assert any(line["message"] == "Analyzing file" for line in log_lines)
