from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

from aegisprobe.core.binary_layout import BinaryLayoutInspector
from aegisprobe.core.entropy import shannon_entropy
from aegisprobe.core.errors import FileAnalysisFailed
from aegisprobe.core.mitigation import MitigationDetector
from aegisprobe.core.models import BinaryLayout, FileAnalysis, FileMetadata, MitigationReport
from aegisprobe.core.signatures import detect_format
from aegisprobe.core.strings import extract_strings
from aegisprobe.infra.cache import TTLCache
from aegisprobe.infra.config import AnalysisSettings
from aegisprobe.infra.filesystem import hash_bytes, read_evidence
from aegisprobe.infra.logging_utils import LOGGER
from aegisprobe.infra.tooling import SubprocessToolRunner, ToolRunner


class FileAnalysisService:
    def __init__(
        self,
        detector: MitigationDetector,
        layout_inspector: Optional[BinaryLayoutInspector] = None,
        min_string_length: int = 4,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.detector = detector
        self.layout_inspector = layout_inspector
        self.min_string_length = min_string_length
        self.cache = cache

    @classmethod
    def from_settings(
        cls,
        settings: AnalysisSettings,
        runner: Optional[ToolRunner] = None,
        cache: Optional[TTLCache] = None,
    ) -> "FileAnalysisService":
        runner = runner or SubprocessToolRunner()
        detector = MitigationDetector(runner, timeout=settings.tool_timeout, executables={"readelf": settings.readelf})
        inspector = BinaryLayoutInspector(runner, timeout=settings.tool_timeout, executable=settings.objdump)
        return cls(detector, inspector, min_string_length=settings.min_string_length, cache=cache)

    def _tool_findings(self, path: str, sha256: str) -> Tuple[MitigationReport, BinaryLayout]:
        cache_key = ("file", sha256)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                LOGGER.debug("Tool findings served from cache", extra={"extra_data": {"sha256": sha256}})
                return cached
        security, late_checks = self.detector.assess(path)
        layout = self.layout_inspector.inspect(path) if self.layout_inspector else BinaryLayout()
        if late_checks or layout.timed_out:
            # timed-out findings are never cached
            LOGGER.warning(
                "Tool findings not cached after timeout",
                extra={"extra_data": {"sha256": sha256, "checks": list(late_checks), "layout": list(layout.timed_out)}},
            )
        elif self.cache is not None:
            self.cache.set(cache_key, (security, layout))
        return security, layout

    def analyze_file(self, path: Union[str, Path]) -> FileAnalysis:
        try:
            evidence = read_evidence(path)
        except OSError as exc:
            LOGGER.error("Evidence read failed", extra={"extra_data": {"path": str(path), "error": str(exc)}})
            raise FileAnalysisFailed(str(path), exc) from exc
        LOGGER.info("Analyzing file", extra={"extra_data": {"path": str(evidence.path), "size": evidence.size}})
        hashes = hash_bytes(evidence.data)
        metadata = FileMetadata(
            name=evidence.path.name,
            size=evidence.size,
            created=evidence.created,
            modified=evidence.modified,
            type=detect_format(evidence.data),
            hash=hashes,
        )
        security, layout = self._tool_findings(str(evidence.path), hashes.sha256)
        return FileAnalysis(
            metadata=metadata,
            strings=tuple(extract_strings(evidence.data, self.min_string_length)),
            entropy=shannon_entropy(evidence.data),
            security=security,
            sections=layout.sections,
            imports=layout.imports,
            exports=layout.exports,
            resources=layout.resources,
        )
