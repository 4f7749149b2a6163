from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Dict, List, Optional, Tuple

from aegisprobe.core.errors import ToolInvocationError
from aegisprobe.core.models import MitigationReport
from aegisprobe.infra.logging_utils import LOGGER
from aegisprobe.infra.tooling import DEFAULT_TIMEOUT, ToolRunner
from aegisprobe.plugins.base import MitigationCheck, PluginRegistry
from aegisprobe.plugins.mitigation_checks import default_check_registry

# slack for thread scheduling on top of the tool timeout
DEADLINE_GRACE = 0.5


class MitigationDetector:
    """Best-effort detection of compiled-in exploit mitigations.

    Each registered check runs its tool in its own worker. A check whose tool
    is missing, fails, times out, or yields unparseable output reports False
    without affecting the others.
    """

    def __init__(
        self,
        runner: ToolRunner,
        checks: Optional[PluginRegistry[MitigationCheck]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        executables: Optional[Dict[str, str]] = None,
    ) -> None:
        self.runner = runner
        self.checks = checks if checks is not None else default_check_registry()
        self.timeout = timeout
        self.executables = executables or {}

    def _run_check(self, check: MitigationCheck, path: str) -> Tuple[bool, bool]:
        """Returns the check result and whether the tool timed out."""
        command = check.command(path, self.executables.get(check.tool, check.tool))
        try:
            output = self.runner.run(command, timeout=self.timeout)
            return check.evaluate(output), False
        except (ToolInvocationError, ValueError) as exc:
            LOGGER.warning(
                "Mitigation check failed",
                extra={"extra_data": {"check": check.name, "path": path, "error": str(exc)}},
            )
            return False, isinstance(exc, ToolInvocationError) and exc.timed_out

    def _collect(self, path: str) -> Tuple[Dict[str, bool], List[str]]:
        results: Dict[str, bool] = {}
        timed_out: List[str] = []
        if not len(self.checks):
            return results, timed_out
        executor = ThreadPoolExecutor(max_workers=len(self.checks), thread_name_prefix="mitigation")
        try:
            futures: Dict[str, "Future[Tuple[bool, bool]]"] = {
                check.name: executor.submit(self._run_check, check, path) for check in self.checks
            }
            deadline = time.monotonic() + self.timeout + DEADLINE_GRACE
            for name, future in futures.items():
                try:
                    results[name], late = future.result(timeout=max(0.0, deadline - time.monotonic()))
                    if late:
                        timed_out.append(name)
                except FutureTimeoutError:
                    LOGGER.warning(
                        "Mitigation check timed out",
                        extra={"extra_data": {"check": name, "path": path, "timeout": self.timeout}},
                    )
                    results[name] = False
                    timed_out.append(name)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return results, timed_out

    def evaluate(self, path: str) -> Dict[str, bool]:
        return self._collect(path)[0]

    def assess(self, path: str) -> Tuple[MitigationReport, Tuple[str, ...]]:
        """Report plus the names of checks that ran out of time."""
        results, timed_out = self._collect(str(path))
        report = MitigationReport(
            aslr=results.get("aslr", False),
            dep=results.get("dep", False),
            stack_canary=results.get("stack_canary", False),
            relro=results.get("relro", False),
            pie=results.get("pie", False),
            nx=results.get("nx", False),
        )
        LOGGER.info(
            "Mitigation analysis complete",
            extra={"extra_data": {"path": str(path), "timed_out": timed_out, **report.to_dict()}},
        )
        return report, tuple(timed_out)

    def analyze_security(self, path: str) -> MitigationReport:
        return self.assess(path)[0]
