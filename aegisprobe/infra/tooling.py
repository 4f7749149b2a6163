from __future__ import annotations

import subprocess
from typing import Protocol, Sequence

from aegisprobe.core.errors import ToolInvocationError

DEFAULT_TIMEOUT = 8.0


class ToolRunner(Protocol):
    def run(self, command: Sequence[str], timeout: float = DEFAULT_TIMEOUT) -> str:
        ...


class SubprocessToolRunner:
    """Runs inspection tools and returns their decoded stdout.

    Every failure mode (missing binary, non-zero exit, timeout) is reported
    as ToolInvocationError. The child is killed on timeout by subprocess.run.
    """

    def run(self, command: Sequence[str], timeout: float = DEFAULT_TIMEOUT) -> str:
        argv = list(command)
        label = " ".join(argv[:2])
        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                timeout=timeout,
                check=True,
            )
        except FileNotFoundError as exc:
            raise ToolInvocationError(label, "tool not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolInvocationError(label, f"timed out after {timeout}s", timed_out=True) from exc
        except subprocess.CalledProcessError as exc:
            raise ToolInvocationError(label, "non-zero exit status", exc.returncode) from exc
        except OSError as exc:
            raise ToolInvocationError(label, str(exc)) from exc
        return completed.stdout.decode(errors="ignore")
