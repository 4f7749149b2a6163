from __future__ import annotations

from typing import Optional


class AegisProbeError(Exception):
    """Base class for errors raised by the analysis engine."""


class MagicOperationFailed(AegisProbeError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Magic operation failed: {cause}")
        self.cause = cause


class FileAnalysisFailed(AegisProbeError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"File analysis failed for {path}: {cause}")
        self.path = path
        self.cause = cause


class DecodeError(AegisProbeError):
    def __init__(self, decoder: str, reason: str) -> None:
        super().__init__(f"{decoder}: {reason}")
        self.decoder = decoder
        self.reason = reason


class ToolInvocationError(AegisProbeError):
    def __init__(self, command: str, reason: str, returncode: Optional[int] = None, timed_out: bool = False) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason
        self.returncode = returncode
        self.timed_out = timed_out


class ConfigError(AegisProbeError, ValueError):
    pass


class CryptoOperationFailed(AegisProbeError):
    pass
