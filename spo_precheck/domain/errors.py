from __future__ import annotations


class PreCheckError(Exception):
    """Base class for everything this package raises on purpose."""


class FatalError(PreCheckError):
    """Aborts the whole run; the CLI maps it to exit code 1."""


class EngineUnavailableError(FatalError):
    pass


class SourceListError(FatalError):
    pass


class DestinationConnectionError(FatalError):
    pass


class ReportWriteError(FatalError):
    pass


class EngineError(PreCheckError):
    """A single engine call failed. Recoverable at the per-site level."""

    def __init__(self, message: str, stderr_tail: str = ""):
        super().__init__(message)
        self.stderr_tail = stderr_tail
