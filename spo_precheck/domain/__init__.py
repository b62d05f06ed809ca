from .errors import (
    DestinationConnectionError,
    EngineError,
    EngineUnavailableError,
    FatalError,
    PreCheckError,
    ReportWriteError,
    SourceListError,
)
from .models import (
    AggregateResult,
    BatchSummary,
    Credential,
    FileLoad,
    PreCheckResult,
    SiteEntry,
    SiteOutcome,
)

__all__ = [
    "AggregateResult",
    "BatchSummary",
    "Credential",
    "DestinationConnectionError",
    "EngineError",
    "EngineUnavailableError",
    "FatalError",
    "FileLoad",
    "PreCheckError",
    "PreCheckResult",
    "ReportWriteError",
    "SiteEntry",
    "SiteOutcome",
    "SourceListError",
]
