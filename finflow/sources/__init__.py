"""Finance data sources."""

from finflow.sources.interface import (
    FinanceDataSource,
    RecordNotFoundError,
    SourceError,
    SourceUnavailableError,
)
from finflow.sources.memory import InMemoryFinanceSource

__all__ = [
    "FinanceDataSource",
    "InMemoryFinanceSource",
    "RecordNotFoundError",
    "SourceError",
    "SourceUnavailableError",
]
