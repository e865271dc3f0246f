"""
Base collector interface.

A collector turns one scrape request into a ScrapeResult. This keeps the
HTTP endpoint and the CLI decoupled from where the data comes from.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from wls_exporter.metrics import ScrapeResult


class MetricsCollector(ABC):
    """Interface for all metrics sources."""

    @abstractmethod
    def collect(self, headers: Optional[Mapping[str, str]] = None) -> Optional[ScrapeResult]:
        """Run one scrape. Returns None when there is nothing configured to scrape."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
