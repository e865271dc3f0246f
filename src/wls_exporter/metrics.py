"""
Value objects produced by one scrape.

A MetricSample is one Prometheus series point. Its value keeps the
Python type it arrived with: an int renders as "12", a float as "71.0",
so a gauge read as floating point never turns into an integer series
downstream.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class MetricSample:
    name: str
    labels: Dict[str, str]
    value: Number


@dataclass
class ScrapeCounters:
    """Performance counters reported alongside the samples of one scrape."""

    instance: str
    mbeans: int = 0
    duration_seconds: float = 0.0
    cpu_seconds: float = 0.0


@dataclass
class ScrapeResult:
    counters: ScrapeCounters
    samples: List[MetricSample] = field(default_factory=list)

    # Diagnostic comment lines, e.g. a query whose exchange failed
    comments: List[str] = field(default_factory=list)

    # Set-Cookie header from the management server, forwarded to the caller
    set_cookie: Optional[str] = None
