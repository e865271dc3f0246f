"""
Prometheus text exposition writer (format 0.0.4).

Values are written from their Python type rather than run through
float(): an attribute the server reported as 71.0 stays "71.0" and one
reported as -3 stays "-3".
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List

from wls_exporter.metrics import MetricSample, Number, ScrapeCounters, ScrapeResult

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

SCRAPE_PREFIX = "wls_scrape_"

NO_CONFIGURATION = "No configuration defined."

# (name suffix, type, help, counter attribute)
_PERFORMANCE_METRICS = (
    ("mbeans_count_total", "counter", "Number of MBeans read during the scrape", "mbeans"),
    ("duration_seconds", "gauge", "Wall time spent on the scrape", "duration_seconds"),
    ("cpu_seconds", "gauge", "CPU time spent on the scrape", "cpu_seconds"),
)


def format_value(value: Number) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return repr(value)
    return str(int(value))


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_sample(name: str, labels: Dict[str, str], value: Number) -> str:
    if not labels:
        return f"{name} {format_value(value)}"
    label_str = ",".join(f'{k}="{escape_label_value(v)}"' for k, v in labels.items())
    return f"{name}{{{label_str}}} {format_value(value)}"


def _grouped(samples: Iterable[MetricSample]) -> List[MetricSample]:
    """Keep each metric's lines together, in order of first appearance."""
    by_name: Dict[str, List[MetricSample]] = {}
    for sample in samples:
        by_name.setdefault(sample.name, []).append(sample)
    return [sample for group in by_name.values() for sample in group]


def render_counters(counters: ScrapeCounters) -> List[str]:
    lines = []
    labels = {"instance": counters.instance}
    for suffix, metric_type, help_text, attr in _PERFORMANCE_METRICS:
        name = SCRAPE_PREFIX + suffix
        lines.append(f"# HELP {name} {help_text}")
        lines.append(f"# TYPE {name} {metric_type}")
        lines.append(format_sample(name, labels, getattr(counters, attr)))
    return lines


def render_comments(comments: Iterable[str]) -> str:
    """Comment-only body, used when there is nothing to scrape."""
    lines = [f"# {comment}" for comment in comments]
    if not lines:
        lines = [f"# {NO_CONFIGURATION}"]
    return "\n".join(lines) + "\n"


def render(result: ScrapeResult) -> str:
    lines = [f"# {comment}" for comment in result.comments]
    lines.extend(format_sample(s.name, s.labels, s.value) for s in _grouped(result.samples))
    lines.extend(render_counters(result.counters))
    return "\n".join(lines) + "\n"
