"""Tests for the Prometheus text writer."""

import re

from wls_exporter.collector.exposition import (
    escape_label_value,
    format_sample,
    format_value,
    render,
    render_comments,
)
from wls_exporter.metrics import MetricSample, ScrapeCounters, ScrapeResult

# name{labels} value, with Prometheus-legal metric and label names
_SAMPLE_LINE_RE = re.compile(
    r'^[a-zA-Z_:][a-zA-Z0-9_:]*(\{([a-zA-Z_][a-zA-Z0-9_]*="([^"\\]|\\.)*",?)*\})? \S+$'
)


def _result(samples=(), mbeans=0, comments=()):
    return ScrapeResult(
        counters=ScrapeCounters(instance="myhost:7654", mbeans=mbeans),
        samples=list(samples),
        comments=list(comments),
    )


def test_integer_values_stay_integral():
    assert format_value(12) == "12"
    assert format_value(-3) == "-3"


def test_float_values_keep_decimal_point():
    assert format_value(71.0) == "71.0"
    assert format_value(12.3) == "12.3"
    assert format_value(2.0) == "2.0"


def test_special_float_values():
    assert format_value(float("nan")) == "NaN"
    assert format_value(float("inf")) == "+Inf"
    assert format_value(float("-inf")) == "-Inf"


def test_format_sample_with_labels_in_order():
    line = format_sample("groupValue_testSample1", {"app": "bank", "name": "first"}, 12)
    assert line == 'groupValue_testSample1{app="bank",name="first"} 12'


def test_format_sample_without_labels():
    assert format_sample("uptime", {}, 5) == "uptime 5"


def test_label_values_escaped():
    assert escape_label_value('say "hi"\\\n') == 'say \\"hi\\"\\\\\\n'


def test_render_end_to_end_lines():
    text = render(_result([
        MetricSample("g_a", {"name": "x"}, 1),
        MetricSample("g_b", {"name": "x"}, 2.0),
    ], mbeans=1))

    lines = text.splitlines()
    assert lines[0] == 'g_a{name="x"} 1'
    assert lines[1] == 'g_b{name="x"} 2.0'
    assert 'wls_scrape_mbeans_count_total{instance="myhost:7654"} 1' in lines


def test_render_groups_lines_by_metric_name():
    text = render(_result([
        MetricSample("a", {"name": "first"}, 1),
        MetricSample("b", {"name": "first"}, 2),
        MetricSample("a", {"name": "second"}, 3),
        MetricSample("b", {"name": "second"}, 4),
    ]))

    sample_lines = [line for line in text.splitlines() if not line.startswith(("#", "wls_scrape_"))]
    assert sample_lines == [
        'a{name="first"} 1',
        'a{name="second"} 3',
        'b{name="first"} 2',
        'b{name="second"} 4',
    ]


def test_render_performance_counters():
    result = _result(mbeans=6)
    result.counters.duration_seconds = 0.25
    result.counters.cpu_seconds = 0.125
    text = render(result)

    assert "# TYPE wls_scrape_mbeans_count_total counter" in text
    assert 'wls_scrape_mbeans_count_total{instance="myhost:7654"} 6' in text
    assert 'wls_scrape_duration_seconds{instance="myhost:7654"} 0.25' in text
    assert 'wls_scrape_cpu_seconds{instance="myhost:7654"} 0.125' in text


def test_render_follows_prometheus_line_format():
    text = render(_result([
        MetricSample("groupValue_testSample1", {"name": "first"}, 12),
        MetricSample("groupValue_testSample2", {"name": 'odd "one"'}, 12.3),
    ], mbeans=3, comments=["Query 2 failed: timeout"]))

    for line in text.splitlines():
        if line.startswith("#"):
            continue
        assert _SAMPLE_LINE_RE.match(line), line


def test_failed_query_comments_come_first():
    text = render(_result([MetricSample("a", {}, 1)], comments=["Query 2 failed: timeout"]))
    assert text.splitlines()[0] == "# Query 2 failed: timeout"


def test_render_comments_only():
    text = render_comments(["No configuration defined."])
    assert text == "# No configuration defined.\n"


def test_render_comments_never_empty():
    text = render_comments([])
    assert text.strip()
    assert all(line.startswith("#") for line in text.splitlines())
