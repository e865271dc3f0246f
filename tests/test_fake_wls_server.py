"""Sanity checks for the fake management server's MBean tree and query handling."""

from wls_exporter.engine.query import compile_query, compile_selector
from wls_exporter.engine.selector import SelectorNode
from wls_exporter.engine.walker import translate
from wls_exporter.mock.fake_wls_server import FakeRuntime, apply_query

SERVLET_SELECTOR = {
    "applicationRuntimes": {
        "key": "name",
        "componentRuntimes": {
            "key": "name",
            "servlets": {"key": "servletName", "values": ["invocationTotalCount"]},
        },
    }
}


def test_apply_query_selects_fields():
    mbean = {"name": "ms1", "state": "RUNNING", "uptime": 5}
    assert apply_query({"fields": ["name", "uptime", "absent"]}, mbean) == {"name": "ms1", "uptime": 5}


def test_apply_query_without_fields_returns_scalars():
    mbean = {"name": "ms1", "JVMRuntime": {"uptime": 5}}
    assert apply_query({}, mbean) == {"name": "ms1"}


def test_apply_query_wraps_collections_in_items():
    mbean = {"servlets": [{"servletName": "a", "count": 1}, {"servletName": "b", "count": 2}]}
    result = apply_query({"fields": [], "children": {"servlets": {"fields": ["count"]}}}, mbean)

    assert result == {"servlets": {"items": [{"count": 1}, {"count": 2}]}}


def test_counters_advance_between_readings():
    runtime = FakeRuntime(seed=7)
    tree = SelectorNode.from_dict(SERVLET_SELECTOR)
    query = compile_selector(tree).to_dict()

    first, _ = translate(tree, apply_query(query, runtime.server_runtime()))
    second, _ = translate(tree, apply_query(query, runtime.server_runtime()))

    assert [s.labels for s in first] == [s.labels for s in second]
    assert all(b.value >= a.value for a, b in zip(first, second))


def test_deterministic_with_same_seed():
    assert FakeRuntime(seed=99).server_runtime() == FakeRuntime(seed=99).server_runtime()


def test_domain_query_answered_under_server_runtimes():
    runtime = FakeRuntime(server_name="ms1")
    tree = SelectorNode.from_dict(SERVLET_SELECTOR)

    response = apply_query(compile_query(tree).to_dict(), runtime.domain_runtime())
    samples, _ = translate(tree, response)

    assert len(samples) == 3
    assert all(s.labels["name"] == "bank-web" for s in samples)
    assert {s.labels["servletName"] for s in samples} == {"JspServlet", "AccountServlet", "FileServlet"}
