"""
Walks a management API response with the selector tree that produced the
request, turning rows into labelled samples.

Labels accumulate on the way down: a servlet row nested under a component
row carries the component's label first, then its own. The label stack is
a tuple handed to each recursive call, so a row's label is visible exactly
within that row's subtree.

A selector with a `type` only accepts rows whose reported type matches;
rows of other types are neither counted nor emitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from wls_exporter.engine.naming import NameFormatter
from wls_exporter.engine.query import SERVER_RUNTIMES, TYPE_FIELD_NAME, root_selector
from wls_exporter.engine.selector import SelectorNode
from wls_exporter.errors import ResponseFormatError
from wls_exporter.metrics import MetricSample, Number

log = logging.getLogger(__name__)

Labels = Tuple[Tuple[str, str], ...]

# Collections come back wrapped as {"items": [...]}
ITEMS = "items"


@dataclass
class ScrapeContext:
    """Private state of one walk. Never shared between scrapes."""

    formatter: NameFormatter
    instance: str = ""
    rows: int = 0
    samples: List[MetricSample] = field(default_factory=list)


class ResponseWalker:

    def __init__(self, tree: SelectorNode, formatter: Optional[NameFormatter] = None, instance: str = ""):
        self._tree = tree
        self._formatter = formatter or NameFormatter()
        self._instance = instance

    def walk(self, response: Mapping[str, Any]) -> ScrapeContext:
        if not isinstance(response, Mapping):
            raise ResponseFormatError(f"expected a JSON object, got {type(response).__name__}")

        tree = self._tree
        # A domainRuntime search answers with the server runtimes on top
        if SERVER_RUNTIMES in response and SERVER_RUNTIMES not in tree.children:
            tree = root_selector(tree)

        context = ScrapeContext(formatter=self._formatter, instance=self._instance)
        # The document itself is the root row; it is not an MBean of its own
        self._visit_row(tree, response, (), context)
        return context

    def _visit_element(self, node: SelectorNode, element: Any, labels: Labels, context: ScrapeContext):
        for row in _rows(element):
            if node.type and row.get(TYPE_FIELD_NAME, node.type) != node.type:
                continue
            context.rows += 1
            self._visit_row(node, row, labels, context)

    def _visit_row(self, node: SelectorNode, row: Mapping[str, Any], labels: Labels, context: ScrapeContext):
        if node.key:
            key_value = row.get(node.key)
            if key_value is None:
                log.debug("%s: row has no key attribute '%s'", context.instance, node.key)
            else:
                labels = labels + ((node.label_name, _label_value(key_value)),)

        for value_name in node.values:
            if value_name == node.key:
                continue
            if value_name not in row:
                log.debug("%s: row has no attribute '%s'", context.instance, value_name)
                continue
            value = _numeric(row[value_name])
            if value is None:
                log.debug("%s: skipping non-numeric attribute '%s': %r", context.instance, value_name, row[value_name])
                continue
            context.samples.append(MetricSample(
                name=context.formatter.format(node.prefix, value_name),
                labels=dict(labels),
                value=value,
            ))

        for name, child in node.children.items():
            element = row.get(name)
            if element is not None:
                self._visit_element(child, element, labels, context)


def translate(
    tree: SelectorNode,
    response: Mapping[str, Any],
    formatter: Optional[NameFormatter] = None,
    instance: str = "",
) -> Tuple[List[MetricSample], int]:
    """Return the samples for one query response and the number of MBean rows read."""
    context = ResponseWalker(tree, formatter, instance).walk(response)
    return context.samples, context.rows


def _rows(element: Any) -> Iterable[Mapping[str, Any]]:
    if isinstance(element, Mapping):
        items = element.get(ITEMS)
        rows = items if isinstance(items, list) else [element]
    elif isinstance(element, list):
        rows = element
    else:
        raise ResponseFormatError(f"expected an object or a list of objects, got {type(element).__name__}")

    for row in rows:
        if not isinstance(row, Mapping):
            raise ResponseFormatError(f"expected an object in group, got {type(row).__name__}")
        yield row


def _numeric(value: Any) -> Optional[Number]:
    # bool is an int subclass but "true" is not a measurement
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _label_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
