"""
Compiles selector trees into the JSON search body the WebLogic REST
management API expects:

    {"links": [], "fields": ["name", "openSessionsCurrentCount"],
     "children": {"servlets": {"links": [], "fields": [...]}}}

The response to such a request has the same nesting, which is what lets
the walker reuse the selector tree to read it back.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from wls_exporter.engine.selector import SelectorNode

# Field the REST API uses to report an MBean's concrete type
TYPE_FIELD_NAME = "type"

# Every domain-wide query hangs off this relationship
SERVER_RUNTIMES = "serverRuntimes"
DEFAULT_SERVER_KEY = "name"


@dataclass
class QueryObject:
    fields: List[str] = field(default_factory=list)
    children: Dict[str, "QueryObject"] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"links": list(self.links), "fields": list(self.fields)}
        if self.children:
            result["children"] = {name: child.to_dict() for name, child in self.children.items()}
        return result


def compile_selector(node: SelectorNode) -> QueryObject:
    fields = []
    if node.key:
        fields.append(node.key)
    fields.extend(value for value in node.values if value != node.key)
    if node.type:
        fields.append(TYPE_FIELD_NAME)

    return QueryObject(
        fields=fields,
        children={name: compile_selector(child) for name, child in node.children.items()},
    )


def root_selector(node: SelectorNode) -> SelectorNode:
    """Place a declared tree under the server-runtime relationship.

    A tree that already names serverRuntimes at the top is returned as is.
    Otherwise the whole tree becomes the serverRuntimes node of an empty
    root, keyed by server name unless it declares a key of its own.
    """
    if SERVER_RUNTIMES in node.children:
        return node
    server = dataclasses.replace(node, key=node.key or DEFAULT_SERVER_KEY)
    return SelectorNode(children={SERVER_RUNTIMES: server})


def compile_query(node: SelectorNode) -> QueryObject:
    """Compile the domain-rooted form of a selector tree."""
    return compile_selector(root_selector(node))


def request_body(query: QueryObject) -> str:
    """Serialize a query the way it goes on the wire (no whitespace)."""
    return json.dumps(query.to_dict(), separators=(",", ":"))
