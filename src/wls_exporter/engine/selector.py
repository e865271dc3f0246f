"""
Selector tree built from the declarative query configuration.

Each node of the YAML map describes one level of the MBean relationship
tree. The reserved keys below fill in the node itself; every other key
names a nested relationship and becomes a child selector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from wls_exporter.errors import ConfigurationError

TYPE = "type"
PREFIX = "prefix"
KEY = "key"
KEY_NAME = "keyName"
VALUES = "values"

RESERVED_KEYS = (TYPE, PREFIX, KEY, KEY_NAME, VALUES)


@dataclass(frozen=True)
class SelectorNode:
    type: Optional[str] = None
    prefix: Optional[str] = None
    key: Optional[str] = None
    key_name: Optional[str] = None
    values: Tuple[str, ...] = ()
    children: Dict[str, "SelectorNode"] = field(default_factory=dict)

    @property
    def label_name(self) -> Optional[str]:
        """Label written to the output for this node's key, if it has one."""
        if not self.key:
            return None
        return self.key_name or self.key

    def is_empty(self) -> bool:
        return not (self.type or self.prefix or self.key or self.values or self.children)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], path: str = "") -> "SelectorNode":
        """Build a selector (and its children) from a parsed config mapping."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"selector '{path or '<root>'}' must be a mapping, not {type(data).__name__}")

        children = {}
        for name, value in data.items():
            if name in RESERVED_KEYS:
                continue
            child_path = f"{path}.{name}" if path else str(name)
            children[str(name)] = cls.from_dict(value, child_path)

        return cls(
            type=_scalar(data, TYPE, path),
            prefix=_scalar(data, PREFIX, path),
            key=_scalar(data, KEY, path),
            key_name=_scalar(data, KEY_NAME, path),
            values=_values(data, path),
            children=children,
        )


def _scalar(data: Mapping[str, Any], name: str, path: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(
            f"'{name}' in selector '{path or '<root>'}' must be a string, not {type(value).__name__}"
        )
    return value


def _values(data: Mapping[str, Any], path: str) -> Tuple[str, ...]:
    value = data.get(VALUES)
    if value is None:
        return ()
    # YAML shorthand: "values: openSessionsCurrentCount"
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigurationError(f"'values' in selector '{path or '<root>'}' must be a list of strings")
