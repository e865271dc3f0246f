"""Metric name derivation: optional prefix plus optional snake-case transform."""

from __future__ import annotations

import re
from typing import Optional

# "HTTPSessions" -> "HTTP_Sessions"
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
# "openSessions" -> "open_Sessions", "servlet2Count" stays joined at the digit
_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _CASE_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


class NameFormatter:

    def __init__(self, snake_case: bool = False):
        self.snake_case = snake_case

    def format(self, prefix: Optional[str], raw_name: str) -> str:
        name = snake_case(raw_name) if self.snake_case else raw_name
        return (prefix or "") + name
