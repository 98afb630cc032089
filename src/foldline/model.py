# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Core data model: rule node kinds, force-include entries, classification options.

Rule nodes themselves stay plain ``dict`` objects in the shape produced by
the ``css`` (reworkcss) parser, so declaration payloads and positions pass
through untouched.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

RuleNode = dict[str, Any]

# Node types that are always kept, unchanged
LEAF_AT_RULES = frozenset({"charset", "import", "namespace"})
# Kept without checking whether anything above the fold uses them
UNVERIFIED_AT_RULES = frozenset({"font-face", "keyframes"})
# Conditional group rules: nested rules are filtered, the condition is not evaluated
GROUPING_AT_RULES = frozenset({"media", "document", "supports"})

# Pseudo selectors that depend on an element: the element itself is tested instead
PRESERVED_PSEUDO_SELECTORS = (":before", ":after", ":visited", ":first-letter", ":first-line")

UNIVERSAL_SELECTOR = "*"


class MatchKind(StrEnum):
    LITERAL = "literal"
    REGEX = "regex"


@dataclass(frozen=True)
class ForceIncludeEntry:
    """A selector (or selector pattern) that is always treated as critical."""

    kind: MatchKind
    value: str
    _pattern: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind == MatchKind.REGEX:
            object.__setattr__(self, "_pattern", re.compile(self.value))

    @classmethod
    def literal(cls, value: str) -> ForceIncludeEntry:
        return cls(MatchKind.LITERAL, value)

    @classmethod
    def regex(cls, value: str) -> ForceIncludeEntry:
        return cls(MatchKind.REGEX, value)

    @classmethod
    def from_wire(cls, item: Any) -> ForceIncludeEntry:
        """Build an entry from the JSON wire format.

        ``{"type": "RegExp", "value": "^\\\\.btn-"}`` is a pattern; any other
        object with a ``value`` (or a bare string) is a literal selector.
        """
        if isinstance(item, str):
            return cls.literal(item)
        if not isinstance(item, dict) or not isinstance(item.get("value"), str):
            raise ValueError(f"force-include entry must be a string or {{'value': str}}, got {item!r}")
        if item.get("type") == "RegExp":
            return cls.regex(item["value"])
        return cls.literal(item["value"])

    def matches(self, selector: str) -> bool:
        if self._pattern is not None:
            return self._pattern.search(selector) is not None
        return self.value == selector


UNIVERSAL_ENTRY = ForceIncludeEntry.literal(UNIVERSAL_SELECTOR)


@dataclass(frozen=True)
class ClassificationOptions:
    """Options for one classification pass.

    ``force_include`` always starts with the universal selector, whatever the
    caller passes in.
    """

    force_include: tuple[ForceIncludeEntry, ...] = ()
    viewport_height: float = 900
    settle_delay_ms: int = 100

    def __post_init__(self) -> None:
        entries = tuple(self.force_include)
        if UNIVERSAL_ENTRY not in entries:
            entries = (UNIVERSAL_ENTRY, *entries)
        object.__setattr__(self, "force_include", entries)
        if self.viewport_height <= 0:
            raise ValueError(f"viewport_height must be positive, got {self.viewport_height}")
        if self.settle_delay_ms < 0:
            raise ValueError(f"settle_delay_ms must not be negative, got {self.settle_delay_ms}")

    @classmethod
    def build(
        cls,
        force_include: Iterable[Any] = (),
        *,
        viewport_height: float = 900,
        settle_delay_ms: int = 100,
    ) -> ClassificationOptions:
        """Build options from wire-format force-include items or ready entries."""
        entries = tuple(
            item if isinstance(item, ForceIncludeEntry) else ForceIncludeEntry.from_wire(item)
            for item in force_include
        )
        return cls(entries, viewport_height=viewport_height, settle_delay_ms=settle_delay_ms)

    def is_force_included(self, selector: str) -> bool:
        return any(entry.matches(selector) for entry in self.force_include)
