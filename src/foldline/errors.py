# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""foldline exception hierarchy.

All foldline-specific errors inherit from FoldlineError, allowing callers
to catch the base class for any extraction failure or specific subclasses
for targeted handling.

Fatal errors (input, browser, navigation, output) abort the run.
InvalidSelectorError is recoverable: the classifier downgrades it to
"not critical" and carries on.
"""

from __future__ import annotations


class FoldlineError(Exception):
    """Base exception for all foldline errors."""


class InputError(FoldlineError):
    """Required input is missing or malformed (AST file, options, viewport)."""


class BrowserError(FoldlineError):
    """Browser session launch or page interaction failure."""


class NavigationError(BrowserError):
    """The target page failed to load. Classification never runs."""

    def __init__(self, url: str, reason: str, *, resource_url: str = "") -> None:
        self.url = url
        self.reason = reason
        self.resource_url = resource_url
        super().__init__(f"Error opening url '{resource_url or url}': {reason}")


class InvalidSelectorError(FoldlineError):
    """A selector cannot be evaluated by the document's query engine."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Invalid selector: {selector!r}")
        self.selector = selector


class OutputError(FoldlineError):
    """The pruned rule tree could not be serialised."""
