# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""foldline: critical (above-the-fold) CSS extraction.

Filters a parsed stylesheet AST down to the rules whose selectors match
something visible in the initial viewport of a page rendered by Chromium.
"""

from __future__ import annotations

from .dom import Document, Element, is_above_fold
from .errors import (
    BrowserError,
    FoldlineError,
    InputError,
    InvalidSelectorError,
    NavigationError,
    OutputError,
)
from .extractor import ExtractionConfig, extract_critical_rules, extract_from_file
from .model import ClassificationOptions, ForceIncludeEntry, MatchKind, RuleNode
from .render import schedule_classification
from .rule_filter import filter_rules
from .selector_classifier import is_critical, reduce_selector

__all__ = [
    "BrowserError",
    "ClassificationOptions",
    "Document",
    "Element",
    "ExtractionConfig",
    "FoldlineError",
    "ForceIncludeEntry",
    "InputError",
    "InvalidSelectorError",
    "MatchKind",
    "NavigationError",
    "OutputError",
    "RuleNode",
    "extract_critical_rules",
    "extract_from_file",
    "filter_rules",
    "is_above_fold",
    "is_critical",
    "reduce_selector",
    "schedule_classification",
]
