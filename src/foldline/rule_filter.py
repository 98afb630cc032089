# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Recursive AST rule filter.

Walks the rule tree in order and keeps what the initial viewport needs:

- ``rule``: only the critical selectors; dropped when none remain
- ``charset``/``import``/``namespace``: always kept
- ``font-face``/``keyframes``: always kept (usage is not verified)
- ``media``/``document``/``supports``: nested rules filtered recursively,
  kept when any survive; the condition itself is never evaluated
- anything else: dropped

Media conditions are not matched against the viewport.
Extractions for several viewports are later concatenated, and dropping
``@media`` blocks here lets an unconditional mobile rule override a
desktop media rule in the combined output. Sibling order is preserved at
every level for the same reason.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence

from .dom import Document
from .model import GROUPING_AT_RULES, LEAF_AT_RULES, UNVERIFIED_AT_RULES, ClassificationOptions, RuleNode
from .selector_classifier import is_critical

logger = logging.getLogger(__name__)


async def _filter_in_place(
    rules: Sequence[RuleNode],
    options: ClassificationOptions,
    document: Document,
) -> list[RuleNode]:
    kept: list[RuleNode] = []
    for rule in rules:
        rule_type = rule.get("type")

        if rule_type == "rule":
            selectors = [s for s in rule.get("selectors", []) if await is_critical(s, options, document)]
            if selectors:
                rule["selectors"] = selectors
                kept.append(rule)
        elif rule_type in LEAF_AT_RULES or rule_type in UNVERIFIED_AT_RULES:
            kept.append(rule)
        elif rule_type in GROUPING_AT_RULES:
            nested = await _filter_in_place(rule.get("rules", []), options, document)
            if nested:
                rule["rules"] = nested
                kept.append(rule)
        else:
            logger.debug("Dropping unsupported rule type %r", rule_type)
    return kept


async def filter_rules(
    rules: Sequence[RuleNode],
    options: ClassificationOptions,
    document: Document,
) -> list[RuleNode]:
    """Return the critical subset of *rules*, in source order.

    Works on a deep copy; the caller's tree is left untouched.
    """
    working = copy.deepcopy(list(rules))
    critical = await _filter_in_place(working, options, document)
    logger.debug("Kept %d of %d top-level rules", len(critical), len(working))
    return critical
