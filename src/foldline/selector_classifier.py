# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-selector critical-path classification.

A selector is critical when it is force-included, when it is really an
at-rule the parser mislabelled as a plain rule (``@viewport``), when it is
purely pseudo and so cannot be matched against the page, or when at least
one element it matches is above the fold.

Selectors with pseudo classes/elements are reduced to something
``querySelectorAll`` can match before testing:

- ``a:before``/``a::after`` and friends depend on the element, so ``a`` is tested;
- ``::-moz-placeholder`` has nothing left to match and is kept as is;
- ``button::-moz-focus-inner`` drops the vendor pseudo and tests ``button``.
"""

from __future__ import annotations

import logging
import re

from .dom import Document, is_above_fold
from .errors import InvalidSelectorError
from .model import PRESERVED_PSEUDO_SELECTORS, ClassificationOptions

logger = logging.getLogger(__name__)

# One or two leading colons, every occurrence
_PRESERVED_PSEUDO_RE = re.compile("|".join(":?" + re.escape(p) for p in PRESERVED_PSEUDO_SELECTORS))
_ANY_PSEUDO_RE = re.compile(r"::?[a-zA-Z0-9\-_]*")
_VENDOR_PSEUDO_RE = re.compile(r"::?-[a-z-]*")


def reduce_selector(selector: str) -> str | None:
    """Return a DOM-matchable approximation of *selector*.

    Returns None when the selector is purely pseudo and cannot be matched
    against any element.
    """
    if ":" not in selector:
        return selector

    reduced = _PRESERVED_PSEUDO_RE.sub("", selector)
    if not _ANY_PSEUDO_RE.sub("", reduced).strip():
        return None
    return _VENDOR_PSEUDO_RE.sub("", reduced)


async def is_critical(selector: str, options: ClassificationOptions, document: Document) -> bool:
    """Decide whether *selector* affects the initial viewport."""
    if options.is_force_included(selector.strip()):
        return True

    # @viewport, @-ms-viewport: parsed as plain rules, kept as at-rules
    if selector.startswith("@"):
        return True

    reduced = reduce_selector(selector)
    if reduced is None:
        # ::-moz-placeholder and the like: unmatchable, may still affect above the fold styles
        return True

    try:
        elements = await document.query_all(reduced)
    except InvalidSelectorError:
        logger.debug("Dropping invalid selector %r (tested as %r)", selector, reduced)
        return False

    for element in elements:
        if await is_above_fold(element, options.viewport_height):
            return True
    return False
