# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document/element protocols and the above-the-fold element test.

The classifier only talks to these protocols. ``foldline.playwright_dom``
backs them with a live Chromium page; tests back them with in-memory fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Element(Protocol):
    """A rendered DOM element."""

    async def bounding_top_with_clear(self, clear: str) -> float:
        """Return ``getBoundingClientRect().top`` measured with inline ``clear`` set to *clear*.

        The inline value is set, measured and restored in one page-side step,
        so page script never observes the temporary style.
        """
        ...

    async def computed_position(self) -> str:
        """Return the resolved CSS ``position`` value."""
        ...


@runtime_checkable
class Document(Protocol):
    """A rendered document that can be queried with CSS selectors."""

    async def query_all(self, selector: str) -> Sequence[Element]:
        """Return matching elements in document order.

        Raises:
            InvalidSelectorError: the query engine rejects *selector*.
        """
        ...


async def is_above_fold(element: Element, viewport_height: float) -> bool:
    """Return True when *element* is visible in the initial viewport.

    ``clear`` is forced to ``none`` while measuring: an element that clears
    earlier floats would otherwise report a position below them. The element
    restores its original inline value within the same measurement.

    Fixed-position elements are always kept.
    """
    above_fold = await element.bounding_top_with_clear("none") < viewport_height

    if not above_fold and await element.computed_position() == "fixed":
        logger.debug("Force keeping fixed position element")
        return True
    return above_fold
