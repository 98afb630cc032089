# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document/Element protocol implementations backed by a live Playwright page.

Selectors go through ``document.querySelectorAll`` rather than Playwright's
own selector engine, so ``>>``, ``text=`` and friends get no special meaning
and invalid CSS fails the same way it would in page script.
"""

from __future__ import annotations

import logging

from playwright.async_api import ElementHandle, JSHandle, Page
from playwright.async_api import Error as PlaywrightError

from .errors import InvalidSelectorError

logger = logging.getLogger(__name__)

_QUERY_ALL_JS = "(selector) => Array.from(document.querySelectorAll(selector))"
# A single evaluate: no page task can run between the override and the restore
_BOUNDING_TOP_WITH_CLEAR_JS = """(el, clear) => {
    const original = el.style.clear || '';
    el.style.clear = clear;
    try {
        return el.getBoundingClientRect().top;
    } finally {
        el.style.clear = original;
    }
}"""
_POSITION_JS = "(el) => window.getComputedStyle(el, null).position"

_INVALID_SELECTOR_MARKERS = ("is not a valid selector", "syntaxerror")


def _is_invalid_selector_error(exc: PlaywrightError) -> bool:
    msg = str(exc).lower()
    return any(marker in msg for marker in _INVALID_SELECTOR_MARKERS)


class PlaywrightElement:
    """An element handle measured through page-side evaluation."""

    __slots__ = ("_handle",)

    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle

    async def bounding_top_with_clear(self, clear: str) -> float:
        return float(await self._handle.evaluate(_BOUNDING_TOP_WITH_CLEAR_JS, clear))

    async def computed_position(self) -> str:
        return await self._handle.evaluate(_POSITION_JS)


class PlaywrightDocument:
    """The document of a loaded Playwright page.

    Element handles from one ``query_all`` call stay valid until the next
    call or ``dispose()``. The classifier finishes with one selector's
    elements before querying the next, so only one batch is alive at a time.
    """

    def __init__(self, page: Page) -> None:
        self._page = page
        self._live: list[JSHandle] = []

    async def query_all(self, selector: str) -> list[PlaywrightElement]:
        await self.dispose()
        try:
            array = await self._page.evaluate_handle(_QUERY_ALL_JS, selector)
        except PlaywrightError as exc:
            if _is_invalid_selector_error(exc):
                raise InvalidSelectorError(selector) from exc
            raise

        try:
            properties = await array.get_properties()
        finally:
            await array.dispose()

        indexed: list[tuple[int, ElementHandle]] = []
        for key, handle in properties.items():
            element = handle.as_element()
            if key.isdigit() and element is not None:
                indexed.append((int(key), element))
            self._live.append(handle)
        indexed.sort(key=lambda pair: pair[0])
        return [PlaywrightElement(element) for _, element in indexed]

    async def dispose(self) -> None:
        """Release element handles from the last query."""
        handles, self._live = self._live, []
        for handle in handles:
            try:
                await handle.dispose()
            except PlaywrightError:
                logger.debug("Element handle already gone", exc_info=True)
