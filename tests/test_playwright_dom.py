# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the Playwright-backed Document/Element implementations (mocked page)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from foldline.dom import Document, Element
from foldline.errors import InvalidSelectorError
from foldline.playwright_dom import PlaywrightDocument, PlaywrightElement


def _handle(element: object | None) -> MagicMock:
    handle = MagicMock()
    handle.as_element.return_value = element
    handle.dispose = AsyncMock()
    return handle


def _page_with(properties: dict[str, MagicMock]) -> tuple[MagicMock, MagicMock]:
    array = MagicMock()
    array.get_properties = AsyncMock(return_value=properties)
    array.dispose = AsyncMock()
    page = MagicMock()
    page.evaluate_handle = AsyncMock(return_value=array)
    return page, array


class TestQueryAll:
    @pytest.mark.asyncio
    async def test_returns_elements_in_document_order(self):
        first, second = MagicMock(name="first"), MagicMock(name="second")
        page, _ = _page_with({"1": _handle(second), "0": _handle(first), "length": _handle(None)})
        elements = await PlaywrightDocument(page).query_all(".item")
        assert [e._handle for e in elements] == [first, second]

    @pytest.mark.asyncio
    async def test_selector_passed_to_page(self):
        page, _ = _page_with({})
        await PlaywrightDocument(page).query_all("nav > a")
        assert page.evaluate_handle.call_args.args[1] == "nav > a"

    @pytest.mark.asyncio
    async def test_no_matches(self):
        page, array = _page_with({})
        assert await PlaywrightDocument(page).query_all(".missing") == []
        array.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_selector_raises(self):
        page = MagicMock()
        page.evaluate_handle = AsyncMock(
            side_effect=PlaywrightError(
                "SyntaxError: Failed to execute 'querySelectorAll' on 'Document': 'a[' is not a valid selector."
            )
        )
        with pytest.raises(InvalidSelectorError) as exc_info:
            await PlaywrightDocument(page).query_all("a[")
        assert exc_info.value.selector == "a["

    @pytest.mark.asyncio
    async def test_other_page_errors_propagate(self):
        page = MagicMock()
        page.evaluate_handle = AsyncMock(side_effect=PlaywrightError("Target page, context or browser has been closed"))
        with pytest.raises(PlaywrightError):
            await PlaywrightDocument(page).query_all("p")

    @pytest.mark.asyncio
    async def test_previous_batch_disposed_on_next_query(self):
        old = _handle(MagicMock())
        page, _ = _page_with({"0": old})
        doc = PlaywrightDocument(page)
        await doc.query_all("p")
        old.dispose.assert_not_awaited()
        page.evaluate_handle.return_value.get_properties.return_value = {}
        await doc.query_all("h1")
        old.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dispose_tolerates_closed_page(self):
        gone = _handle(MagicMock())
        gone.dispose.side_effect = PlaywrightError("Target closed")
        page, _ = _page_with({"0": gone})
        doc = PlaywrightDocument(page)
        await doc.query_all("p")
        await doc.dispose()
        await doc.dispose()
        gone.dispose.assert_awaited_once()


class TestPlaywrightElement:
    @pytest.mark.asyncio
    async def test_bounding_top_is_float(self):
        handle = MagicMock()
        handle.evaluate = AsyncMock(return_value=12)
        assert await PlaywrightElement(handle).bounding_top_with_clear("none") == 12.0

    @pytest.mark.asyncio
    async def test_clear_override_is_one_round_trip(self):
        handle = MagicMock()
        handle.evaluate = AsyncMock(return_value=0)
        await PlaywrightElement(handle).bounding_top_with_clear("none")
        handle.evaluate.assert_awaited_once()
        script, clear = handle.evaluate.call_args.args
        assert clear == "none"
        # override and restore both happen page-side
        assert "el.style.clear = clear" in script
        assert "finally" in script
        assert "el.style.clear = original" in script

    @pytest.mark.asyncio
    async def test_computed_position(self):
        handle = MagicMock()
        handle.evaluate = AsyncMock(return_value="fixed")
        assert await PlaywrightElement(handle).computed_position() == "fixed"

    def test_satisfies_protocols(self):
        assert isinstance(PlaywrightElement(MagicMock()), Element)
        assert isinstance(PlaywrightDocument(MagicMock()), Document)
