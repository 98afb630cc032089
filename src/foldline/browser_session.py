# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Playwright browser session management for foldline.

Manages the Chromium lifecycle for one extraction: viewport, user agent,
custom headers, JS request blocking, page console/error capture and
navigation with failure diagnostics.
"""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from urllib.parse import quote

from playwright.async_api import (
    Browser,
    BrowserContext,
    ConsoleMessage,
    Page,
    Playwright,
    Request,
    Route,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from .errors import BrowserError, NavigationError

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = {"width": 1300, "height": 900}

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36 foldline"
)

# Script requests are aborted while measuring so page JS cannot move things around
JS_REQUEST_RE = re.compile(r"\.js(\?.*)?$")

# In-page log lines with this prefix are relayed to the debug log
PAGE_DEBUG_PREFIX = "debug: "

# encodeURI's reserved set plus '%', '[' and ']'
_URL_SAFE_CHARS = ";,/?:@&=+$-_.!~*'()#%[]"


def quote_url(url: str) -> str:
    """Percent-encode spaces, non-ASCII and other characters not allowed in a URL.

    Close to ``encodeURI``, except that ``%`` is left alone (an already
    encoded URL is not encoded twice) and IPv6 host brackets are kept.
    """
    return quote(url, safe=_URL_SAFE_CHARS)


@dataclass
class BrowserConfig:
    """Browser launch and page configuration."""

    headless: bool = True
    viewport_width: int = DEFAULT_VIEWPORT["width"]
    viewport_height: int = DEFAULT_VIEWPORT["height"]
    user_agent: str = DEFAULT_USER_AGENT
    extra_headers: dict[str, str] = field(default_factory=dict)
    block_js_requests: bool = True
    timeout_ms: int = 30000
    wait_until: str = "load"


@dataclass(frozen=True, slots=True)
class ResourceFailure:
    """Last subresource that failed to load, kept for navigation diagnostics."""

    url: str
    reason: str


# ── Chromium auto-install ─────────────────────────────────────────

_chromium_install_attempted = False
_AUTO_INSTALL_TIMEOUT = 300  # seconds, Chromium is a ~140MB download


async def _auto_install_chromium() -> bool:
    """Run ``playwright install chromium`` once per process.

    stdout/stderr are captured so nothing leaks into the result stream.
    """
    global _chromium_install_attempted  # noqa: PLW0603
    if _chromium_install_attempted:
        return False
    _chromium_install_attempted = True

    logger.warning("Chromium not found, running 'playwright install chromium' …")
    try:
        proc = await asyncio.create_subprocess_exec(
            sys.executable,
            "-m",
            "playwright",
            "install",
            "chromium",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=_AUTO_INSTALL_TIMEOUT)
        if proc.returncode == 0:
            logger.info("Chromium installed successfully")
            return True
        logger.warning(
            "playwright install chromium failed (rc=%d): %s",
            proc.returncode,
            stderr.decode(errors="replace")[:500],
        )
        return False
    except TimeoutError:
        logger.warning("Chromium install timed out after %ds", _AUTO_INSTALL_TIMEOUT)
        return False
    except OSError:
        logger.warning("Chromium auto-install failed", exc_info=True)
        return False


def chromium_launch_args() -> list[str]:
    """Return Chromium launch arguments for a quiet, isolated measurement run."""
    return [
        "--disable-extensions",
        "--disable-plugins",
        "--disable-dev-shm-usage",
        "--disable-background-networking",
        "--disable-sync",
        "--no-first-run",
        "--deny-permission-prompts",
        "--disable-breakpad",
        "--no-pings",
        "--disable-component-update",
        "--noerrdialogs",
        "--hide-scrollbars",
    ]


class BrowserSession:
    """One Chromium browser with a single page sized to the target viewport."""

    def __init__(self, config: BrowserConfig | None = None):
        self.config = config or BrowserConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self.last_resource_failure: ResourceFailure | None = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session not started. Use async with or call start().")
        return self._page

    @property
    def context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError("Browser session not started.")
        return self._context

    async def _launch_browser(self) -> None:
        """Launch Chromium, auto-installing on first 'executable not found' error."""
        args = chromium_launch_args()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless, args=args)
        except PlaywrightError as exc:
            if "executable doesn't exist" not in str(exc).lower():
                raise BrowserError(f"Chromium failed to launch: {exc}") from exc
            if not await _auto_install_chromium():
                raise BrowserError(
                    "Chromium is not installed and auto-install failed. Please run: playwright install chromium"
                ) from exc
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless, args=args)

    async def _create_context(self, browser: Browser) -> None:
        """Create BrowserContext + Page + event handlers on given browser."""
        self._context = await browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            user_agent=self.config.user_agent,
            extra_http_headers=self.config.extra_headers or None,
            service_workers="block",
            permissions=[],
            accept_downloads=False,
        )
        self._page = await self._context.new_page()
        self._page.on("console", self._on_console)
        # Page JS errors must never end up in the extracted CSS
        self._page.on("pageerror", self._on_page_error)
        self._page.on("requestfailed", self._on_request_failed)

        if self.config.block_js_requests:
            await self._install_js_block_route()

    async def start(self) -> None:
        """Launch browser and create the measurement page."""
        self._playwright = await async_playwright().start()
        try:
            await self._launch_browser()
            await self._create_context(self._browser)
        except BaseException:
            await self.stop()
            raise
        logger.debug(
            "Browser session started (viewport=%dx%d, block_js=%s)",
            self.config.viewport_width,
            self.config.viewport_height,
            self.config.block_js_requests,
        )

    async def _install_js_block_route(self) -> None:
        """Abort script requests so page JS cannot rearrange the layout."""

        async def _handler(route: Route) -> None:
            if JS_REQUEST_RE.search(route.request.url):
                logger.debug("Script blocked: %s", route.request.url)
                await route.abort("blockedbyclient")
                return
            await route.continue_()

        await self.context.route("**/*", _handler)

    def _on_console(self, message: ConsoleMessage) -> None:
        text = message.text
        if text.startswith(PAGE_DEBUG_PREFIX):
            logger.debug("page: %s", text[len(PAGE_DEBUG_PREFIX) :])

    def _on_page_error(self, error: PlaywrightError) -> None:
        logger.debug("Ignored page error: %s", error)

    def _on_request_failed(self, request: Request) -> None:
        reason = request.failure or "unknown error"
        if reason == "net::ERR_BLOCKED_BY_CLIENT":
            return
        self.last_resource_failure = ResourceFailure(url=request.url, reason=reason)

    async def stop(self) -> None:
        """Close page, context, browser and playwright. Safe to call twice."""
        if self._page is not None:
            with suppress(PlaywrightError):
                await self._page.close()
            self._page = None
        if self._context is not None:
            with suppress(PlaywrightError):
                await self._context.close()
            self._context = None
        if self._browser is not None:
            with suppress(PlaywrightError):
                await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            with suppress(PlaywrightError):
                await self._playwright.stop()
            self._playwright = None
        logger.debug("Browser session stopped")

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.stop()

    async def navigate(self, url: str) -> int | None:
        """Open *url* and wait for the ``load`` event.

        Returns the HTTP status of the main document, if any.

        Raises:
            NavigationError: the page could not be loaded.
        """
        target = quote_url(url)
        self.last_resource_failure = None
        try:
            response = await self.page.goto(target, wait_until=self.config.wait_until, timeout=self.config.timeout_ms)
        except PlaywrightError as exc:
            failure = self.last_resource_failure
            reason = failure.reason if failure else str(exc).splitlines()[0]
            raise NavigationError(target, reason, resource_url=failure.url if failure else "") from exc
        status = response.status if response else None
        logger.debug("Page opened: %s (status=%s)", target, status)
        return status


@asynccontextmanager
async def create_session(
    config: BrowserConfig | None = None,
) -> AsyncGenerator[BrowserSession, None]:
    """Context manager to create and manage a browser session."""
    session = BrowserSession(config)
    await session.start()
    try:
        yield session
    finally:
        await session.stop()
