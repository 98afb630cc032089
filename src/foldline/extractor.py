# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Critical CSS extraction orchestrator.

Order of operations for one extraction:

1. validate options and the rule tree (fatal ``InputError`` before any browser work)
2. start a browser session sized to the viewport
3. navigate (fatal ``NavigationError``: classification never runs)
4. schedule the classification pass and await its single result
5. stop the session, on every path
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .browser_session import DEFAULT_USER_AGENT, DEFAULT_VIEWPORT, BrowserConfig, BrowserSession
from .errors import InputError
from .model import ClassificationOptions, RuleNode
from .playwright_dom import PlaywrightDocument
from .render import schedule_classification
from .schemas import load_ast, validate_rules

logger = logging.getLogger(__name__)


@dataclass
class ExtractionConfig:
    """Everything one extraction needs besides the URL and the rule tree."""

    width: int = DEFAULT_VIEWPORT["width"]
    height: int = DEFAULT_VIEWPORT["height"]
    force_include: list[Any] = field(default_factory=list)  # wire format or ForceIncludeEntry
    user_agent: str = DEFAULT_USER_AGENT
    render_wait_ms: int = 100
    block_js_requests: bool = True
    extra_headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int = 30000
    headless: bool = True

    def classification_options(self) -> ClassificationOptions:
        """Build classification options, reporting bad values as InputError."""
        try:
            return ClassificationOptions.build(
                self.force_include,
                viewport_height=self.height,
                settle_delay_ms=self.render_wait_ms,
            )
        except (ValueError, TypeError, re.error) as e:
            raise InputError(f"Invalid extraction options: {e}") from e

    def browser_config(self) -> BrowserConfig:
        if self.width <= 0:
            raise InputError(f"Viewport width must be positive, got {self.width}")
        return BrowserConfig(
            headless=self.headless,
            viewport_width=self.width,
            viewport_height=self.height,
            user_agent=self.user_agent,
            extra_headers=dict(self.extra_headers),
            block_js_requests=self.block_js_requests,
            timeout_ms=self.timeout_ms,
        )


async def extract_critical_rules(
    url: str,
    rules: Sequence[RuleNode],
    config: ExtractionConfig | None = None,
) -> list[RuleNode]:
    """Load *url* and return the subset of *rules* needed above the fold.

    An empty list is a valid result, not an error.

    Raises:
        InputError: options or the rule tree are invalid.
        BrowserError: Chromium could not be started.
        NavigationError: the page could not be loaded.
    """
    config = config or ExtractionConfig()
    if not url:
        raise InputError("A URL is required")
    options = config.classification_options()
    browser_config = config.browser_config()
    validate_rules(rules)

    async with BrowserSession(browser_config) as session:
        await session.navigate(url)
        document = PlaywrightDocument(session.page)
        try:
            critical = await schedule_classification(rules, options, document)
        finally:
            await document.dispose()

    if not critical:
        logger.warning("No critical rules found for %s", url)
    else:
        logger.info("Extracted %d critical rules for %s", len(critical), url)
    return critical


async def extract_from_file(
    url: str,
    ast_path: str | Path,
    config: ExtractionConfig | None = None,
) -> list[RuleNode]:
    """Read a JSON stylesheet AST from *ast_path* and extract its critical rules."""
    rules = load_ast(ast_path)
    logger.debug("Loaded %d top-level rules from %s", len(rules), ast_path)
    return await extract_critical_rules(url, rules, config)
