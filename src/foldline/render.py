# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Render completion: run the rule filter once, after the settle delay.

Pages that build their content with JS after ``load`` need a moment before
selectors can be matched. The delay is a hard cutoff: anything the page
inserts after it elapses is not considered critical.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from .dom import Document
from .model import ClassificationOptions, RuleNode
from .rule_filter import filter_rules

logger = logging.getLogger(__name__)


def schedule_classification(
    rules: Sequence[RuleNode],
    options: ClassificationOptions,
    document: Document,
) -> asyncio.Future[list[RuleNode]]:
    """Schedule one classification pass and return its one-shot result future.

    Must be called from a running event loop. The returned future resolves
    with the pruned rule tree, or with the exception that stopped the pass.
    Cancelling the future cancels a pass that has not finished yet.
    """
    loop = asyncio.get_running_loop()
    done: asyncio.Future[list[RuleNode]] = loop.create_future()

    async def _run() -> None:
        logger.debug("Waiting %dms for the page to settle", options.settle_delay_ms)
        await asyncio.sleep(options.settle_delay_ms / 1000)
        logger.debug("Classification pass started")
        try:
            critical = await filter_rules(rules, options, document)
        except Exception as e:
            if not done.done():
                done.set_exception(e)
            return
        logger.debug("Classification pass done")
        if not done.done():
            done.set_result(critical)

    task = loop.create_task(_run())

    def _cancel_pass(fut: asyncio.Future) -> None:
        if fut.cancelled() and not task.done():
            task.cancel()

    done.add_done_callback(_cancel_pass)
    return done
