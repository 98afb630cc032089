# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Render stdlib log records through structlog on stderr.

foldline modules log with ``logging.getLogger(__name__)``; this installs one
stderr handler whose ``ProcessorFormatter`` turns those records into
console lines, or JSON lines with ``--json-logs``. stdout is left to the
extracted rules.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Applied to every stdlib record before rendering
_PRE_CHAIN: list = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def configure(*, json_output: bool = False, debug: bool = False) -> None:
    """Replace root handlers with a single structlog-formatted stderr handler.

    Args:
        json_output: True for JSON lines, False for human-readable output.
        debug: Lower the root level to DEBUG (default WARNING keeps stderr quiet).
    """
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=_PRE_CHAIN,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
