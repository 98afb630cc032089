# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""foldline CLI: extract critical CSS rules from a stylesheet AST.

Usage:
    foldline URL AST_FILE [--width W] [--height H] [--force-include JSON]
             [--user-agent UA] [--render-wait-ms MS] [--no-block-js]
             [--headers JSON] [--timeout-ms MS] [--debug] [--json-logs]

The critical rules are written to stdout as a JSON array ('[]' when none
qualify). Diagnostics go to stderr. Exit status is 0 on success, 1 on a
fatal error and 130 when interrupted.

Environment overrides (used when the matching flag is absent):
    FOLDLINE_USER_AGENT, FOLDLINE_RENDER_WAIT_MS, FOLDLINE_TIMEOUT_MS,
    FOLDLINE_DEBUG (1/true/yes)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from . import logging_config
from ._progress import status_spinner
from .browser_session import DEFAULT_USER_AGENT, DEFAULT_VIEWPORT
from .diagnostics import from_exception
from .errors import InputError
from .extractor import ExtractionConfig, extract_from_file
from .serializer import to_json

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes")


def _parse_json_arg(raw: str | None, flag: str, expected: type) -> Any:
    """Decode a JSON-valued flag. 'null' or an empty value means "not given"."""
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputError(f"{flag} is not valid JSON: {e.msg}") from e
    if value is not None and not isinstance(value, expected):
        raise InputError(f"{flag} must be a JSON {expected.__name__}, got {type(value).__name__}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InputError(f"{name} must be an integer, got {raw!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foldline",
        description="Extract the CSS rules needed to render the above-the-fold part of a page.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s https://example.com ast.json                      Desktop viewport
  %(prog)s https://example.com ast.json --width 375 --height 667
  %(prog)s https://example.com ast.json --force-include '[".nav", {"type": "RegExp", "value": "^\\\\.btn-"}]'
""",
    )
    parser.add_argument("url", help="Page to measure")
    parser.add_argument("ast_file", help="JSON stylesheet AST ({'stylesheet': {'rules': [...]}})")
    parser.add_argument(
        "--width", type=int, default=DEFAULT_VIEWPORT["width"], help="Viewport width (default: %(default)s)"
    )
    parser.add_argument(
        "--height", type=int, default=DEFAULT_VIEWPORT["height"], help="Viewport height (default: %(default)s)"
    )
    parser.add_argument(
        "--force-include",
        metavar="JSON",
        help='JSON list of selectors always kept: "sel" or {"type": "RegExp", "value": "pattern"}',
    )
    parser.add_argument("--user-agent", help="User agent for the page request")
    parser.add_argument("--render-wait-ms", type=int, help="Settle delay before classifying (default: 100)")
    parser.add_argument(
        "--no-block-js",
        dest="block_js",
        action="store_false",
        help="Let the page load its scripts (blocked by default)",
    )
    parser.add_argument("--headers", metavar="JSON", help="JSON object of extra HTTP request headers")
    parser.add_argument("--timeout-ms", type=int, help="Navigation timeout (default: 30000)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--debug", action="store_true", help="Verbose debug log on stderr")
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    return parser


def config_from_args(args: argparse.Namespace) -> ExtractionConfig:
    """Build ExtractionConfig from parsed flags plus FOLDLINE_* env overrides."""
    force_include = _parse_json_arg(args.force_include, "--force-include", list) or []
    headers = _parse_json_arg(args.headers, "--headers", dict) or {}

    user_agent = args.user_agent or os.environ.get("FOLDLINE_USER_AGENT", "").strip() or DEFAULT_USER_AGENT
    render_wait_ms = (
        args.render_wait_ms if args.render_wait_ms is not None else _env_int("FOLDLINE_RENDER_WAIT_MS", 100)
    )
    timeout_ms = args.timeout_ms if args.timeout_ms is not None else _env_int("FOLDLINE_TIMEOUT_MS", 30000)

    if args.width <= 0 or args.height <= 0:
        raise InputError(f"Viewport must be positive, got {args.width}x{args.height}")

    config = ExtractionConfig(
        width=args.width,
        height=args.height,
        force_include=force_include,
        user_agent=user_agent,
        render_wait_ms=render_wait_ms,
        block_js_requests=args.block_js,
        extra_headers={str(k): str(v) for k, v in headers.items()},
        timeout_ms=timeout_ms,
        headless=not args.headed,
    )
    # force-include patterns are compiled here so a bad one fails before the AST is read
    config.classification_options()
    return config


def run(args: argparse.Namespace) -> int:
    """Run one extraction and write the result. Returns the exit status."""
    config = config_from_args(args)
    with status_spinner(f"Extracting critical CSS for {args.url}...", enabled=not args.debug):
        critical = asyncio.run(extract_from_file(args.url, args.ast_file, config))
    output = to_json(critical)
    sys.stdout.write(output)
    sys.stdout.flush()
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or os.environ.get("FOLDLINE_DEBUG", "").strip().lower() in _TRUTHY
    args.debug = debug
    logging_config.configure(json_output=args.json_logs, debug=debug)
    logger.debug("foldline start")

    try:
        code = run(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(from_exception(e).to_cli_text(), file=sys.stderr)
        if debug:
            logger.debug("Extraction failed", exc_info=True)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
