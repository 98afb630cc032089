# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Human-readable diagnostics for fatal extraction errors.

Maps exceptions to a short ``Error:``/``Hint:`` block for stderr, classifying
Chromium ``net::ERR_*`` codes so that a failed navigation reads as
"could not resolve domain" instead of a raw Playwright message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from .errors import BrowserError, InputError, NavigationError, OutputError

MAX_DETAIL_LENGTH = 300


class FailureKind(StrEnum):
    INPUT = "input"
    BROWSER_UNAVAILABLE = "browser-unavailable"
    DNS_RESOLUTION_FAILED = "dns-resolution-failed"
    PAGE_TIMEOUT = "page-timeout"
    CONNECTION_FAILED = "connection-failed"
    TLS_ERROR = "tls-error"
    NAVIGATION_FAILED = "navigation-failed"
    OUTPUT = "output"
    INTERNAL = "internal"


_HINTS: dict[FailureKind, str] = {
    FailureKind.INPUT: "Check the AST file and the JSON passed to --force-include/--headers.",
    FailureKind.BROWSER_UNAVAILABLE: "Ensure Chromium is installed: playwright install chromium",
    FailureKind.DNS_RESOLUTION_FAILED: "Check the URL spelling and ensure the domain exists.",
    FailureKind.PAGE_TIMEOUT: "The page took too long to load. Try again or raise --timeout-ms.",
    FailureKind.CONNECTION_FAILED: "Check that the site is reachable from this machine.",
    FailureKind.TLS_ERROR: "The site's certificate was rejected.",
}

# ── Chromium net::ERR_* classification ───────────────────────────────

_NET_ERR_RE = re.compile(r"net::ERR_(\w+)")
_HOSTNAME_RE = re.compile(r"https?://([^/:\s']+)")

_CONNECTION_CODES = {
    "CONNECTION_REFUSED",
    "CONNECTION_CLOSED",
    "CONNECTION_RESET",
    "EMPTY_RESPONSE",
    "ADDRESS_UNREACHABLE",
}


def classify_network_error(message: str) -> tuple[FailureKind, str] | None:
    """Classify a Chromium network error message.

    Returns ``None`` if *message* does not contain a ``net::ERR_*`` code.
    """
    m = _NET_ERR_RE.search(message)
    if m is None:
        return None
    code = m.group(1)
    hm = _HOSTNAME_RE.search(message)
    hostname = hm.group(1) if hm else ""

    if code == "NAME_NOT_RESOLVED":
        host_part = f" '{hostname}'" if hostname else ""
        return FailureKind.DNS_RESOLUTION_FAILED, f"Could not resolve domain name{host_part}"
    if code in ("CONNECTION_TIMED_OUT", "TIMED_OUT"):
        host_part = f" to '{hostname}'" if hostname else ""
        return FailureKind.PAGE_TIMEOUT, f"Connection timed out{host_part}"
    if code in _CONNECTION_CODES:
        host_part = f" to '{hostname}'" if hostname else ""
        return FailureKind.CONNECTION_FAILED, f"Connection failed{host_part}"
    if "CERT" in code or "SSL" in code:
        host_part = f" for '{hostname}'" if hostname else ""
        return FailureKind.TLS_ERROR, f"SSL/TLS error{host_part}"
    return FailureKind.NAVIGATION_FAILED, f"Navigation failed (net::ERR_{code})"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: FailureKind
    detail: str

    def to_cli_text(self) -> str:
        """Format::

        Error: <detail>
        Hint: <hint>
        """
        detail = self.detail
        if len(detail) > MAX_DETAIL_LENGTH:
            detail = detail[:MAX_DETAIL_LENGTH] + "..."
        lines = [f"Error: {detail}"]
        hint = _HINTS.get(self.kind, "")
        if hint:
            lines.append(f"Hint: {hint}")
        return "\n".join(lines)


def from_exception(exc: BaseException) -> Diagnostic:
    """Build a Diagnostic for a fatal error."""
    if isinstance(exc, InputError):
        return Diagnostic(FailureKind.INPUT, str(exc))
    if isinstance(exc, NavigationError):
        classified = classify_network_error(f"{exc.reason} at {exc.url}")
        if classified is not None:
            kind, human = classified
            return Diagnostic(kind, f"{human} (opening '{exc.url}')")
        if "timeout" in exc.reason.lower():
            return Diagnostic(FailureKind.PAGE_TIMEOUT, str(exc))
        return Diagnostic(FailureKind.NAVIGATION_FAILED, str(exc))
    if isinstance(exc, BrowserError):
        return Diagnostic(FailureKind.BROWSER_UNAVAILABLE, str(exc))
    if isinstance(exc, OutputError):
        return Diagnostic(FailureKind.OUTPUT, str(exc))
    return Diagnostic(FailureKind.INTERNAL, f"{type(exc).__name__}: {exc}")
