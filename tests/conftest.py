# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import foldline  # noqa: F401
except ImportError:
    raise ImportError("foldline is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from foldline.model import ClassificationOptions
from tests._fakes import FakeDocument


@pytest.fixture
def empty_document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def options() -> ClassificationOptions:
    """Default options: 800px viewport, no settle delay."""
    return ClassificationOptions(viewport_height=800, settle_delay_ms=0)
