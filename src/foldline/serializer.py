# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Serialize a pruned rule tree for the output channel."""

from __future__ import annotations

import json
from collections.abc import Sequence

from .errors import OutputError
from .model import RuleNode


def to_json(rules: Sequence[RuleNode], indent: int | None = None) -> str:
    """Serialize critical rules to a JSON array string.

    An empty input gives ``[]``. Callers write the result in one go so that
    a failure never leaves partial output behind.

    Raises:
        OutputError: a node holds something JSON cannot represent.
    """
    try:
        return json.dumps(list(rules), indent=indent, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise OutputError(f"Cannot serialize critical rules: {e}") from e
