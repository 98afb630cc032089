# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Pydantic schemas for the stylesheet AST handed to foldline.

The AST follows the ``css`` (reworkcss) parser output::

    {"type": "stylesheet", "stylesheet": {"rules": [...], "parsingErrors": []}}

Only the envelope and the ``type`` tag of each node are validated. Every
other key is carried through verbatim so declarations, comments and source
positions survive a round trip.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import InputError
from .model import RuleNode


class AstRule(BaseModel):
    """A single rule node. ``selectors``/``rules`` may be omitted but never null."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Node kind: rule, media, font-face, ...")
    selectors: list[str] = Field(default_factory=list, description="Selector list of a plain rule")
    rules: list[AstRule] = Field(default_factory=list, description="Nested rules of a grouping at-rule")


AstRule.model_rebuild()


class StylesheetBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    rules: list[AstRule] = Field(default_factory=list)


class StylesheetAst(BaseModel):
    """Top-level AST document."""

    model_config = ConfigDict(extra="allow")

    type: str = "stylesheet"
    stylesheet: StylesheetBody


def parse_ast(data: Any) -> list[RuleNode]:
    """Validate a decoded AST document and return its top-level rule list.

    Returns the caller's own dicts (not pydantic dumps) so that unknown keys
    and key order are preserved exactly.

    Raises:
        InputError: the document does not look like a stylesheet AST.
    """
    try:
        StylesheetAst.model_validate(data)
    except ValidationError as e:
        raise InputError(f"Malformed stylesheet AST: {e.error_count()} validation error(s)\n{e}") from e
    return data["stylesheet"].get("rules", [])


_RULE_LIST = TypeAdapter(list[AstRule])


def validate_rules(rules: Any) -> None:
    """Check an already-extracted rule list against the node schema.

    Raises:
        InputError: a node has no type or a null/non-list selector or rule list.
    """
    try:
        _RULE_LIST.validate_python(rules)
    except ValidationError as e:
        raise InputError(f"Malformed rule list: {e.error_count()} validation error(s)\n{e}") from e


def load_ast(path: str | Path) -> list[RuleNode]:
    """Read a JSON AST file and return its validated top-level rules.

    Raises:
        InputError: the file is missing, unreadable, not JSON, or not an AST.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read AST file '{p}': {e.strerror or e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"AST file '{p}' is not valid JSON: {e.msg} (line {e.lineno})") from e
    return parse_ast(data)
