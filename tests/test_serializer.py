# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for foldline.serializer."""

from __future__ import annotations

import json

import pytest

from foldline.errors import OutputError
from foldline.serializer import to_json


class TestToJson:
    def test_empty_result_is_empty_array(self):
        assert to_json([]) == "[]"

    def test_rules_round_trip(self):
        rules = [{"type": "rule", "selectors": [".hero"], "declarations": []}]
        assert json.loads(to_json(rules)) == rules

    def test_non_ascii_kept(self):
        rules = [{"type": "rule", "selectors": [".é"]}]
        assert ".é" in to_json(rules)

    def test_unserializable_value(self):
        with pytest.raises(OutputError, match="Cannot serialize"):
            to_json([{"type": "rule", "selectors": {".a"}}])

    def test_nan_rejected(self):
        with pytest.raises(OutputError):
            to_json([{"type": "rule", "value": float("nan")}])
