"""Tests for token cost estimation."""

from __future__ import annotations

import pytest

from services.openai.cost_generator import CostGenerator


def test_dated_snapshot_uses_base_pricing() -> None:
    cost = CostGenerator().estimate(input_tokens=1000, output_tokens=500, model="gpt-4.1-2025-04-14")

    assert cost["input_cost"] == pytest.approx(0.002)
    assert cost["output_cost"] == pytest.approx(0.004)
    assert cost["total_cost"] == pytest.approx(0.006)
    assert cost["model"] == "gpt-4.1-2025-04-14"


def test_negative_tokens_rejected() -> None:
    with pytest.raises(ValueError):
        CostGenerator().estimate(input_tokens=-1, output_tokens=0, model="gpt-4o")


def test_unknown_model_falls_back_to_zero() -> None:
    cost = CostGenerator().estimate_or_zero({"input_tokens": 10, "output_tokens": None}, "legacy-model")

    assert cost["total_cost"] == 0.0
    assert cost["input_tokens"] == 10
    assert cost["output_tokens"] == 0
