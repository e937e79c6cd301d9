"""Tests for hotspot payload normalization."""

from __future__ import annotations

import math

import pytest

from models.analysis_models import Hotspot
from services.hotspot_normalizer import (
    MAX_HOTSPOTS,
    RawHotspot,
    affected_area,
    normalize_confidence,
    normalize_hotspot,
    normalize_severity,
    parse_analysis_payload,
    round_half_up,
)


class TestNormalizeHotspot:
    """Test suite for per-hotspot default filling."""

    def test_missing_fields_use_defaults(self) -> None:
        hotspot = normalize_hotspot(RawHotspot())

        assert hotspot == Hotspot(x=0, y=0, radius=20, intensity=50, area=1000, description="Thermal anomaly detected")

    def test_falsy_values_use_defaults(self) -> None:
        hotspot = normalize_hotspot(RawHotspot.model_validate({"radius": 0, "intensity": 0, "area": 0, "description": ""}))

        assert (hotspot.radius, hotspot.intensity, hotspot.area) == (20, 50, 1000)
        assert hotspot.description == "Thermal anomaly detected"

    def test_values_are_rounded_half_up(self) -> None:
        hotspot = normalize_hotspot(RawHotspot.model_validate({"x": 12.5, "y": 7.49, "radius": 3.5, "intensity": 66.5}))

        assert (hotspot.x, hotspot.y, hotspot.radius, hotspot.intensity) == (13, 7, 4, 67)

    def test_integral_area_is_an_int(self) -> None:
        supplied = normalize_hotspot(RawHotspot.model_validate({"area": 640.0}))
        fractional = normalize_hotspot(RawHotspot.model_validate({"area": "312.5"}))

        assert supplied.area == 640 and isinstance(supplied.area, int)
        assert fractional.area == 312.5

    def test_percentages_are_clamped(self) -> None:
        hotspot = normalize_hotspot(RawHotspot.model_validate({"x": 140, "y": -5, "intensity": 250}))

        assert (hotspot.x, hotspot.y, hotspot.intensity) == (100, 0, 100)

    def test_wrong_types_are_ignored(self) -> None:
        raw = RawHotspot.model_validate({"x": "41", "y": "left", "radius": True, "description": 12, "extra": 1})
        hotspot = normalize_hotspot(raw)

        assert hotspot.x == 41
        assert hotspot.y == 0
        assert hotspot.radius == 20
        assert hotspot.description == "Thermal anomaly detected"


class TestPayload:
    """Test suite for whole-payload parsing."""

    def test_hotspots_are_capped_in_order(self) -> None:
        payload = {"hotspots": [{"x": i % 100, "y": 1, "description": f"h{i}"} for i in range(75)]}
        result = parse_analysis_payload(payload)

        assert len(result.hotspots) == MAX_HOTSPOTS
        assert [h.description for h in result.hotspots] == [f"h{i}" for i in range(50)]

    def test_non_list_hotspots_and_non_dict_entries(self) -> None:
        assert parse_analysis_payload({"hotspots": "none"}).hotspots == []
        result = parse_analysis_payload({"hotspots": [1, None, {"x": 3}]})
        assert [h.x for h in result.hotspots] == [3]

    def test_empty_payload_defaults(self) -> None:
        result = parse_analysis_payload({}, model="gpt-4.1")

        assert result.hotspots == []
        assert result.severity == "medium"
        assert result.confidence == 0.85
        assert result.max_temperature is None
        assert result.analysis == "Thermal analysis completed"
        assert result.recommendations == []
        assert result.model == "gpt-4.1"

    def test_service_fields_are_kept(self) -> None:
        result = parse_analysis_payload(
            {"severity": "Critical", "maxTemperature": "81.2", "recommendations": ["a", 2, None], "confidence": 85}
        )

        assert result.severity == "critical"
        assert result.max_temperature == pytest.approx(81.2)
        assert result.recommendations == ["a", "2"]
        assert result.confidence == pytest.approx(0.85)

    def test_non_object_payload_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_analysis_payload(["not", "an", "object"])  # type: ignore[arg-type]


class TestScalars:
    """Test suite for severity, confidence and area helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(85, 0.85), (0.4, 0.4), (None, 0.85), (0, 0.85), (1, 1.0), (250, 1.0)],
    )
    def test_confidence_normalization(self, value, expected) -> None:
        assert normalize_confidence(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "medium"), ("", "medium"), ("LOW", "low"), ("none", "none"), ("unknown", "medium"), ("severe", "medium")],
    )
    def test_severity_normalization(self, value, expected) -> None:
        assert normalize_severity(value) == expected

    def test_affected_area_scales_by_one_hundred(self) -> None:
        hotspots = [Hotspot(x=1, y=1, area=1000), Hotspot(x=2, y=2, area=1450)]
        assert affected_area(hotspots) == 25

    def test_affected_area_uses_circle_when_area_missing(self) -> None:
        hotspots = [Hotspot(x=1, y=1, radius=10, area=0)]
        assert affected_area(hotspots) == round_half_up(math.pi * 100 / 100)

    def test_round_half_up(self) -> None:
        assert [round_half_up(v) for v in (0.5, 1.5, 2.5, 2.49)] == [1, 2, 3, 2]
