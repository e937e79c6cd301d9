"""Color-histogram heuristic that decides whether an image is a thermal capture.

The detector never calls the inference service. It samples the decoded raster
on a fixed grid, buckets each sampled RGB triple into an 8-level-per-channel
histogram, and derives four features from it:

- ``unique_colors``: number of occupied histogram buckets
- ``avg_color_variance``: mean per-pixel deviation from greyscale
- ``red_bias`` / ``blue_bias``: share of occupied buckets whose red (blue)
  level is strictly above both other channels

Iron, rainbow and greyscale palettes each leave a recognizable signature in
those features; ordinary visual photos usually do not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
from PIL import Image

from models.analysis_models import ColorFeatures, ThermalClassification

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThermalThresholds:
    """Classifier constants. Changing any of them changes classification results."""

    sample_stride: int = 20
    bucket_size: int = 32
    high_variance: float = 50
    moderate_colors_min: int = 50
    moderate_colors_max: int = 300
    gradient_colors: int = 100
    gradient_variance: float = 100
    bias_fraction: float = 0.3
    grayscale_colors: int = 50
    grayscale_variance: float = 10
    high_contrast_variance: float = 150
    high_contrast_colors: int = 100


DEFAULT_THRESHOLDS = ThermalThresholds()


def sample_pixels(image: Image.Image, stride: int) -> np.ndarray:
    """Return an (N, 3) int array of RGB samples taken every `stride` pixels on both axes."""
    rgb = np.asarray(image.convert("RGB"), dtype=np.uint8)
    return rgb[::stride, ::stride].reshape(-1, 3).astype(np.int64)


def color_features(samples: np.ndarray, bucket_size: int = 32) -> ColorFeatures:
    """Derive histogram features from sampled RGB triples."""
    sample_count = int(samples.shape[0])
    if sample_count == 0:
        return ColorFeatures(unique_colors=0, avg_color_variance=0.0, red_bias=0.0, blue_bias=0.0, sample_count=0)

    gray = samples.sum(axis=1) / 3.0
    color_variance = float(np.abs(samples - gray[:, None]).sum())

    buckets = np.unique(samples // bucket_size, axis=0)
    unique_colors = int(buckets.shape[0])

    red_bias = 0.0
    blue_bias = 0.0
    # A zero accumulator means every sample is pure grey; no bucket can lean red or blue.
    if color_variance > 0:
        r, g, b = buckets[:, 0], buckets[:, 1], buckets[:, 2]
        red_bias = int(np.count_nonzero((r > g) & (r > b))) / unique_colors
        blue_bias = int(np.count_nonzero((b > r) & (b > g))) / unique_colors

    return ColorFeatures(
        unique_colors=unique_colors,
        avg_color_variance=color_variance / sample_count,
        red_bias=red_bias,
        blue_bias=blue_bias,
        sample_count=sample_count,
    )


def thermal_signals(features: ColorFeatures, thresholds: ThermalThresholds = DEFAULT_THRESHOLDS) -> Dict[str, bool]:
    """Map features onto the four boolean palette signals."""
    return {
        "highColorVariance": features.avg_color_variance > thresholds.high_variance,
        "moderateColors": thresholds.moderate_colors_min < features.unique_colors < thresholds.moderate_colors_max,
        "colorGradient": (
            features.unique_colors > thresholds.gradient_colors
            and features.avg_color_variance > thresholds.gradient_variance
        ),
        "thermalBias": (
            features.red_bias > thresholds.bias_fraction or features.blue_bias > thresholds.bias_fraction
        ),
    }


def matches_thermal_pattern(
    features: ColorFeatures,
    signals: Dict[str, bool],
    thresholds: ThermalThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Return True when the features look like an iron, rainbow, greyscale or high-contrast palette."""
    iron_palette = signals["thermalBias"] and signals["moderateColors"]
    rainbow_palette = signals["colorGradient"] and signals["highColorVariance"]
    grayscale = (
        features.unique_colors < thresholds.grayscale_colors
        and features.avg_color_variance < thresholds.grayscale_variance
    )
    high_contrast = (
        features.avg_color_variance > thresholds.high_contrast_variance
        and features.unique_colors > thresholds.high_contrast_colors
    )
    return iron_palette or rainbow_palette or grayscale or high_contrast


def resolve_thermal(color_pattern: bool, image_type: str, demo_mode: bool) -> bool:
    """Combine the heuristic verdict with caller hints.

    Demo mode always wins. An explicit `visual` hint can only be overridden by demo mode;
    `thermal` and `auto` hints both still require the heuristic to agree.
    """
    if demo_mode:
        return True
    if image_type == "thermal" and color_pattern:
        return True
    return image_type != "visual" and color_pattern


class ThermalPatternDetector:
    """Classify decoded images as thermal or visual from their color statistics."""

    def __init__(self, thresholds: Optional[ThermalThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def features(self, image: Image.Image) -> ColorFeatures:
        samples = sample_pixels(image, self.thresholds.sample_stride)
        return color_features(samples, self.thresholds.bucket_size)

    def classify(self, image: Image.Image, *, image_type: str = "auto", demo_mode: bool = False) -> ThermalClassification:
        """Return the thermal verdict for `image` together with its features and signals."""
        features = self.features(image)
        signals = thermal_signals(features, self.thresholds)
        color_pattern = matches_thermal_pattern(features, signals, self.thresholds)
        classification = ThermalClassification(
            is_thermal=resolve_thermal(color_pattern, image_type, demo_mode),
            color_pattern=color_pattern,
            features=features,
            signals=signals,
            image_type=image_type,
            demo_mode=demo_mode,
        )
        LOGGER.debug("Thermal detection result: %s", classification.to_dict())
        return classification
