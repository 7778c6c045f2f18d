"""Score normalization onto the 1-10 opportunity scale.

Every sub-score and composite in the package goes through these functions,
which is what keeps them comparable regardless of the raw metric's units.
"""

from __future__ import annotations

import math
from typing import Sequence

from .errors import ConfigurationError

SCALE_MIN = 1.0
SCALE_MAX = 10.0


def round_score(value: float) -> float:
    """Round half up to 2 decimals."""
    return math.floor(value * 100 + 0.5) / 100


def _clamp(low: float, high: float, value: float) -> float:
    if high == low:
        raise ConfigurationError(f"Score range is empty: min == max == {low}")
    return max(low, min(high, value))


def linear_score(low: float, high: float, value: float) -> float:
    """Map ``value`` from [low, high] onto [1, 10]; low -> 1, high -> 10."""
    value = _clamp(low, high, value)
    return round_score(SCALE_MIN + (SCALE_MAX - SCALE_MIN) * (value - low) / (high - low))


def zero_based_score(high: float, value: float) -> float:
    return linear_score(0, high, value)


def inverse_score(low: float, high: float, value: float) -> float:
    """Map ``value`` from [low, high] onto [10, 1]; fewer is better."""
    value = _clamp(low, high, value)
    return round_score(SCALE_MIN + (SCALE_MAX - SCALE_MIN) * (high - value) / (high - low))


def inverse_zero_based_score(high: float, value: float) -> float:
    return inverse_score(0, high, value)


def aggregate(weights: Sequence[float], values: Sequence[float]) -> float:
    """Combine 1-10 values into one 1-10 score.

    The weighted sum is rescaled from its achievable range
    [sum(weights) * 1, sum(weights) * 10], so the result does not depend on
    the absolute size of the weights, only on their ratios.
    """
    if len(weights) != len(values):
        raise ConfigurationError(
            f"aggregate() got {len(weights)} weights for {len(values)} values"
        )
    total = sum(weights)
    if total <= 0:
        raise ConfigurationError("aggregate() weights must sum to a positive number")
    weighted = sum(w * v for w, v in zip(weights, values))
    return linear_score(SCALE_MIN * total, SCALE_MAX * total, weighted)
