"""
Unit tests for the 1-10 score normalization primitives.
"""

import pytest

from aso_intelligence.core.errors import ConfigurationError
from aso_intelligence.core.normalizer import (
    aggregate,
    inverse_score,
    inverse_zero_based_score,
    linear_score,
    round_score,
    zero_based_score,
)


class TestLinearScore:
    """linear_score and its zero-based variant."""

    @pytest.mark.parametrize("value", [-1000, -1, 0, 3, 50, 99.99, 100, 1e9])
    def test_output_stays_on_scale(self, value):
        assert 1 <= linear_score(0, 100, value) <= 10

    def test_endpoints(self):
        assert linear_score(20, 80, 20) == 1
        assert linear_score(20, 80, 80) == 10

    def test_midpoint(self):
        assert linear_score(0, 100, 50) == 5.5

    def test_clamps_out_of_range_values(self):
        assert linear_score(0, 100, -5) == 1
        assert linear_score(0, 100, 500) == 10

    def test_rounds_to_two_decimals(self):
        assert linear_score(0, 3, 1) == 4.0
        assert linear_score(0, 7, 1) == 2.29

    def test_zero_based(self):
        assert zero_based_score(10, 5) == 5.5
        assert zero_based_score(8000, 5000) == 6.63

    def test_empty_range_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            linear_score(5, 5, 5)
        with pytest.raises(ConfigurationError):
            zero_based_score(0, 0)


class TestInverseScore:
    """Fewer is better."""

    def test_endpoints(self):
        assert inverse_score(0, 100, 0) == 10
        assert inverse_score(0, 100, 100) == 1

    def test_inverse_zero_based(self):
        assert inverse_zero_based_score(500, 250) == 5.5
        assert inverse_zero_based_score(500, 10_000) == 1

    def test_empty_range_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            inverse_score(1, 1, 1)


class TestAggregate:
    """Weighted combination of 1-10 values."""

    def test_all_max_and_all_min(self):
        assert aggregate([4, 3, 5], [10, 10, 10]) == 10
        assert aggregate([4, 3, 5], [1, 1, 1]) == 1

    def test_weight_scaling_does_not_change_result(self):
        values = [2, 7, 9]
        base = aggregate([4, 3, 5], values)
        assert base == pytest.approx(6.17)
        assert aggregate([8, 6, 10], values) == pytest.approx(base)
        assert aggregate([0.4, 0.3, 0.5], values) == pytest.approx(base)

    @pytest.mark.parametrize("weight", [1, 2, 7.5])
    @pytest.mark.parametrize("value", [1, 3.2, 7.3, 10])
    def test_single_weight_is_identity_on_scale(self, weight, value):
        assert aggregate([weight], [value]) == pytest.approx(linear_score(1, 10, value))

    def test_heavier_weight_pulls_result(self):
        assert aggregate([10, 1], [10, 1]) > aggregate([1, 10], [10, 1])

    def test_mismatched_lengths(self):
        with pytest.raises(ConfigurationError):
            aggregate([1, 2], [5])

    def test_empty_weights(self):
        with pytest.raises(ConfigurationError):
            aggregate([], [])


def test_round_score_rounds_half_up():
    assert round_score(6.625) == 6.63
    assert round_score(2.125) == 2.13
    assert round_score(1.0) == 1.0
