import pytest

from teamtemp.services.aggregation import calc_stats
from teamtemp.services.normalizer import (
    SUPPORTED_SCALES,
    normalize_avg,
    normalize_spread,
    scale_labels,
)


@pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 10])
def test_normalize_avg_endpoints(n):
    assert normalize_avg(1, n) == 0
    assert normalize_avg(n, n) == 1


def test_normalize_avg_midpoint():
    assert normalize_avg(2.5, 3) == pytest.approx(0.75)
    assert normalize_avg(3.5, 5) == pytest.approx(0.625)


@pytest.mark.parametrize("n", [3, 4, 5, 6])
def test_half_min_half_max_spread_normalizes_to_one(n):
    values = [1] * 5 + [n] * 5
    _, spread = calc_stats(values)
    assert normalize_spread(spread, n) == pytest.approx(1.0)


@pytest.mark.parametrize("n", [0, 1, -3])
def test_degenerate_scale_returns_zero(n):
    assert normalize_avg(1, n) == 0.0
    assert normalize_spread(0.5, n) == 0.0


def test_known_scale_labels():
    assert scale_labels(3) == ["Disagree", "Partly", "Agree"]
    assert len(scale_labels(4)) == 4
    assert scale_labels(5)[2] == "Neutral"
    assert SUPPORTED_SCALES == (3, 4, 5)


def test_generic_scale_labels():
    labels = scale_labels(7)
    assert len(labels) == 7
    assert labels[0] == "Disagree"
    assert labels[-1] == "Agree"
    assert labels[3] == "4"
    assert scale_labels(1) == []


def test_scale_labels_returns_a_copy():
    labels = scale_labels(3)
    labels.append("extra")
    assert scale_labels(3) == ["Disagree", "Partly", "Agree"]
