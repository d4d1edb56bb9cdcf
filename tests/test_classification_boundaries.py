import math

import pytest

from neuronorm.core.sentinels import NOT_AVAILABLE
from neuronorm.engine.classification import (
    ENGLISH_LABELS,
    BandingScheme,
    PercentileBand,
    StandardScoreBand,
    bands_for,
    classify,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (1, PercentileBand.INFERIOR),
        (5, PercentileBand.INFERIOR),
        (5.99, PercentileBand.INFERIOR),
        (6, PercentileBand.MEDIA_INFERIOR),
        (25, PercentileBand.MEDIA_INFERIOR),
        (26, PercentileBand.MEDIA),
        (50, PercentileBand.MEDIA),
        (74, PercentileBand.MEDIA),
        (75, PercentileBand.MEDIA_SUPERIOR),
        (94, PercentileBand.MEDIA_SUPERIOR),
        (95, PercentileBand.SUPERIOR),
        (99, PercentileBand.SUPERIOR),
    ],
)
def test_percentile_tiers_are_closed_at_lower_cut(value, expected):
    assert classify(BandingScheme.PERCENTILE_5, value) is expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (40, StandardScoreBand.MUITO_BAIXA),
        (69, StandardScoreBand.MUITO_BAIXA),
        (70, StandardScoreBand.BAIXA),
        (84, StandardScoreBand.BAIXA),
        (85, StandardScoreBand.MEDIA),
        (100, StandardScoreBand.MEDIA),
        (114, StandardScoreBand.MEDIA),
        (115, StandardScoreBand.ALTA),
        (129, StandardScoreBand.ALTA),
        (130, StandardScoreBand.MUITO_ALTA),
        (371, StandardScoreBand.MUITO_ALTA),
    ],
)
def test_standard_score_tiers_are_closed_at_lower_cut(value, expected):
    assert classify(BandingScheme.STANDARD_SCORE_5, value) is expected


@pytest.mark.parametrize("scheme", list(BandingScheme))
def test_not_available_passes_through(scheme):
    assert classify(scheme, NOT_AVAILABLE) is NOT_AVAILABLE


@pytest.mark.parametrize("scheme", list(BandingScheme))
def test_scheme_partition_is_contiguous_and_unbounded(scheme):
    bands = bands_for(scheme)
    assert len(bands) == 5
    assert bands[0].lower is None
    assert bands[-1].upper is None
    for left, right in zip(bands, bands[1:]):
        assert left.upper == right.lower


def test_scheme_accepts_plain_string():
    assert classify("PERCENTILE_5", 50) is PercentileBand.MEDIA


def test_nan_is_not_classifiable():
    with pytest.raises(ValueError) as exc:
        classify(BandingScheme.PERCENTILE_5, math.nan)
    assert "not classifiable" in str(exc.value)


def test_every_label_has_english_name():
    for label in list(PercentileBand) + list(StandardScoreBand):
        assert ENGLISH_LABELS[label]
