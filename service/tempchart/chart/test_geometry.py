import math
import pytest

from service.tempchart.base import constants as bc
from service.tempchart.models import (
    BarStatus,
    CanvasLayout,
    Granularity,
    Observation,
)

from service.tempchart.chart import geometry, scale


LAYOUT = CanvasLayout()


def _range(known_low, known_high):
    return scale.compute_value_range(known_low, known_high, LAYOUT)


def test_map_bar_month():
    vr = _range(20, 115)
    bar = geometry.map_bar(58, 1, Granularity.MONTH, vr, LAYOUT)
    assert bar.status == BarStatus.OK
    # 58 is 48 units above lowest (10): round(48 * 690 / 110) = 301
    assert bar.rect.corners() == ((152, 748), (182, 449))
    assert bar.rect.width == 30


@pytest.mark.parametrize("placement", bc.BAR_PLACEMENTS)
@pytest.mark.parametrize("known_low, known_high", [(20, 115), (0, 95), (15, 45), (10, 45)])
def test_bars_grow_with_value(known_low, known_high, placement):
    vr = _range(known_low, known_high)
    heights = [
        geometry.map_bar(v, 3, Granularity.WEEK, vr, LAYOUT, placement).rect.height
        for v in range(int(known_low), int(known_high) + 1)
    ]
    # pixels_per_unit > 1 for all ranges above, so heights strictly increase.
    assert vr.pixels_per_unit > 1
    assert all(a < b for a, b in zip(heights, heights[1:]))


def test_bar_top_stays_inside_axis_box():
    vr = _range(20, 115)
    for v in (20, 60, 115):
        bar = geometry.map_bar(v, 12, "Month", vr, LAYOUT)
        assert LAYOUT.top <= bar.rect.top < LAYOUT.baseline_y


@pytest.mark.parametrize("known_low, known_high", [(20, 115), (0, 95), (15, 45)])
def test_legacy_matches_baseline_away_from_zero(known_low, known_high):
    vr = _range(known_low, known_high)
    for v in (known_low, (known_low + known_high) / 2, known_high):
        legacy = geometry.bar_height_pixels(v, vr, bc.BAR_PLACEMENT_LEGACY)
        baseline = geometry.bar_height_pixels(v, vr, bc.BAR_PLACEMENT_BASELINE)
        assert abs(legacy - baseline) <= 1


def test_legacy_unit_row_at_zero_lowest():
    # lowest == 0: legacy placement adds one unit row (ppu = 13.8).
    vr = _range(10, 45)
    assert vr.lowest == 0
    assert geometry.bar_height_pixels(10, vr, bc.BAR_PLACEMENT_LEGACY) == 152
    assert geometry.bar_height_pixels(10, vr, bc.BAR_PLACEMENT_BASELINE) == 138


def test_bar_height_negative_range():
    vr = _range(0, 95)  # lowest = -10
    assert geometry.bar_height_pixels(0, vr) == 63
    assert geometry.bar_height_pixels(-10, vr) == 0


def test_invalid_placement():
    vr = _range(20, 115)
    with pytest.raises(ValueError):
        geometry.bar_height_pixels(50, vr, "centered")
    with pytest.raises(ValueError):
        geometry.map_series([], "high", "Month", vr, LAYOUT, "centered")


@pytest.mark.parametrize("value", [None, math.nan])
def test_missing_value(value):
    vr = _range(20, 115)
    bar = geometry.map_bar(value, 4, Granularity.MONTH, vr, LAYOUT)
    assert bar.status == BarStatus.MISSING
    assert bar.rect is None
    assert not bar.ok


def test_unsupported_granularity():
    vr = _range(20, 115)
    bar = geometry.map_bar(50, 1, "Quarter", vr, LAYOUT)
    assert bar.status == BarStatus.UNSUPPORTED
    assert bar.rect is None


def test_out_of_range_bucket_raises():
    vr = _range(20, 115)
    with pytest.raises(ValueError):
        geometry.map_bar(50, 13, Granularity.MONTH, vr, LAYOUT)


def test_map_series_skips_missing_bucket():
    vr = _range(20, 115)
    obs = [
        Observation(period_index=i, high=None if i == 6 else 70.0, low=50.0)
        for i in range(1, 53)
    ]
    highs = geometry.map_series(obs, "high", Granularity.WEEK, vr, LAYOUT)
    assert len(highs) == 52
    assert [b.bucket for b in highs if not b.ok] == [6]
    assert len(geometry.drawable(highs)) == 51

    lows = geometry.map_series(obs, "low", Granularity.WEEK, vr, LAYOUT)
    assert len(geometry.drawable(lows)) == 52


def test_map_series_drops_out_of_range_bucket():
    vr = _range(20, 115)
    obs = [
        Observation(period_index=1, high=70.0),
        Observation(period_index=14, high=70.0),
    ]
    bars = geometry.map_series(obs, "high", Granularity.MONTH, vr, LAYOUT)
    assert [b.bucket for b in bars] == [1]


def test_map_series_invalid_field():
    vr = _range(20, 115)
    with pytest.raises(ValueError):
        geometry.map_series([], "mean", Granularity.MONTH, vr, LAYOUT)


def test_low_bars_share_x_with_high_bars():
    vr = _range(20, 115)
    high = geometry.map_bar(80, 5, Granularity.FORTNIGHT, vr, LAYOUT)
    low = geometry.map_bar(40, 5, Granularity.FORTNIGHT, vr, LAYOUT)
    assert (high.rect.x0, high.rect.x1) == (low.rect.x0, low.rect.x1)
    assert high.rect.height > low.rect.height
