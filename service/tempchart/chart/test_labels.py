import pytest

from service.tempchart.base.errors import UnsupportedGranularityError
from service.tempchart.models import CanvasLayout, Granularity

from service.tempchart.chart import labels, periods, scale


LAYOUT = CanvasLayout()


def _measure(text: str) -> tuple[int, int]:
    return 9 * len(text), 18


def test_gridlines_phoenix():
    vr = scale.compute_value_range(20, 115, LAYOUT)
    grid = labels.gridlines(vr, LAYOUT)
    assert [g.label for g in grid] == [
        "120.0", "109.0", "98.0", "87.0", "76.0",
        "65.0", "54.0", "43.0", "32.0", "21.0",
    ]
    assert [g.y for g in grid] == [60 + 69 * i for i in range(10)]


def test_gridlines_keep_fractional_steps():
    # span = 23 is not a multiple of 10.
    vr = scale.compute_value_range(0, 8, LAYOUT)
    grid = labels.gridlines(vr, LAYOUT)
    assert [g.label for g in grid] == [
        "13.0", "10.7", "8.4", "6.1", "3.8",
        "1.5", "-0.8", "-3.1", "-5.4", "-7.7",
    ]
    # All labels distinct.
    assert len({g.label for g in grid}) == 10


@pytest.mark.parametrize(
    "value, expected",
    [(0.0, "0.0"), (-0.0, "0.0"), (-0.04, "0.0"), (12.25, "12.2"), (-3.5, "-3.5")],
)
def test_format_value(value, expected):
    assert labels.format_value(value) == expected


def test_vertical_gridlines():
    assert labels.vertical_gridline_xs(LAYOUT) == [400, 680, 960, 1240]


def test_y_axis_labels_right_aligned():
    vr = scale.compute_value_range(20, 115, LAYOUT)
    y_labels = labels.y_axis_labels(vr, LAYOUT, _measure)
    assert len(y_labels) == 10
    for label, g in zip(y_labels, labels.gridlines(vr, LAYOUT)):
        width, height = _measure(label.text)
        # Right edge sits labels.Y_LABEL_GAP pixels left of the axis.
        assert label.x + width == LAYOUT.left - labels.Y_LABEL_GAP
        assert label.y == g.y - height // 2


def test_month_labels_follow_bars():
    x_labels = labels.x_axis_labels(Granularity.MONTH, LAYOUT, _measure)
    spec = periods.period_spec(Granularity.MONTH)
    assert [lab.text for lab in x_labels] == periods.bucket_labels(Granularity.MONTH)
    assert x_labels[0].x == periods.bar_x(spec, 1, LAYOUT) + labels.MONTH_LABEL_INSET
    assert all(lab.y == LAYOUT.baseline_y + labels.MONTH_LABEL_OFFSET_Y for lab in x_labels)


@pytest.mark.parametrize("granularity, count", [("Week", 52), ("Fortnight", 26)])
def test_numbered_labels_centered(granularity, count):
    x_labels = labels.x_axis_labels(granularity, LAYOUT, _measure)
    spec = periods.period_spec(granularity)
    assert len(x_labels) == count
    assert [lab.text for lab in x_labels] == [str(i) for i in range(1, count + 1)]
    for i, lab in enumerate(x_labels, start=1):
        width, _ = _measure(lab.text)
        center = periods.bucket_center(spec, i, LAYOUT)
        assert abs(lab.x + width / 2 - center) <= 0.5
        assert lab.y == LAYOUT.baseline_y + 18 // 2 + labels.NUMBER_LABEL_OFFSET_Y


def test_unsupported_granularity_has_no_labels():
    with pytest.raises(UnsupportedGranularityError):
        labels.x_axis_labels("Quarter", LAYOUT, _measure)
