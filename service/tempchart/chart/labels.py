"""Axis labels, tick marks and gridlines."""

from typing import Callable

from service.tempchart.models import (
    AxisLabel,
    CanvasLayout,
    Granularity,
    Gridline,
    ValueRange,
)

from . import periods

# Measures the (width, height) of a label text in pixels.
MeasureFunc = Callable[[str], tuple[int, int]]

HORIZONTAL_GRIDLINES = 10
VERTICAL_GRIDLINES = 4

# Gap between the y axis and the right edge of its labels.
Y_LABEL_GAP = 12
# Month labels start this many pixels right of the bar's left edge.
MONTH_LABEL_INSET = 5
MONTH_LABEL_OFFSET_Y = 10
# Numbered labels sit this many pixels below half their height under the axis.
NUMBER_LABEL_OFFSET_Y = 5


def format_value(value: float) -> str:
    """Formats a y axis value with one fractional digit, e.g. "-3.5"."""
    s = f"{value:.1f}"
    # Avoid "-0.0"
    return "0.0" if s == "-0.0" else s


def gridlines(value_range: ValueRange, layout: CanvasLayout) -> list[Gridline]:
    """Returns the horizontal gridlines, from top to bottom.

    The value of gridline i is highest - (span / 10) * i. Fractional steps
    are kept, so labels don't collide when span is not a multiple of 10.
    """
    step = value_range.span / HORIZONTAL_GRIDLINES
    result = []
    for i in range(HORIZONTAL_GRIDLINES):
        value = value_range.highest - step * i
        result.append(
            Gridline(
                y=layout.top + i * layout.axis_height // HORIZONTAL_GRIDLINES,
                value=value,
                label=format_value(value),
            )
        )
    return result


def vertical_gridline_xs(layout: CanvasLayout) -> list[int]:
    tick_width = layout.axis_width // VERTICAL_GRIDLINES
    return [layout.left + k * tick_width for k in range(1, VERTICAL_GRIDLINES + 1)]


def y_axis_labels(
    value_range: ValueRange,
    layout: CanvasLayout,
    measure: MeasureFunc,
    gap: int = Y_LABEL_GAP,
) -> list[AxisLabel]:
    """Returns y axis labels, right-aligned against the axis and centered on their gridline."""
    labels = []
    for g in gridlines(value_range, layout):
        width, height = measure(g.label)
        labels.append(
            AxisLabel(text=g.label, x=layout.left - gap - width, y=g.y - height // 2)
        )
    return labels


def x_axis_labels(
    granularity: "str | Granularity",
    layout: CanvasLayout,
    measure: MeasureFunc,
) -> list[AxisLabel]:
    """Returns one x axis label per bucket, ordered by bucket index.

    Raises:
        UnsupportedGranularityError if granularity is not recognized.
    """
    spec = periods.period_spec(granularity)
    labels = []
    for i in range(1, spec.buckets + 1):
        text = periods.bucket_label(spec, i)
        if spec.granularity == Granularity.MONTH:
            x = periods.bar_x(spec, i, layout) + MONTH_LABEL_INSET
            y = layout.baseline_y + MONTH_LABEL_OFFSET_Y
        else:
            width, height = measure(text)
            x = round(periods.bucket_center(spec, i, layout) - width / 2)
            y = layout.baseline_y + height // 2 + NUMBER_LABEL_OFFSET_Y
        labels.append(AxisLabel(text=text, x=x, y=y))
    return labels
