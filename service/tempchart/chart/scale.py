"""Value range and pixel scaling of the y axis."""

import logging

from service.tempchart.base.errors import InvalidRangeError
from service.tempchart.models import CanvasLayout, ValueRange

logger = logging.getLogger("scale")

# Padding applied to the known extremes so bars and labels never touch the edges.
DEFAULT_LOW_PADDING = 10.0
DEFAULT_HIGH_PADDING = 5.0

OFFSET_BELOW_ZERO = "below_zero"
OFFSET_AT_ZERO = "at_zero"
OFFSET_ABOVE_ZERO = "above_zero"


def zero_offset_pixels(lowest: float, pixels_per_unit: float) -> float:
    """Returns the signed pixel distance from the axis baseline to the value zero.

    Screen coordinates are used (y grows downward):

    - lowest < 0: zero lies above the baseline, the offset is negative.
    - lowest == 0: the baseline is zero.
    - lowest > 0: zero lies below the visible axis. The offset includes
      one extra unit row, which compensates for the unit row that legacy bar
      placement adds to ranges not crossing zero.
    """
    if lowest < 0:
        return lowest * pixels_per_unit
    if lowest == 0:
        return 0.0
    return (lowest + 1) * pixels_per_unit


def offset_branch(value_range: ValueRange) -> str:
    """Returns which of the three zero offset cases applies to value_range."""
    if value_range.lowest < 0:
        return OFFSET_BELOW_ZERO
    if value_range.lowest == 0:
        return OFFSET_AT_ZERO
    return OFFSET_ABOVE_ZERO


def compute_value_range(
    known_low: float,
    known_high: float,
    layout: CanvasLayout,
    low_padding: float = DEFAULT_LOW_PADDING,
    high_padding: float = DEFAULT_HIGH_PADDING,
) -> ValueRange:
    """Computes the padded value range for the given long-run extremes.

    Args:
        known_low: lowest value ever recorded for the series, not just
            in the rendered window.
        known_high: highest value ever recorded for the series.
        layout: the canvas layout, which determines the axis height.
        low_padding: units subtracted from known_low. Must be positive.
        high_padding: units added to known_high. Must be positive.

    Raises:
        InvalidRangeError if the padded span is not positive.
    """
    if low_padding <= 0 or high_padding <= 0:
        raise ValueError(
            f"Paddings must be positive (low={low_padding}, high={high_padding})"
        )

    lowest = known_low - low_padding
    highest = known_high + high_padding
    span = highest - lowest
    if span <= 0:
        raise InvalidRangeError(lowest, highest)

    pixels_per_unit = layout.axis_height / span
    logger.info(
        "Axis height: %d, value range: [%s, %s], span: %s, pixels per unit: %.4f",
        layout.axis_height,
        lowest,
        highest,
        span,
        pixels_per_unit,
    )
    return ValueRange(
        lowest=lowest,
        highest=highest,
        span=span,
        pixels_per_unit=pixels_per_unit,
        zero_offset_pixels=zero_offset_pixels(lowest, pixels_per_unit),
    )
