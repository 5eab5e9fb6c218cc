"""Maps bucket values to bar rectangles."""

import logging
import math
from typing import Iterable

from service.tempchart.base import constants as bc
from service.tempchart.base.errors import UnsupportedGranularityError
from service.tempchart.models import (
    BarStatus,
    CanvasLayout,
    Granularity,
    MappedBar,
    Observation,
    Rect,
    ValueRange,
)

from . import periods

logger = logging.getLogger("geometry")

# Bars start this many pixels above the baseline so they don't cover the x axis.
BAR_BASE_GAP = 2


def _is_missing(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def bar_height_pixels(
    value: float, value_range: ValueRange, placement: str = bc.BAR_PLACEMENT_LEGACY
) -> int:
    """Returns the distance in pixels from the baseline to the top of a bar.

    With legacy placement, ranges that do not cross zero get one extra unit
    row (pixels_per_unit). For lowest == 0 this shows up as a one-row
    discontinuity compared to baseline placement.

    Baseline placement measures (value - lowest) from the axis bottom.
    """
    ppu = value_range.pixels_per_unit
    if placement == bc.BAR_PLACEMENT_BASELINE:
        return round((value - value_range.lowest) * ppu)
    if placement != bc.BAR_PLACEMENT_LEGACY:
        raise ValueError(f"Invalid bar placement: {placement}")

    raw = value * ppu
    if value_range.zero_offset_pixels >= 0:
        return round(raw - value_range.zero_offset_pixels + ppu)
    return round(raw - value_range.zero_offset_pixels)


def map_bar(
    value: float | None,
    bucket: int,
    granularity: "str | Granularity",
    value_range: ValueRange,
    layout: CanvasLayout,
    placement: str = bc.BAR_PLACEMENT_LEGACY,
) -> MappedBar:
    """Maps the value of a bucket to the rectangle of its bar.

    Returns a MappedBar with status MISSING if value is missing and
    UNSUPPORTED if granularity is not recognized. Neither case raises.

    Raises:
        ValueError if bucket is outside the granularity's bucket range.
    """
    try:
        spec = periods.period_spec(granularity)
    except UnsupportedGranularityError:
        return MappedBar(bucket=bucket, status=BarStatus.UNSUPPORTED)

    if _is_missing(value):
        return MappedBar(bucket=bucket, status=BarStatus.MISSING)

    x = periods.bar_x(spec, bucket, layout)
    adjusted = bar_height_pixels(value, value_range, placement)
    rect = Rect(
        x0=x,
        y0=layout.baseline_y - BAR_BASE_GAP,
        x1=x + spec.bar_width,
        y1=layout.baseline_y - adjusted,
    )
    return MappedBar(bucket=bucket, status=BarStatus.OK, rect=rect)


def map_series(
    observations: Iterable[Observation],
    field: str,
    granularity: "str | Granularity",
    value_range: ValueRange,
    layout: CanvasLayout,
    placement: str = bc.BAR_PLACEMENT_LEGACY,
) -> list[MappedBar]:
    """Maps the "high" or "low" values of all observations to bars.

    Buckets with a missing value are returned with status MISSING.
    Observations with an out-of-range bucket index are logged and dropped.
    """
    if field not in ("high", "low"):
        raise ValueError(f"Invalid field: {field}")
    if placement not in bc.BAR_PLACEMENTS:
        raise ValueError(f"Invalid bar placement: {placement}")

    result = []
    for obs in observations:
        try:
            bar = map_bar(
                getattr(obs, field),
                obs.period_index,
                granularity,
                value_range,
                layout,
                placement,
            )
        except ValueError as e:
            logger.warning("Skipping %s value of bucket %d: %s", field, obs.period_index, e)
            continue
        result.append(bar)
    return result


def drawable(bars: Iterable[MappedBar]) -> list[Rect]:
    """Returns the rectangles of all bars with status OK."""
    return [b.rect for b in bars if b.ok and b.rect is not None]
