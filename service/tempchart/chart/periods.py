"""Per-granularity bucket counts, bar widths and x positions."""

from pydantic import BaseModel, ConfigDict

from service.tempchart.base.dates import month_abbr
from service.tempchart.base.errors import UnsupportedGranularityError
from service.tempchart.db import constants as dc
from service.tempchart.models import CanvasLayout, Granularity


class PeriodSpec(BaseModel):
    granularity: Granularity
    buckets: int
    bar_width: int
    # Name of the bucket index column in the observation tables.
    index_column: str

    model_config = ConfigDict(frozen=True)


PERIODS: dict[Granularity, PeriodSpec] = {
    Granularity.WEEK: PeriodSpec(
        granularity=Granularity.WEEK, buckets=52, bar_width=8, index_column=dc.WEEK_INDEX
    ),
    Granularity.FORTNIGHT: PeriodSpec(
        granularity=Granularity.FORTNIGHT,
        buckets=26,
        bar_width=18,
        index_column=dc.FORTNIGHT_INDEX,
    ),
    Granularity.MONTH: PeriodSpec(
        granularity=Granularity.MONTH, buckets=12, bar_width=30, index_column=dc.MONTH_INDEX
    ),
}

# Accepted spellings besides the enum values themselves.
_ALIASES = {
    "fort": Granularity.FORTNIGHT,
    "weekly": Granularity.WEEK,
    "fortnightly": Granularity.FORTNIGHT,
    "monthly": Granularity.MONTH,
}


def parse_granularity(token: "str | Granularity") -> Granularity:
    """Parses a granularity token such as "Week", "month" or "Fort".

    Raises:
        UnsupportedGranularityError if the token is not recognized.
    """
    if isinstance(token, Granularity):
        return token
    key = token.strip().lower()
    for g in Granularity:
        if g.value.lower() == key:
            return g
    if key in _ALIASES:
        return _ALIASES[key]
    raise UnsupportedGranularityError(token)


def period_spec(granularity: "str | Granularity") -> PeriodSpec:
    return PERIODS[parse_granularity(granularity)]


def _check_bucket(spec: PeriodSpec, bucket: int) -> None:
    if not 1 <= bucket <= spec.buckets:
        raise ValueError(
            f"Bucket {bucket} out of range for {spec.granularity.value} (1..{spec.buckets})"
        )


def bucket_center(spec: PeriodSpec, bucket: int, layout: CanvasLayout) -> float:
    """Returns the x coordinate of the center of the given 1-based bucket."""
    _check_bucket(spec, bucket)
    segment = layout.axis_width / spec.buckets
    return layout.left + (bucket - 0.5) * segment


def bar_x(spec: PeriodSpec, bucket: int, layout: CanvasLayout) -> int:
    """Returns the left edge of the bar for the given bucket.

    Bars are centered within their grid segment.
    """
    return round(bucket_center(spec, bucket, layout) - spec.bar_width / 2)


def bucket_label(spec: PeriodSpec, bucket: int) -> str:
    """Returns the x axis label text of a bucket: "Jan".."Dec" or the bucket number."""
    _check_bucket(spec, bucket)
    if spec.granularity == Granularity.MONTH:
        return month_abbr(bucket)
    return str(bucket)


def bucket_labels(granularity: "str | Granularity") -> list[str]:
    """Returns all x axis label texts, ordered by bucket index."""
    spec = period_spec(granularity)
    return [bucket_label(spec, i) for i in range(1, spec.buckets + 1)]
