import enum
from pydantic import BaseModel, ConfigDict, model_validator


class Granularity(str, enum.Enum):
    """The bucketing scheme of a chart's x axis."""

    WEEK = "Week"
    FORTNIGHT = "Fortnight"
    MONTH = "Month"


class Observation(BaseModel):
    """High and low value of a single bucket (week, fortnight or month).

    Either value may be missing (None) for a given bucket.
    """

    period_index: int
    high: float | None = None
    low: float | None = None
    year: int | None = None

    model_config = ConfigDict(frozen=True)


class CityExtremes(BaseModel):
    """Long-run low and high temperature of a city."""

    city: str
    known_low: float
    known_high: float


################################################################
# Geometry
################################################################


class CanvasLayout(BaseModel):
    """Immutable drawing geometry, created once per render.

    The axis box spans [left, left + axis_width] horizontally and
    [top, top + axis_height] vertically, in pixel coordinates with y
    growing downward.
    """

    width: int = 1280
    height: int = 790  # approximately golden ratio
    top: int = 60
    bottom: int = 40
    left: int = 120
    right: int = 40

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_axis_box(self) -> "CanvasLayout":
        if self.axis_width <= 0 or self.axis_height <= 0:
            raise ValueError(
                f"Margins leave no room for the axis box ({self.axis_width}x{self.axis_height})"
            )
        return self

    @property
    def axis_width(self) -> int:
        return self.width - self.left - self.right

    @property
    def axis_height(self) -> int:
        return self.height - self.top - self.bottom

    @property
    def baseline_y(self) -> int:
        """The y coordinate of the x axis line."""
        return self.top + self.axis_height

    @property
    def axis_right(self) -> int:
        return self.left + self.axis_width


class ValueRange(BaseModel):
    """Padded value range of a chart and its mapping to pixels.

    zero_offset_pixels is the signed vertical distance from the axis baseline
    to the value zero, in screen coordinates: negative if zero lies above the
    baseline (the range crosses zero), positive if it lies below.
    """

    lowest: float
    highest: float
    span: float
    pixels_per_unit: float
    zero_offset_pixels: float

    model_config = ConfigDict(frozen=True)


class Rect(BaseModel):
    """A pixel rectangle given by two opposite corners."""

    x0: int
    y0: int
    x1: int
    y1: int

    model_config = ConfigDict(frozen=True)

    @property
    def width(self) -> int:
        return abs(self.x1 - self.x0)

    @property
    def height(self) -> int:
        return abs(self.y1 - self.y0)

    @property
    def top(self) -> int:
        return min(self.y0, self.y1)

    def corners(self) -> tuple[tuple[int, int], tuple[int, int]]:
        return (self.x0, self.y0), (self.x1, self.y1)


class BarStatus(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    UNSUPPORTED = "unsupported"


class MappedBar(BaseModel):
    """Result of mapping one bucket value to a bar.

    rect is only set if status is OK.
    """

    bucket: int
    status: BarStatus
    rect: Rect | None = None

    @property
    def ok(self) -> bool:
        return self.status == BarStatus.OK


class AxisLabel(BaseModel):
    text: str
    x: int
    y: int


class Gridline(BaseModel):
    """A horizontal gridline and the value it represents."""

    y: int
    value: float
    label: str


################################################################
# Render results
################################################################


class RenderReport(BaseModel):
    """Summary of a single render pass."""

    city: str
    year: int
    granularity: str
    value_range: ValueRange | None = None
    high_bars: int = 0
    low_bars: int = 0
    x_labels: list[str] = []
    y_labels: list[str] = []
    gridlines: int = 0
    # Non-fatal errors, formatted as "ErrorClass: message".
    errors: list[str] = []
    artifact_path: str | None = None

    def add_error(self, exc: Exception) -> None:
        self.errors.append(f"{exc.__class__.__name__}: {exc}")


class PeriodAverage(BaseModel):
    year: int | None
    period_index: int
    high: float | None
    low: float | None

    def __str__(self) -> str:
        return f"{self.year}-{self.period_index}: Avg Hi={self.high}, Avg Lo={self.low}"


################################################################
# Server Status
################################################################


class ServerOptions(BaseModel):
    base_dir: str
    sanitized_postgres_url: str | None = None
    bar_placement: str
