"""Renders high/low temperature bar charts.

A render pass reads the city's long-run extremes and the observations of
the requested year, then draws, in this order: background, axes, gridlines,
title, axis labels, high bars, low bars.
"""

import logging
import os
import tempfile
from typing import Callable
from pydantic import BaseModel

from service.tempchart import models
from service.tempchart.base.errors import (
    NoDataError,
    SourceUnavailableError,
    UnsupportedGranularityError,
)
from service.tempchart.chart import geometry, labels, periods, scale
from service.tempchart.db.source import ObservationSource

from .canvas import Canvas, PillowCanvas
from .options import RenderOptions

logger = logging.getLogger("render")

CanvasFactory = Callable[[int, int], Canvas]

AXIS_STROKE = 5
TICK_STROKE = 3
GRID_STROKE = 1
TICK_LENGTH = 10


class RenderResult(BaseModel):
    image: bytes
    report: models.RenderReport


def chart_title(city: str, year: int, granularity_label: str) -> str:
    return f"{year} {city}  {granularity_label} Avg Temperatures"


def _draw_axes(canvas: Canvas, options: RenderOptions) -> None:
    layout = options.layout
    color = options.colors.axis
    canvas.draw_line(
        [(layout.left, layout.top), (layout.left, layout.baseline_y)],
        AXIS_STROKE,
        color,
    )
    canvas.draw_line(
        [(layout.left - 2, layout.baseline_y), (layout.axis_right, layout.baseline_y)],
        AXIS_STROKE,
        color,
    )


def _draw_grids(
    canvas: Canvas, value_range: models.ValueRange, options: RenderOptions
) -> int:
    """Draws vertical and horizontal gridlines with their tick marks.

    Returns the number of horizontal gridlines.
    """
    layout = options.layout
    colors = options.colors
    for x in labels.vertical_gridline_xs(layout):
        canvas.draw_line(
            [(x, layout.top), (x, layout.baseline_y - 2)], GRID_STROKE, colors.grid
        )
        canvas.draw_line(
            [(x, layout.baseline_y), (x, layout.baseline_y + TICK_LENGTH)],
            TICK_STROKE,
            colors.axis,
        )

    grid = labels.gridlines(value_range, layout)
    for g in grid:
        canvas.draw_line(
            [(layout.left + 2, g.y), (layout.axis_right, g.y)], GRID_STROKE, colors.grid
        )
        canvas.draw_line(
            [(layout.left - TICK_LENGTH, g.y), (layout.left, g.y)],
            TICK_STROKE,
            colors.axis,
        )
    return len(grid)


def _draw_title(canvas: Canvas, title: str, options: RenderOptions) -> None:
    width, height = canvas.measure_text(title, options.title_style)
    canvas.draw_text(
        title,
        options.title_style,
        (options.layout.width // 2 - width // 2, height - 10),
    )


def _draw_labels(
    canvas: Canvas,
    granularity: models.Granularity,
    value_range: models.ValueRange,
    options: RenderOptions,
    report: models.RenderReport,
) -> None:
    layout = options.layout
    x_style, y_style = options.x_label_style, options.y_label_style

    x_labels = labels.x_axis_labels(
        granularity, layout, lambda s: canvas.measure_text(s, x_style)
    )
    for label in x_labels:
        canvas.draw_text(label.text, x_style, (label.x, label.y))

    y_labels = labels.y_axis_labels(
        value_range, layout, lambda s: canvas.measure_text(s, y_style)
    )
    for label in y_labels:
        canvas.draw_text(label.text, y_style, (label.x, label.y))

    report.x_labels = [label.text for label in x_labels]
    report.y_labels = [label.text for label in y_labels]


def _draw_bars(
    canvas: Canvas,
    observations: list[models.Observation],
    field: str,
    color: str,
    granularity: models.Granularity,
    value_range: models.ValueRange,
    options: RenderOptions,
) -> int:
    bars = geometry.map_series(
        observations,
        field,
        granularity,
        value_range,
        options.layout,
        options.bar_placement,
    )
    rects = geometry.drawable(bars)
    for r in rects:
        top_left, bottom_right = r.corners()
        canvas.fill_rectangle(top_left, bottom_right, color)
    skipped = [b.bucket for b in bars if not b.ok]
    if skipped:
        logger.debug("No %s bar for buckets %s", field, skipped)
    return len(rects)


def render_chart(
    source: ObservationSource,
    city: str,
    year: int,
    granularity: "str | models.Granularity",
    canvas_factory: CanvasFactory = PillowCanvas,
    options: RenderOptions | None = None,
) -> RenderResult:
    """Renders the chart of a city, year and granularity.

    Non-fatal problems (unsupported granularity, unavailable or missing
    observations) are recorded in the report of the result and yield a chart
    with axes, gridlines and title, but without bars.

    Raises:
        CityNotFoundError, NoDataError, SourceUnavailableError if the city's
            extremes cannot be read.
        InvalidRangeError if the padded value range is empty.
        Both are raised before anything is drawn.
    """
    options = options or RenderOptions()
    layout = options.layout

    granularity_label = (
        granularity.value if isinstance(granularity, models.Granularity) else granularity
    )
    report = models.RenderReport(city=city, year=year, granularity=granularity_label)

    extremes = source.city_extremes(city)
    logger.info(
        "Extremes of %s: low=%s high=%s", extremes.city, extremes.known_low, extremes.known_high
    )
    value_range = scale.compute_value_range(
        extremes.known_low,
        extremes.known_high,
        layout,
        low_padding=options.low_padding,
        high_padding=options.high_padding,
    )
    report.value_range = value_range

    g: models.Granularity | None = None
    try:
        g = periods.parse_granularity(granularity)
        report.granularity = g.value
    except UnsupportedGranularityError as e:
        logger.warning("Rendering %s/%d without labels and bars: %s", city, year, e)
        report.add_error(e)

    observations: list[models.Observation] = []
    if g is not None:
        try:
            observations = source.observations(extremes.city, year, g)
        except (NoDataError, SourceUnavailableError) as e:
            logger.warning("Rendering %s/%d without bars: %s", city, year, e)
            report.add_error(e)

    for o in observations:
        logger.debug("%d-%d: Avg Hi=%s, Avg Lo=%s", year, o.period_index, o.high, o.low)

    canvas = canvas_factory(layout.width, layout.height)
    canvas.fill_background(options.colors.background)
    _draw_axes(canvas, options)
    report.gridlines = _draw_grids(canvas, value_range, options)
    _draw_title(canvas, chart_title(extremes.city, year, report.granularity), options)

    if g is not None:
        _draw_labels(canvas, g, value_range, options, report)
        report.high_bars = _draw_bars(
            canvas, observations, "high", options.colors.high_bar, g, value_range, options
        )
        report.low_bars = _draw_bars(
            canvas, observations, "low", options.colors.low_bar, g, value_range, options
        )

    image = canvas.present()
    logger.info(
        "Rendered %s/%d/%s: %d high bars, %d low bars, %d errors",
        city,
        year,
        report.granularity,
        report.high_bars,
        report.low_bars,
        len(report.errors),
    )
    return RenderResult(image=image, report=report)


def artifact_filename(city: str, year: int, granularity_label: str) -> str:
    """Returns the file name of a rendered chart, e.g. "Phoenix_AZ_2024_month.png"."""
    safe_city = "".join(c if c.isalnum() or c in "-_" else "_" for c in city)
    safe_granularity = "".join(c for c in granularity_label.lower() if c.isalnum())
    return f"{safe_city}_{year}_{safe_granularity}.png"


def write_artifact(data: bytes, path: str) -> None:
    """Writes data to path atomically: either the complete file exists or none."""
    out_dir = os.path.dirname(path) or "."
    os.makedirs(out_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=out_dir, prefix=".tmp-", suffix=".png")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def render_to_file(
    source: ObservationSource,
    city: str,
    year: int,
    granularity: "str | models.Granularity",
    out_dir: str,
    canvas_factory: CanvasFactory = PillowCanvas,
    options: RenderOptions | None = None,
) -> models.RenderReport:
    """Renders a chart and writes it to out_dir.

    Fatal errors propagate and no file is written.
    """
    result = render_chart(source, city, year, granularity, canvas_factory, options)
    report = result.report
    path = os.path.join(out_dir, artifact_filename(city, year, report.granularity))
    write_artifact(result.image, path)
    report.artifact_path = path
    logger.info("Wrote %s (%d bytes)", path, len(result.image))
    return report
