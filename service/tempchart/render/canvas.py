"""Drawing backends for charts."""

import io
import logging
from typing import Protocol, Sequence

from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel, ConfigDict

from service.tempchart.chart.colors import to_rgb

logger = logging.getLogger("canvas")

Point = tuple[int, int]


class TextStyle(BaseModel):
    family: str = "sans-serif"
    size: int = 14
    color: str = "Black"

    model_config = ConfigDict(frozen=True)


class Canvas(Protocol):
    """The drawing operations a chart render pass needs.

    Colors are hex strings ("#ff0000") or palette names (see chart.colors).
    """

    def fill_background(self, color: str) -> None: ...

    def draw_line(self, points: Sequence[Point], stroke_width: int, color: str) -> None: ...

    def fill_rectangle(self, top_left: Point, bottom_right: Point, color: str) -> None: ...

    def measure_text(self, text: str, style: TextStyle) -> tuple[int, int]: ...

    def draw_text(self, text: str, style: TextStyle, position: Point) -> None: ...

    def present(self) -> bytes:
        """Finishes drawing and returns the encoded image."""
        ...


# Font files tried for the "sans-serif" family, in order.
_SANS_SERIF_FONTS = ["DejaVuSans.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"]


def _load_font(style: TextStyle) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates = (
        _SANS_SERIF_FONTS if style.family == "sans-serif" else [style.family]
    )
    for name in candidates:
        try:
            return ImageFont.truetype(name, size=style.size)
        except OSError:
            continue
    logger.debug("No TrueType font found for %s, using Pillow's default font", style.family)
    return ImageFont.load_default(size=style.size)


class PillowCanvas:
    """Raster canvas backed by a Pillow image, encoded as PNG on present()."""

    def __init__(self, width: int, height: int, image_format: str = "PNG"):
        self.width = width
        self.height = height
        self.image_format = image_format
        self._image = Image.new("RGB", (width, height), (255, 255, 255))
        self._draw = ImageDraw.Draw(self._image)
        self._fonts: dict[TextStyle, ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        self._presented = False

    def _font(self, style: TextStyle):
        if style not in self._fonts:
            self._fonts[style] = _load_font(style)
        return self._fonts[style]

    def _check_open(self):
        if self._presented:
            raise RuntimeError("Canvas was already presented")

    def fill_background(self, color: str) -> None:
        self._check_open()
        self._draw.rectangle(
            [0, 0, self.width - 1, self.height - 1], fill=to_rgb(color)
        )

    def draw_line(self, points: Sequence[Point], stroke_width: int, color: str) -> None:
        self._check_open()
        self._draw.line(list(points), fill=to_rgb(color), width=stroke_width)

    def fill_rectangle(self, top_left: Point, bottom_right: Point, color: str) -> None:
        self._check_open()
        # Pillow requires x0 <= x1 and y0 <= y1.
        (xa, ya), (xb, yb) = top_left, bottom_right
        box = [min(xa, xb), min(ya, yb), max(xa, xb), max(ya, yb)]
        self._draw.rectangle(box, fill=to_rgb(color))

    def measure_text(self, text: str, style: TextStyle) -> tuple[int, int]:
        left, top, right, bottom = self._draw.textbbox(
            (0, 0), text, font=self._font(style)
        )
        return int(right - left), int(bottom - top)

    def draw_text(self, text: str, style: TextStyle, position: Point) -> None:
        self._check_open()
        self._draw.text(
            position, text, fill=to_rgb(style.color), font=self._font(style)
        )

    def present(self) -> bytes:
        self._presented = True
        buf = io.BytesIO()
        self._image.save(buf, format=self.image_format)
        return buf.getvalue()
