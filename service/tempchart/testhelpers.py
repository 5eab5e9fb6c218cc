from typing import Any, Sequence

from service.tempchart.models import Observation
from service.tempchart.render.canvas import TextStyle


class RecordingCanvas:
    """Canvas that records draw calls instead of drawing.

    Text is measured as 0.6 * size pixels per character and size pixels high.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.calls: list[tuple[str, Any]] = []
        self.presented = False

    def fill_background(self, color: str) -> None:
        self.calls.append(("background", color))

    def draw_line(self, points: Sequence[tuple[int, int]], stroke_width: int, color: str) -> None:
        self.calls.append(("line", (list(points), stroke_width, color)))

    def fill_rectangle(self, top_left, bottom_right, color: str) -> None:
        self.calls.append(("rect", (top_left, bottom_right, color)))

    def measure_text(self, text: str, style: TextStyle) -> tuple[int, int]:
        return int(len(text) * style.size * 0.6), style.size

    def draw_text(self, text: str, style: TextStyle, position) -> None:
        self.calls.append(("text", (text, style.size, position, style.color)))

    def present(self) -> bytes:
        self.presented = True
        return b"recorded"

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]

    def rects(self, color: str | None = None) -> list[tuple]:
        return [
            args for kind, args in self.calls if kind == "rect" and color in (None, args[2])
        ]

    def texts(self, size: int | None = None) -> list[str]:
        return [
            args[0] for kind, args in self.calls if kind == "text" and size in (None, args[1])
        ]

    def text_colors(self) -> set[str]:
        return {args[3] for kind, args in self.calls if kind == "text"}


def monthly_observations(year: int = 2024) -> list[Observation]:
    """Twelve complete monthly observations with highs 56..66 and lows 38..48."""
    highs = [58, 62, 66, 64, 63, 61, 60, 59, 58, 57, 57, 56]
    lows = [40, 42, 46, 48, 47, 45, 44, 43, 41, 40, 39, 38]
    return [
        Observation(period_index=i + 1, high=h, low=lo, year=year)
        for i, (h, lo) in enumerate(zip(highs, lows))
    ]
