"""Render configuration.

Most parameters can be provided as TEMPCHART_* environment variables.
"""

import os
from pydantic import BaseModel, ConfigDict, field_validator

from service.tempchart.base import constants as bc
from service.tempchart.chart import scale
from service.tempchart.chart.colors import ChartColors
from service.tempchart.models import CanvasLayout

from .canvas import TextStyle


class RenderOptions(BaseModel):
    layout: CanvasLayout = CanvasLayout()
    low_padding: float = scale.DEFAULT_LOW_PADDING
    high_padding: float = scale.DEFAULT_HIGH_PADDING
    bar_placement: str = bc.BAR_PLACEMENT_LEGACY
    colors: ChartColors = ChartColors()
    title_size: int = 36
    x_label_size: int = 14
    y_label_size: int = 18

    model_config = ConfigDict(frozen=True)

    @field_validator("bar_placement")
    @classmethod
    def _valid_placement(cls, v: str) -> str:
        if v not in bc.BAR_PLACEMENTS:
            raise ValueError(
                f"Invalid bar placement: {v} (must be one of {', '.join(bc.BAR_PLACEMENTS)})"
            )
        return v

    @property
    def title_style(self) -> TextStyle:
        return TextStyle(size=self.title_size, color=self.colors.text)

    @property
    def x_label_style(self) -> TextStyle:
        return TextStyle(size=self.x_label_size, color=self.colors.text)

    @property
    def y_label_style(self) -> TextStyle:
        return TextStyle(size=self.y_label_size, color=self.colors.text)

    @classmethod
    def from_env(cls, **overrides) -> "RenderOptions":
        """Builds RenderOptions from environment variables.

        TEMPCHART_BAR_PLACEMENT selects "legacy" (default) or "baseline" bar
        placement. Keyword arguments that are not None take precedence.
        """
        values = {}
        placement = os.getenv("TEMPCHART_BAR_PLACEMENT")
        if placement:
            values["bar_placement"] = placement.lower()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def base_dir_from_env() -> str:
    return os.environ.get("TEMPCHART_BASE_DIR", ".")


def output_dir_from_env(base_dir: str) -> str:
    return os.environ.get(
        "TEMPCHART_OUTPUT_DIR", os.path.join(base_dir, bc.OUTPUT_SUBDIR)
    )
