from pydantic import BaseModel, ConfigDict, field_validator


# tableau20 colors from
# https://vega.github.io/vega/docs/schemes/
COLORS_TABLEAU20 = {
    # Blue Pair
    "SteelBlue": "#4c78a8",
    "SkyBlue": "#9ecae9",
    # Orange Pair
    "Tangerine": "#f58518",
    "Apricot": "#ffbf79",
    # Green Pair
    "LeafGreen": "#54a24b",
    "PastelGreen": "#88d27a",
    # Red Pair
    "CoralRed": "#e45756",
    "SalmonPink": "#ff9d98",
}


COLORS_COMMON_GRAYS = {
    "White": "#ffffff",
    "VeryLightGray": "#f0f0f0",
    "LightGray": "#d9d9d9",
    "MediumGray": "#808080",
    "DarkGray": "#404040",
    "Black": "#000000",
}

# Default bar colors.
COLORS_BASIC = {
    "Red": "#ff0000",
    "Green": "#00ff00",
}

RGB = tuple[int, int, int]


def named_color(name: str) -> str:
    """Returns the hex value of a color name from any of the palettes above."""
    for palette in (COLORS_BASIC, COLORS_TABLEAU20, COLORS_COMMON_GRAYS):
        if name in palette:
            return palette[name]
    raise ValueError(f"{name} not found in color palettes.")


def to_rgb(color: str) -> RGB:
    """Converts a hex color ("#e45756") or a palette color name to an RGB tuple."""
    if not color.startswith("#"):
        color = named_color(color)
    h = color.removeprefix("#")
    if len(h) != 6:
        raise ValueError(f"Invalid hex color: {color}")
    try:
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
    except ValueError:
        raise ValueError(f"Invalid hex color: {color}")


class ChartColors(BaseModel):
    """Colors of the chart elements, as hex strings or palette names."""

    background: str = "White"
    axis: str = "Black"
    grid: str = "MediumGray"
    text: str = "Black"
    high_bar: str = "Red"
    low_bar: str = "Green"

    model_config = ConfigDict(frozen=True)

    @field_validator("*")
    @classmethod
    def _valid_color(cls, v: str) -> str:
        to_rgb(v)
        return v
