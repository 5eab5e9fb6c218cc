from .models import *

__all__ = [
    "AxisLabel",
    "BarStatus",
    "CanvasLayout",
    "CityExtremes",
    "Granularity",
    "Gridline",
    "MappedBar",
    "Observation",
    "PeriodAverage",
    "Rect",
    "RenderReport",
    "ServerOptions",
    "ValueRange",
]
