"""cupsraster - CUPS raster stream decoder."""

from cupsraster.logger import (
    LogConfig,
    ProgressDisplay,
    RenderLogger,
    VerboseLevel,
)
from cupsraster.raster import (
    CMYKColor,
    Decoder,
    GrayColor,
    Page,
    PageHeader,
    RasterError,
    RasterErrorKind,
)

__version__ = "0.1.0"

__all__ = [
    "CMYKColor",
    "Decoder",
    "GrayColor",
    "LogConfig",
    "Page",
    "PageHeader",
    "ProgressDisplay",
    "RasterError",
    "RasterErrorKind",
    "RenderLogger",
    "VerboseLevel",
]
