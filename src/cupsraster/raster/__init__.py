"""Raster module for cupsraster.

CUPSラスタストリームをライン単位・ページ単位でデコードするモジュール。
対応する色空間と深度はparse_colorsのドキュメントを参照。
"""

from cupsraster.raster.colors import (
    CMYKColor,
    Color,
    GrayColor,
    color_group_width,
    parse_colors,
)
from cupsraster.raster.constants import (
    AdvanceMedia,
    ColorOrder,
    ColorSpace,
    CutMedia,
    Jog,
    LeadingEdge,
    Orientation,
)
from cupsraster.raster.decoder import Decoder, StreamFormat, detect_format
from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.header import (
    BoundingBox,
    HeaderCodec,
    HeaderExtension,
    ImagingBoundingBox,
    PageHeader,
    RasterParams,
)
from cupsraster.raster.page import Page
from cupsraster.raster.stream import ByteOrder

__all__ = [
    "AdvanceMedia",
    "BoundingBox",
    "ByteOrder",
    "CMYKColor",
    "Color",
    "ColorOrder",
    "ColorSpace",
    "CutMedia",
    "Decoder",
    "GrayColor",
    "HeaderCodec",
    "HeaderExtension",
    "ImagingBoundingBox",
    "Jog",
    "LeadingEdge",
    "Orientation",
    "Page",
    "PageHeader",
    "RasterError",
    "RasterErrorKind",
    "RasterParams",
    "StreamFormat",
    "color_group_width",
    "detect_format",
    "parse_colors",
]
