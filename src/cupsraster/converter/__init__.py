"""Converter module for cupsraster.

ラスタページを画像として取り出し、画像ファイルへ書き出すモジュール。
"""

from cupsraster.converter.base import BaseConverter, ConversionResult, ConversionStatus
from cupsraster.converter.image import (
    OutputFormat,
    RasterImageConverter,
    SurfaceLayout,
    page_image,
    surface_layout,
)

__all__ = [
    "BaseConverter",
    "ConversionResult",
    "ConversionStatus",
    "OutputFormat",
    "RasterImageConverter",
    "SurfaceLayout",
    "page_image",
    "surface_layout",
]
