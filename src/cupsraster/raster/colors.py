"""色解析モジュール

デコード済みのライン・ページのバイト列を、ピクセルごとの色値に変換する。

対応する組み合わせ（色順序はチャンキーのみ）:
- BLACK 1ビット: 1バイト=8ピクセル、MSBから。ビット1が黒（gray 0）
- BLACK 8ビット: 1バイト=1ピクセル。値はインク濃度で、表示上のgray = 255 - 値
- CMYK 8ビット: 4バイト=1ピクセル（C, M, Y, Kの順）
- GRAY/SGRAY 1ビット: ビット1が白（gray 255）
- GRAY/SGRAY 8ビット: 1バイト=1ピクセル。値をそのまま明度とする
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cupsraster.raster.constants import ColorOrder, ColorSpace, describe
from cupsraster.raster.errors import RasterError, RasterErrorKind

if TYPE_CHECKING:
    from cupsraster.raster.header import PageHeader


@dataclass(frozen=True)
class GrayColor:
    """グレースケールの色値（0=黒, 255=白）"""

    y: int


@dataclass(frozen=True)
class CMYKColor:
    """CMYKの色値（各チャンネル0-255）"""

    c: int
    m: int
    y: int
    k: int


Color = GrayColor | CMYKColor

_WHITE = GrayColor(255)
_BLACK = GrayColor(0)
_GRAY_LEVELS = tuple(GrayColor(v) for v in range(256))

_ADDITIVE_GRAY_SPACES = (ColorSpace.GRAY, ColorSpace.SGRAY)


def color_group_width(header: PageHeader) -> int:
    """色グループ1個分のバイト幅を返す

    ランレングス展開時の作業バッファと、CMYKのピクセル区切りに使用する。

    Args:
        header: ページヘッダー

    Returns:
        チャンキーならceil(bits_per_pixel / 8)、
        バンド・プレーナーならceil(bits_per_color / 8)

    Raises:
        RasterError: 未知の色順序の場合（INVALID_FORMAT）
    """
    raster = header.raster
    if raster.color_order == ColorOrder.CHUNKY:
        return (raster.bits_per_pixel + 7) // 8
    if raster.color_order in (ColorOrder.BANDED, ColorOrder.PLANAR):
        return (raster.bits_per_color + 7) // 8
    raise RasterError(
        RasterErrorKind.INVALID_FORMAT,
        f"未知の色順序です: {raster.color_order}",
    )


def parse_colors(header: PageHeader, data: bytes | bytearray | memoryview) -> list[Color]:
    """バイト列をピクセルごとの色値に変換する

    1ビット深度ではライン末尾のパディングビットも色として出力されるため、
    呼び出し元で必要に応じてページ幅に切り詰めること。

    Args:
        header: ページヘッダー
        data: デコード済みのラインまたはページのバイト列

    Returns:
        色値のリスト

    Raises:
        RasterError: 未対応の組み合わせ（UNSUPPORTED）、
            CMYKのバイト長が4の正の倍数でない場合（INVALID_FORMAT）
    """
    raster = header.raster
    if raster.color_order != ColorOrder.CHUNKY:
        raise RasterError(
            RasterErrorKind.UNSUPPORTED,
            f"未対応の色順序です: {describe(ColorOrder, raster.color_order)}",
        )

    space = raster.color_space
    depth = raster.bits_per_color
    if space == ColorSpace.BLACK and depth == 1:
        return _parse_bits(data, set_bit=_BLACK, clear_bit=_WHITE)
    if space == ColorSpace.BLACK and depth == 8:
        return [_GRAY_LEVELS[255 - v] for v in data]
    if space in _ADDITIVE_GRAY_SPACES and depth == 1:
        return _parse_bits(data, set_bit=_WHITE, clear_bit=_BLACK)
    if space in _ADDITIVE_GRAY_SPACES and depth == 8:
        return [_GRAY_LEVELS[v] for v in data]
    if space == ColorSpace.CMYK and depth == 8:
        return _parse_cmyk(data)

    raise RasterError(
        RasterErrorKind.UNSUPPORTED,
        f"未対応の色空間・深度です: {describe(ColorSpace, space)}, {depth}ビット",
    )


def _parse_bits(
    data: bytes | bytearray | memoryview,
    *,
    set_bit: GrayColor,
    clear_bit: GrayColor,
) -> list[Color]:
    """1ビット深度のバイト列を展開する（MSBが先頭のピクセル）"""
    colors: list[Color] = []
    for packed in data:
        for shift in range(7, -1, -1):
            colors.append(set_bit if (packed >> shift) & 1 else clear_bit)
    return colors


def _parse_cmyk(data: bytes | bytearray | memoryview) -> list[Color]:
    """4バイトごとにCMYKの色値へ変換する"""
    if len(data) == 0 or len(data) % 4 != 0:
        raise RasterError(
            RasterErrorKind.INVALID_FORMAT,
            f"CMYKデータの長さが4の倍数ではありません: {len(data)}",
        )
    raw = bytes(data)
    return [CMYKColor(*raw[i : i + 4]) for i in range(0, len(raw), 4)]
