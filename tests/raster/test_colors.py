"""色解析のテスト"""

import pytest

from cupsraster.raster.colors import (
    CMYKColor,
    GrayColor,
    color_group_width,
    parse_colors,
)
from cupsraster.raster.constants import ColorOrder, ColorSpace
from cupsraster.raster.errors import RasterError, RasterErrorKind


class TestColorGroupWidth:
    """color_group_width()のテスト"""

    @pytest.mark.parametrize(
        "order, bpc, bpp, expected",
        [
            pytest.param(ColorOrder.CHUNKY, 8, 32, 4, id="チャンキー CMYK 8ビット"),
            pytest.param(ColorOrder.CHUNKY, 1, 1, 1, id="チャンキー 1ビット"),
            pytest.param(ColorOrder.CHUNKY, 16, 48, 6, id="チャンキー 16ビットRGB"),
            pytest.param(ColorOrder.BANDED, 8, 32, 1, id="バンド 8ビット"),
            pytest.param(ColorOrder.PLANAR, 16, 64, 2, id="プレーナー 16ビット"),
        ],
    )
    def test_width(self, make_header, order: int, bpc: int, bpp: int, expected: int) -> None:
        header = make_header(color_order=order, bits_per_color=bpc, bits_per_pixel=bpp)
        assert color_group_width(header) == expected

    def test_unknown_order(self, make_header) -> None:
        header = make_header(color_order=3)
        with pytest.raises(RasterError) as exc_info:
            color_group_width(header)
        assert exc_info.value.kind is RasterErrorKind.INVALID_FORMAT


class TestParseColors:
    """parse_colors()のテスト"""

    def test_black_1bit_all_clear(self, make_header) -> None:
        """ビット0は白"""
        header = make_header(color_space=ColorSpace.BLACK, bits_per_color=1, bits_per_pixel=1)
        assert parse_colors(header, b"\x00") == [GrayColor(255)] * 8

    def test_black_1bit_all_set(self, make_header) -> None:
        """ビット1は黒"""
        header = make_header(color_space=ColorSpace.BLACK, bits_per_color=1, bits_per_pixel=1)
        assert parse_colors(header, b"\xff") == [GrayColor(0)] * 8

    def test_black_1bit_msb_first(self, make_header) -> None:
        header = make_header(color_space=ColorSpace.BLACK, bits_per_color=1, bits_per_pixel=1)
        colors = parse_colors(header, b"\x80\x01")
        assert len(colors) == 16
        assert colors[0] == GrayColor(0)
        assert colors[1:15] == [GrayColor(255)] * 14
        assert colors[15] == GrayColor(0)

    def test_black_8bit(self, make_header) -> None:
        header = make_header(color_space=ColorSpace.BLACK, bits_per_color=8, bits_per_pixel=8)
        assert parse_colors(header, bytes([0, 255, 100])) == [
            GrayColor(255),
            GrayColor(0),
            GrayColor(155),
        ]

    @pytest.mark.parametrize(
        "space",
        [
            pytest.param(ColorSpace.GRAY, id="GRAY"),
            pytest.param(ColorSpace.SGRAY, id="SGRAY"),
        ],
    )
    def test_gray_8bit(self, make_header, space: ColorSpace) -> None:
        header = make_header(color_space=space, bits_per_color=8, bits_per_pixel=8)
        assert parse_colors(header, bytes([0, 128, 255])) == [
            GrayColor(0),
            GrayColor(128),
            GrayColor(255),
        ]

    def test_gray_1bit(self, make_header) -> None:
        """ビット1は白"""
        header = make_header(color_space=ColorSpace.SGRAY, bits_per_color=1, bits_per_pixel=1)
        colors = parse_colors(header, b"\xf0")
        assert colors == [GrayColor(255)] * 4 + [GrayColor(0)] * 4

    def test_cmyk_8bit(self, make_header) -> None:
        header = make_header(color_space=ColorSpace.CMYK, bits_per_color=8, bits_per_pixel=32)
        assert parse_colors(header, bytes([10, 20, 30, 40])) == [CMYKColor(10, 20, 30, 40)]

    def test_cmyk_multiple_pixels(self, make_header) -> None:
        header = make_header(color_space=ColorSpace.CMYK, bits_per_color=8, bits_per_pixel=32)
        colors = parse_colors(header, bytes(range(8)))
        assert colors == [CMYKColor(0, 1, 2, 3), CMYKColor(4, 5, 6, 7)]

    @pytest.mark.parametrize(
        "data",
        [
            pytest.param(b"", id="異常系: 空"),
            pytest.param(bytes([1, 2, 3]), id="異常系: 3バイト"),
            pytest.param(bytes(range(7)), id="異常系: 7バイト"),
        ],
    )
    def test_cmyk_invalid_length(self, make_header, data: bytes) -> None:
        header = make_header(color_space=ColorSpace.CMYK, bits_per_color=8, bits_per_pixel=32)
        with pytest.raises(RasterError) as exc_info:
            parse_colors(header, data)
        assert exc_info.value.kind is RasterErrorKind.INVALID_FORMAT

    def test_accepts_memoryview(self, make_header) -> None:
        header = make_header(color_space=ColorSpace.BLACK, bits_per_color=8, bits_per_pixel=8)
        data = bytearray([0, 255])
        assert parse_colors(header, memoryview(data)) == [GrayColor(255), GrayColor(0)]

    @pytest.mark.parametrize(
        "space, bpc, bpp",
        [
            pytest.param(ColorSpace.RGB, 8, 24, id="異常系: RGB"),
            pytest.param(ColorSpace.SRGB, 8, 24, id="異常系: sRGB"),
            pytest.param(ColorSpace.BLACK, 16, 16, id="異常系: BLACK 16ビット"),
            pytest.param(ColorSpace.CMYK, 1, 4, id="異常系: CMYK 1ビット"),
            pytest.param(ColorSpace.GRAY, 2, 2, id="異常系: GRAY 2ビット"),
        ],
    )
    def test_unsupported_combination(self, make_header, space: int, bpc: int, bpp: int) -> None:
        header = make_header(color_space=space, bits_per_color=bpc, bits_per_pixel=bpp)
        with pytest.raises(RasterError) as exc_info:
            parse_colors(header, b"\x00\x00\x00\x00")
        assert exc_info.value.kind is RasterErrorKind.UNSUPPORTED

    @pytest.mark.parametrize(
        "order",
        [
            pytest.param(ColorOrder.BANDED, id="異常系: バンド"),
            pytest.param(ColorOrder.PLANAR, id="異常系: プレーナー"),
        ],
    )
    def test_non_chunky_unsupported(self, make_header, order: int) -> None:
        header = make_header(color_order=order, color_space=ColorSpace.BLACK)
        with pytest.raises(RasterError) as exc_info:
            parse_colors(header, b"\x00")
        assert exc_info.value.kind is RasterErrorKind.UNSUPPORTED
