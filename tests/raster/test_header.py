"""ページヘッダーデコーダーのテスト"""

from io import BytesIO

import pytest

from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.header import (
    V1_HEADER_SIZE,
    V2_HEADER_SIZE,
    BoundingBox,
    HeaderCodec,
    ImagingBoundingBox,
    PageHeader,
    cstring,
)
from cupsraster.raster.stream import ByteOrder, StreamReader


class TestCString:
    """cstring()のテスト"""

    @pytest.mark.parametrize(
        "data, expected",
        [
            pytest.param(b"Letter\x00" + b"\x00" * 57, "Letter", id="正常系: NUL終端で切り詰め"),
            pytest.param(b"A\x00B\x00" + b"\x00" * 60, "A", id="正常系: 最初のNULで切り詰め"),
            pytest.param(b"\x00" * 64, "", id="正常系: 空文字列"),
            pytest.param(b"X" * 64, "", id="境界値: NULなしは空文字列"),
        ],
    )
    def test_cstring(self, data: bytes, expected: str) -> None:
        assert cstring(data) == expected


class TestHeaderSizes:
    """ヘッダーサイズ定数のテスト"""

    def test_v1_header_size(self) -> None:
        assert V1_HEADER_SIZE == 420

    def test_v2_header_size(self) -> None:
        assert V2_HEADER_SIZE == 1796

    @pytest.mark.parametrize(
        "version, expected",
        [
            pytest.param(1, 420, id="バージョン1"),
            pytest.param(2, 1796, id="バージョン2"),
            pytest.param(3, 1796, id="バージョン3"),
        ],
    )
    def test_codec_size(self, version: int, expected: int) -> None:
        assert HeaderCodec(ByteOrder.BIG, version).size == expected

    def test_builder_matches_codec_size(self, raster_builder) -> None:
        """テスト用ビルダーのヘッダー長がコーデックと一致する"""
        assert len(raster_builder(version=1, byte_order=">").header()) == V1_HEADER_SIZE
        assert len(raster_builder(version=3, byte_order="<").header()) == V2_HEADER_SIZE

    def test_unsupported_version(self) -> None:
        with pytest.raises(RasterError) as exc_info:
            HeaderCodec(ByteOrder.LITTLE, 4)
        assert exc_info.value.kind is RasterErrorKind.UNSUPPORTED


class TestHeaderCodecV1:
    """バージョン1ヘッダーのデコードテスト"""

    @pytest.mark.parametrize(
        "byte_order, prefix",
        [
            pytest.param(ByteOrder.BIG, ">", id="ビッグエンディアン"),
            pytest.param(ByteOrder.LITTLE, "<", id="リトルエンディアン"),
        ],
    )
    def test_decode_fields(self, raster_builder, byte_order: ByteOrder, prefix: str) -> None:
        """共通部の各フィールドが正しい位置から読み取られる"""
        data = raster_builder(version=1, byte_order=prefix).header(
            media_class="PwgRaster",
            media_color="white",
            media_type="stationery",
            output_type="Normal",
            advance_distance=11,
            advance_media=4,
            collate=1,
            cut_media=2,
            duplex=1,
            horiz_dpi=600,
            vert_dpi=300,
            bbox_left=1,
            bbox_bottom=2,
            bbox_right=3,
            bbox_top=4,
            jog=3,
            leading_edge=2,
            margin_left=18,
            margin_bottom=36,
            media_position=5,
            media_weight=80,
            num_copies=2,
            orientation=1,
            page_width=612,
            page_length=792,
            tumble=1,
            width=633,
            height=100,
            media_type_code=7,
            bits_per_color=1,
            bits_per_pixel=1,
            bytes_per_line=80,
            color_order=0,
            color_space=3,
            compression=1,
            row_count=9,
            row_feed=10,
            row_step=12,
        )
        header = HeaderCodec(byte_order, 1).decode_bytes(data)

        assert isinstance(header, PageHeader)
        assert header.version == 1
        assert header.media_class == "PwgRaster"
        assert header.media_color == "white"
        assert header.media_type == "stationery"
        assert header.output_type == "Normal"
        assert header.advance_distance == 11
        assert header.advance_media == 4
        assert header.collate is True
        assert header.cut_media == 2
        assert header.duplex is True
        assert (header.horiz_dpi, header.vert_dpi) == (600, 300)
        assert header.bounding_box == BoundingBox(left=1, bottom=2, right=3, top=4)
        assert header.insert_sheet is False
        assert header.jog == 3
        assert header.leading_edge == 2
        assert (header.margin_left, header.margin_bottom) == (18, 36)
        assert header.manual_feed is False
        assert header.media_position == 5
        assert header.media_weight == 80
        assert header.num_copies == 2
        assert header.orientation == 1
        assert (header.page_width, header.page_length) == (612, 792)
        assert header.tumble is True
        assert header.extension is None

        raster = header.raster
        assert raster.width == 633
        assert raster.height == 100
        assert raster.media_type == 7
        assert raster.bits_per_color == 1
        assert raster.bits_per_pixel == 1
        assert raster.bytes_per_line == 80
        assert raster.color_order == 0
        assert raster.color_space == 3
        assert raster.compression == 1
        assert (raster.row_count, raster.row_feed, raster.row_step) == (9, 10, 12)

    def test_boolean_only_when_one(self, raster_builder) -> None:
        """1以外の値は真偽値としてFalseになる"""
        data = raster_builder(version=1, byte_order="<").header(duplex=2, collate=1)
        header = HeaderCodec(ByteOrder.LITTLE, 1).decode_bytes(data)
        assert header.duplex is False
        assert header.collate is True

    def test_full_unsigned_range(self, raster_builder) -> None:
        """2^31以上の値も符号なしのまま保持する"""
        data = raster_builder(version=1, byte_order=">").header(
            advance_distance=0xFFFFFFFF,
            media_weight=0x80000000,
        )
        header = HeaderCodec(ByteOrder.BIG, 1).decode_bytes(data)
        assert header.advance_distance == 0xFFFFFFFF
        assert header.media_weight == 2**31

    def test_unterminated_string_is_empty(self, raster_builder) -> None:
        data = raster_builder(version=1, byte_order="<").header(media_class="M" * 64)
        header = HeaderCodec(ByteOrder.LITTLE, 1).decode_bytes(data)
        assert header.media_class == ""

    def test_byte_order_mismatch_changes_values(self, raster_builder) -> None:
        """バイトオーダーを誤ると数値が入れ替わる"""
        data = raster_builder(version=1, byte_order=">").header(width=1)
        header = HeaderCodec(ByteOrder.LITTLE, 1).decode_bytes(data)
        assert header.raster.width == 1 << 24


class TestHeaderCodecExtension:
    """バージョン2/3拡張部のデコードテスト"""

    @pytest.mark.parametrize(
        "version, prefix, byte_order",
        [
            pytest.param(2, "<", ByteOrder.LITTLE, id="バージョン2 リトルエンディアン"),
            pytest.param(3, ">", ByteOrder.BIG, id="バージョン3 ビッグエンディアン"),
        ],
    )
    def test_decode_extension(
        self, raster_builder, version: int, prefix: str, byte_order: ByteOrder
    ) -> None:
        data = raster_builder(version=version, byte_order=prefix).header(
            num_colors=4,
            borderless_scaling_factor=1.5,
            page_size=(595.0, 842.0),
            imaging_bbox=(10.0, 20.0, 585.0, 822.0),
            integers=tuple(range(100, 116)),
            reals=tuple(float(i) * 0.25 for i in range(16)),
            strings=tuple(f"vendor{i}" for i in range(16)),
            marker_type="ink",
            rendering_intent="Saturation",
            page_size_name="iso_a4_210x297mm",
        )
        header = HeaderCodec(byte_order, version).decode_bytes(data)

        ext = header.extension
        assert ext is not None
        assert ext.num_colors == 4
        assert ext.borderless_scaling_factor == pytest.approx(1.5)
        assert ext.page_size == (595.0, 842.0)
        assert ext.imaging_bbox == ImagingBoundingBox(10.0, 20.0, 585.0, 822.0)
        assert ext.integers == tuple(range(100, 116))
        assert ext.reals == tuple(float(i) * 0.25 for i in range(16))
        assert ext.strings == tuple(f"vendor{i}" for i in range(16))
        assert ext.marker_type == "ink"
        assert ext.rendering_intent == "Saturation"
        assert ext.page_size_name == "iso_a4_210x297mm"

    def test_common_fields_before_extension(self, raster_builder) -> None:
        data = raster_builder(version=2, byte_order="<").header(width=42, height=7)
        header = HeaderCodec(ByteOrder.LITTLE, 2).decode_bytes(data)
        assert header.version == 2
        assert (header.raster.width, header.raster.height) == (42, 7)


class TestHeaderCodecEndOfInput:
    """ヘッダー読み取り時の終端判定テスト"""

    def test_empty_stream_is_clean_end(self) -> None:
        """1バイトも読めない場合はEND_OF_INPUT"""
        codec = HeaderCodec(ByteOrder.BIG, 2)
        with pytest.raises(RasterError) as exc_info:
            codec.decode(StreamReader(BytesIO(b"")))
        assert exc_info.value.kind is RasterErrorKind.END_OF_INPUT

    @pytest.mark.parametrize(
        "length",
        [
            pytest.param(1, id="1バイト目の途中"),
            pytest.param(64, id="最初の文字列の直後"),
            pytest.param(300, id="数値フィールドの途中"),
            pytest.param(420, id="共通部の直後"),
            pytest.param(1795, id="最後の1バイト不足"),
        ],
    )
    def test_truncated_header(self, raster_builder, length: int) -> None:
        """読み取り開始後の終端はUNEXPECTED_END_OF_INPUT"""
        data = raster_builder(version=2, byte_order=">").header()[:length]
        codec = HeaderCodec(ByteOrder.BIG, 2)
        with pytest.raises(RasterError) as exc_info:
            codec.decode(StreamReader(BytesIO(data)))
        assert exc_info.value.kind is RasterErrorKind.UNEXPECTED_END_OF_INPUT

    def test_decode_consumes_exact_size(self, raster_builder) -> None:
        data = raster_builder(version=3, byte_order="<").header() + b"\xaa\xbb"
        reader = StreamReader(BytesIO(data))
        HeaderCodec(ByteOrder.LITTLE, 3).decode(reader)
        assert reader.bytes_read == V2_HEADER_SIZE
