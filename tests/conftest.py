"""テスト共通フィクスチャ

ラスタストリームをメモリ上で組み立てるビルダーを提供する。
"""

from __future__ import annotations

import struct
from io import BytesIO
from typing import Any

import pytest

MAGICS: dict[tuple[int, str], bytes] = {
    (1, ">"): b"RaSt",
    (1, "<"): b"tSaR",
    (2, ">"): b"RaS2",
    (2, "<"): b"2SaR",
    (3, ">"): b"RaS3",
    (3, "<"): b"3SaR",
}

COMMON_FIELDS = (
    "advance_distance",
    "advance_media",
    "collate",
    "cut_media",
    "duplex",
    "horiz_dpi",
    "vert_dpi",
    "bbox_left",
    "bbox_bottom",
    "bbox_right",
    "bbox_top",
    "insert_sheet",
    "jog",
    "leading_edge",
    "margin_left",
    "margin_bottom",
    "manual_feed",
    "media_position",
    "media_weight",
    "mirror_print",
    "negative_print",
    "num_copies",
    "orientation",
    "output_face_up",
    "page_width",
    "page_length",
    "separations",
    "tray_switch",
    "tumble",
    "width",
    "height",
    "media_type_code",
    "bits_per_color",
    "bits_per_pixel",
    "bytes_per_line",
    "color_order",
    "color_space",
    "compression",
    "row_count",
    "row_feed",
    "row_step",
)

DEFAULT_FIELDS: dict[str, Any] = {
    "width": 8,
    "height": 2,
    "bits_per_color": 8,
    "bits_per_pixel": 8,
    "bytes_per_line": 8,
    "color_order": 0,
    "color_space": 3,
    "horiz_dpi": 300,
    "vert_dpi": 300,
    "num_copies": 1,
}


class RasterStreamBuilder:
    """テスト用ラスタストリームビルダー

    使用例:
        >>> builder = RasterStreamBuilder(version=2, byte_order="<")
        >>> builder.add_page(RasterStreamBuilder.rle_line(b"\\x00" * 8, 1), height=1)
        >>> stream = builder.stream()
    """

    def __init__(self, version: int = 2, byte_order: str = "<") -> None:
        self.version = version
        self.byte_order = byte_order
        self._pages: list[bytes] = []

    @property
    def magic(self) -> bytes:
        return MAGICS[(self.version, self.byte_order)]

    def header(self, **fields: Any) -> bytes:
        """ヘッダーのバイト列を生成する

        文字列はmedia_class/media_color/media_type/output_type、
        数値はCOMMON_FIELDSの名前で指定する（未指定はDEFAULT_FIELDSまたは0）。
        バージョン2/3では拡張部も生成する。
        """
        values = {**DEFAULT_FIELDS, **fields}
        data = b"".join(
            self._string(values.get(name, ""))
            for name in ("media_class", "media_color", "media_type", "output_type")
        )
        data += struct.pack(
            self.byte_order + "41I",
            *(int(values.get(name, 0)) for name in COMMON_FIELDS),
        )
        if self.version in (2, 3):
            data += self._extension(values)
        return data

    def _extension(self, values: dict[str, Any]) -> bytes:
        data = struct.pack(
            self.byte_order + "If2f4f16I16f",
            values.get("num_colors", 1),
            values.get("borderless_scaling_factor", 1.0),
            *values.get("page_size", (612.0, 792.0)),
            *values.get("imaging_bbox", (0.0, 0.0, 612.0, 792.0)),
            *values.get("integers", tuple(range(16))),
            *values.get("reals", tuple(float(i) / 2 for i in range(16))),
        )
        strings = values.get("strings", tuple(f"s{i}" for i in range(16)))
        data += b"".join(self._string(s) for s in strings)
        data += self._string(values.get("marker_type", "toner"))
        data += self._string(values.get("rendering_intent", "Perceptual"))
        data += self._string(values.get("page_size_name", "Letter"))
        return data

    @staticmethod
    def _string(value: str | bytes) -> bytes:
        raw = value.encode("utf-8") if isinstance(value, str) else value
        return struct.pack("64s", raw)

    @staticmethod
    def rle_line(line: bytes, group_width: int, repeat: int = 0) -> bytes:
        """ラインを1色グループずつの繰り返しパケットでエンコードする"""
        data = bytearray([repeat])
        for i in range(0, len(line), group_width):
            data.append(0)
            data.extend(line[i : i + group_width])
        return bytes(data)

    def add_page(self, data: bytes, **fields: Any) -> RasterStreamBuilder:
        """ヘッダーとピクセルデータを1ページとして追加する"""
        self._pages.append(self.header(**fields) + data)
        return self

    def build(self) -> bytes:
        return self.magic + b"".join(self._pages)

    def stream(self) -> BytesIO:
        return BytesIO(self.build())


class TrickleStream:
    """1回のreadで最大chunkバイトしか返さないストリーム"""

    def __init__(self, data: bytes, chunk: int = 1) -> None:
        self._buffer = BytesIO(data)
        self._chunk = chunk

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = self._chunk
        return self._buffer.read(min(size, self._chunk))


@pytest.fixture
def raster_builder() -> type[RasterStreamBuilder]:
    """RasterStreamBuilderクラスを返す"""
    return RasterStreamBuilder


@pytest.fixture
def trickle_stream() -> type[TrickleStream]:
    """TrickleStreamクラスを返す"""
    return TrickleStream


@pytest.fixture
def make_header():
    """フィールドを指定してPageHeaderを生成する関数を返す"""
    from cupsraster.raster.header import HeaderCodec
    from cupsraster.raster.stream import ByteOrder

    def _make(version: int = 3, **fields: Any):
        builder = RasterStreamBuilder(version=version, byte_order="<")
        return HeaderCodec(ByteOrder.LITTLE, version).decode_bytes(builder.header(**fields))

    return _make
