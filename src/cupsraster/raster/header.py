"""ページヘッダーのデコードモジュール

各ページの先頭に置かれる固定長ヘッダーレコードを解析する。
バージョン1のレイアウトを共通部とし、バージョン2/3ではその後ろに拡張部が続く。

ヘッダーのレイアウト:
- 共通部: 64バイト文字列 x4 + 32ビット整数 x41（バウンディングボックス4個を含む）
- 拡張部: 色数(4) + 倍率(4) + 用紙サイズ(4x2) + 描画領域(4x4)
  + 整数配列(4x16) + 実数配列(4x16) + 64バイト文字列 x19
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from io import BytesIO

from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.stream import ByteOrder, StreamReader

STRING_FIELD_SIZE = 64
"""文字列フィールドの固定長（NUL終端を含む）"""

_COMMON_STRING_COUNT = 4
_COMMON_FIELDS_FORMAT = "41I"
_EXTENSION_FIELDS_FORMAT = "If2f4f16I16f"
_EXTENSION_STRING_COUNT = 16 + 3

V1_HEADER_SIZE = (
    _COMMON_STRING_COUNT * STRING_FIELD_SIZE + struct.calcsize("<" + _COMMON_FIELDS_FORMAT)
)
"""バージョン1のヘッダーサイズ（420バイト）"""

V2_HEADER_SIZE = (
    V1_HEADER_SIZE
    + struct.calcsize("<" + _EXTENSION_FIELDS_FORMAT)
    + _EXTENSION_STRING_COUNT * STRING_FIELD_SIZE
)
"""バージョン2/3のヘッダーサイズ（1796バイト）"""


@dataclass(frozen=True)
class BoundingBox:
    """整数座標のバウンディングボックス（ポイント単位）"""

    left: int
    bottom: int
    right: int
    top: int


@dataclass(frozen=True)
class ImagingBoundingBox:
    """実数座標の描画領域（ポイント単位）"""

    left: float
    bottom: float
    right: float
    top: float


@dataclass(frozen=True)
class RasterParams:
    """ラスタデータのパラメータ

    ページの寿命の間は変化せず、以降のデコード処理をすべて決定する。

    Attributes:
        width: ページ幅（ピクセル）
        height: ページ高さ（ライン数）
        media_type: デバイス固有の用紙種別
        bits_per_color: 1色あたりのビット数
        bits_per_pixel: 1ピクセルあたりのビット数
        bytes_per_line: 1ラインあたりのバイト数
        color_order: 色の並び順（ColorOrderの値）
        color_space: 色空間（ColorSpaceの値）
        compression: デバイス固有の圧縮種別
        row_count: デバイス固有の行数
        row_feed: デバイス固有の行送り
        row_step: デバイス固有の行間隔
    """

    width: int
    height: int
    media_type: int
    bits_per_color: int
    bits_per_pixel: int
    bytes_per_line: int
    color_order: int
    color_space: int
    compression: int
    row_count: int
    row_feed: int
    row_step: int


@dataclass(frozen=True)
class HeaderExtension:
    """バージョン2/3のみに存在するヘッダー拡張部

    Attributes:
        num_colors: 色数
        borderless_scaling_factor: フチなし印刷の拡大率
        page_size: 用紙サイズ（幅, 高さ）
        imaging_bbox: 描画領域
        integers: ベンダー定義の整数値（16個）
        reals: ベンダー定義の実数値（16個）
        strings: ベンダー定義の文字列（16個）
        marker_type: インク・トナーの種別
        rendering_intent: カラーレンダリングインテント
        page_size_name: 用紙サイズ名
    """

    num_colors: int
    borderless_scaling_factor: float
    page_size: tuple[float, float]
    imaging_bbox: ImagingBoundingBox
    integers: tuple[int, ...]
    reals: tuple[float, ...]
    strings: tuple[str, ...]
    marker_type: str
    rendering_intent: str
    page_size_name: str


@dataclass(frozen=True)
class PageHeader:
    """ページヘッダー

    1ページ分の固定長ヘッダーレコードの内容を保持する不変データクラス。
    32ビット符号なし整数のフィールドは全範囲をそのまま保持する。
    extensionはバージョン1ではNone。
    """

    version: int
    media_class: str
    media_color: str
    media_type: str
    output_type: str
    advance_distance: int
    advance_media: int
    collate: bool
    cut_media: int
    duplex: bool
    horiz_dpi: int
    vert_dpi: int
    bounding_box: BoundingBox
    insert_sheet: bool
    jog: int
    leading_edge: int
    margin_left: int
    margin_bottom: int
    manual_feed: bool
    media_position: int
    media_weight: int
    mirror_print: bool
    negative_print: bool
    num_copies: int
    orientation: int
    output_face_up: bool
    page_width: int
    page_length: int
    separations: bool
    tray_switch: bool
    tumble: bool
    raster: RasterParams
    extension: HeaderExtension | None = None


def cstring(data: bytes) -> str:
    """固定長フィールドを最初のNULで切り詰めて文字列にする

    NULが見つからない場合は空文字列を返す。

    Args:
        data: 固定長フィールドのバイト列

    Returns:
        デコードされた文字列
    """
    end = data.find(b"\x00")
    if end < 0:
        return ""
    return data[:end].decode("utf-8", errors="replace")


class HeaderCodec:
    """ページヘッダーデコーダー

    ストリームのバージョンとバイトオーダーに従ってヘッダーを解析する。

    使用例:
        >>> codec = HeaderCodec(ByteOrder.BIG, version=2)
        >>> header = codec.decode(reader)
    """

    def __init__(self, byte_order: ByteOrder, version: int) -> None:
        """デコーダーを初期化する

        Args:
            byte_order: ストリームのバイトオーダー
            version: ストリームのバージョン（1, 2, 3）

        Raises:
            RasterError: 未対応のバージョンの場合（UNSUPPORTED）
        """
        if version not in (1, 2, 3):
            raise RasterError(RasterErrorKind.UNSUPPORTED, f"未対応のバージョンです: {version}")
        self._byte_order = byte_order
        self._version = version
        self._common = struct.Struct(byte_order.struct_prefix + _COMMON_FIELDS_FORMAT)
        self._extension = struct.Struct(byte_order.struct_prefix + _EXTENSION_FIELDS_FORMAT)

    @property
    def byte_order(self) -> ByteOrder:
        """バイトオーダー"""
        return self._byte_order

    @property
    def version(self) -> int:
        """ストリームのバージョン"""
        return self._version

    @property
    def size(self) -> int:
        """このバージョンのヘッダーのバイト数"""
        return V1_HEADER_SIZE if self._version == 1 else V2_HEADER_SIZE

    def decode(self, reader: StreamReader) -> PageHeader:
        """ストリームから1ページ分のヘッダーを読み取る

        ヘッダーの1バイト目を読む前にストリームが終了していた場合のみ正常終了とする。
        読み取りを開始した後の終端はすべてUNEXPECTED_END_OF_INPUTになる。

        Args:
            reader: 読み取り元

        Returns:
            解析されたページヘッダー

        Raises:
            RasterError: ストリームが終了していた場合（END_OF_INPUT）、
                ヘッダーの途中で終了した場合（UNEXPECTED_END_OF_INPUT）
        """
        strings = [self._read_string(reader, allow_eof=True)]
        strings += [self._read_string(reader) for _ in range(_COMMON_STRING_COUNT - 1)]
        values = self._common.unpack(reader.read_exact(self._common.size))

        extension = None
        if self._version in (2, 3):
            extension = self._decode_extension(reader)

        return self._build_header(strings, values, extension)

    def decode_bytes(self, data: bytes) -> PageHeader:
        """バイト列からヘッダーを解析する

        Args:
            data: ヘッダーのバイト列（余分なバイトは無視される）

        Returns:
            解析されたページヘッダー
        """
        return self.decode(StreamReader(BytesIO(data)))

    def _read_string(self, reader: StreamReader, *, allow_eof: bool = False) -> str:
        return cstring(reader.read_exact(STRING_FIELD_SIZE, allow_eof=allow_eof))

    def _decode_extension(self, reader: StreamReader) -> HeaderExtension:
        """バージョン2/3の拡張部を読み取る"""
        values = self._extension.unpack(reader.read_exact(self._extension.size))
        strings = [self._read_string(reader) for _ in range(_EXTENSION_STRING_COUNT)]

        return HeaderExtension(
            num_colors=values[0],
            borderless_scaling_factor=values[1],
            page_size=(values[2], values[3]),
            imaging_bbox=ImagingBoundingBox(*values[4:8]),
            integers=tuple(values[8:24]),
            reals=tuple(values[24:40]),
            strings=tuple(strings[:16]),
            marker_type=strings[16],
            rendering_intent=strings[17],
            page_size_name=strings[18],
        )

    def _build_header(
        self,
        strings: list[str],
        values: tuple[int, ...],
        extension: HeaderExtension | None,
    ) -> PageHeader:
        """共通部の値をフィールドに割り当てる

        1/0で表される真偽値フィールドは値が1の場合のみTrueとする。
        """
        fields = iter(values)

        def uint() -> int:
            return next(fields)

        def flag() -> bool:
            return next(fields) == 1

        # 引数の評価順がワイヤ上のフィールド順になる
        return PageHeader(
            version=self._version,
            media_class=strings[0],
            media_color=strings[1],
            media_type=strings[2],
            output_type=strings[3],
            advance_distance=uint(),
            advance_media=uint(),
            collate=flag(),
            cut_media=uint(),
            duplex=flag(),
            horiz_dpi=uint(),
            vert_dpi=uint(),
            bounding_box=BoundingBox(uint(), uint(), uint(), uint()),
            insert_sheet=flag(),
            jog=uint(),
            leading_edge=uint(),
            margin_left=uint(),
            margin_bottom=uint(),
            manual_feed=flag(),
            media_position=uint(),
            media_weight=uint(),
            mirror_print=flag(),
            negative_print=flag(),
            num_copies=uint(),
            orientation=uint(),
            output_face_up=flag(),
            page_width=uint(),
            page_length=uint(),
            separations=flag(),
            tray_switch=flag(),
            tumble=flag(),
            raster=RasterParams(
                width=uint(),
                height=uint(),
                media_type=uint(),
                bits_per_color=uint(),
                bits_per_pixel=uint(),
                bytes_per_line=uint(),
                color_order=uint(),
                color_space=uint(),
                compression=uint(),
                row_count=uint(),
                row_feed=uint(),
                row_step=uint(),
            ),
            extension=extension,
        )
