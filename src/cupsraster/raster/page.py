"""ページモジュール

1ページ分のヘッダーと読み取りカーソルを保持し、ライン単位・ページ単位の読み取りを提供する。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from cupsraster.raster.colors import Color, color_group_width, parse_colors
from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.header import PageHeader
from cupsraster.raster.lines import LineDecoder, RawLineDecoder, RunLengthLineDecoder
from cupsraster.raster.stream import StreamReader

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

WritableBuffer = bytearray | memoryview


class Page:
    """ラスタストリームの1ページ

    Decoder.next_page()が生成する。次のnext_page()呼び出しで未読ラインは読み捨てられ、
    以降のライン読み取りはEND_OF_INPUTになる。headerはその後も参照できる。

    使用例:
        >>> page = decoder.next_page()
        >>> line = bytearray(page.line_size())
        >>> page.read_line(line)
        >>> colors = page.parse_colors(line)
    """

    def __init__(self, header: PageHeader, reader: StreamReader) -> None:
        """ページを初期化する

        Args:
            header: ページヘッダー
            reader: ストリームの読み取り元（Decoderと共有する）

        Raises:
            RasterError: 未知の色順序の場合（INVALID_FORMAT）
        """
        self._header = header
        self._lines_read = 0
        self._decoder = self._create_line_decoder(header, reader)

    @staticmethod
    def _create_line_decoder(header: PageHeader, reader: StreamReader) -> LineDecoder:
        group_width = color_group_width(header)
        bytes_per_line = header.raster.bytes_per_line
        if header.version == 2:
            return RunLengthLineDecoder(reader, bytes_per_line, group_width)
        return RawLineDecoder(reader, bytes_per_line)

    @property
    def header(self) -> PageHeader:
        """ページヘッダー"""
        return self._header

    def line_size(self) -> int:
        """1ラインのバイト数"""
        return self._header.raster.bytes_per_line

    def size(self) -> int:
        """未読ラインすべてを格納するのに必要なバイト数"""
        return self.line_size() * self.unread_lines()

    def unread_lines(self) -> int:
        """まだ読み取っていないライン数"""
        return self._header.raster.height - self._lines_read

    def read_line(self, buffer: WritableBuffer) -> None:
        """次のラインをbufferの先頭に読み込む

        デコードが失敗しても読み取り済みライン数は進み、同じラインを再試行することはない。

        Args:
            buffer: 書き込み先（line_size()バイト以上）

        Raises:
            RasterError: bufferが小さすぎる場合（BUFFER_TOO_SMALL）、
                未読ラインがない場合（END_OF_INPUT）、
                ラインの途中でストリームが終了した場合（UNEXPECTED_END_OF_INPUT）
        """
        if len(buffer) < self.line_size():
            raise RasterError(
                RasterErrorKind.BUFFER_TOO_SMALL,
                f"バッファが小さすぎます: {len(buffer)} < {self.line_size()}",
            )
        if self.unread_lines() <= 0:
            raise RasterError(RasterErrorKind.END_OF_INPUT)

        self._lines_read += 1
        self._decoder.decode_into(memoryview(buffer)[: self.line_size()])

    def read_all(self, buffer: WritableBuffer) -> None:
        """未読ラインすべてをbufferに連続して読み込む

        Args:
            buffer: 書き込み先（size()バイト以上）

        Raises:
            RasterError: bufferが小さすぎる場合（BUFFER_TOO_SMALL）、
                全ラインを読み終える前にストリームが終了した場合（UNEXPECTED_END_OF_INPUT）
        """
        if len(buffer) < self.size():
            raise RasterError(
                RasterErrorKind.BUFFER_TOO_SMALL,
                f"バッファが小さすぎます: {len(buffer)} < {self.size()}",
            )
        view = memoryview(buffer)
        line_size = self.line_size()
        for i in range(self.unread_lines()):
            try:
                self.read_line(view[i * line_size : (i + 1) * line_size])
            except RasterError as e:
                if e.is_end_of_input:
                    raise RasterError(RasterErrorKind.UNEXPECTED_END_OF_INPUT) from e
                raise

    def read_line_colors(self, buffer: WritableBuffer) -> list[Color]:
        """次のラインを読み込み、ページ幅分の色値を返す

        Args:
            buffer: 書き込み先（line_size()バイト以上）

        Returns:
            ページ幅と同じ数の色値
        """
        self.read_line(buffer)
        colors = self.parse_colors(memoryview(buffer)[: self.line_size()])
        return colors[: self._header.raster.width]

    def read_all_colors(self, buffer: WritableBuffer) -> list[Color]:
        """未読ラインすべてを読み込み、ライン単位でページ幅に切り詰めた色値を返す

        1ビット深度ではラインごとにパディングビット分の余分なピクセルが生じるため、
        各ラインをページ幅に切り詰めてから連結する。

        Args:
            buffer: 書き込み先（size()バイト以上）

        Returns:
            (読み込んだライン数 x ページ幅)個の色値
        """
        lines = self.unread_lines()
        line_size = self.line_size()
        width = self._header.raster.width
        self.read_all(buffer)

        view = memoryview(buffer)
        colors: list[Color] = []
        for i in range(lines):
            line_colors = self.parse_colors(view[i * line_size : (i + 1) * line_size])
            colors.extend(line_colors[:width])
        return colors

    def parse_colors(self, data: bytes | bytearray | memoryview) -> list[Color]:
        """このページの色空間・深度に従ってバイト列を色値に変換する

        Args:
            data: デコード済みのバイト列

        Returns:
            色値のリスト（パディングビット分も含む）

        Raises:
            RasterError: 未対応の組み合わせ（UNSUPPORTED）、不正な長さ（INVALID_FORMAT）
        """
        return parse_colors(self._header, data)

    def image(self) -> Image.Image:
        """残りのラインをすべて読み込み、ピクセル参照可能な画像を返す

        未読ラインをすべて消費するため、read_line/read_allと混在させないこと。

        Returns:
            PIL.Imageオブジェクト
        """
        from cupsraster.converter.image import page_image

        return page_image(self)

    def __iter__(self) -> Iterator[bytes]:
        """未読ラインを1行ずつbytesで返す"""
        line = bytearray(self.line_size())
        while self.unread_lines() > 0:
            self.read_line(line)
            yield bytes(line)

    def _discard(self) -> int:
        """未読ラインを通常のデコード処理で読み捨てる

        ランレングス形式ではライン境界がデコードしないとわからないため、シークはしない。

        Returns:
            読み捨てたライン数

        Raises:
            RasterError: ストリームが途中で終了した場合（UNEXPECTED_END_OF_INPUT）
        """
        remaining = self.unread_lines()
        if remaining <= 0:
            return 0
        line = bytearray(self.line_size())
        for _ in range(remaining):
            try:
                self.read_line(line)
            except RasterError as e:
                if e.is_end_of_input:
                    raise RasterError(RasterErrorKind.UNEXPECTED_END_OF_INPUT) from e
                raise
        logger.debug("未読の%dラインを読み捨てました", remaining)
        return remaining
