"""ラスタストリームデコーダーモジュール

ストリーム先頭のマジックバイトからバージョンとバイトオーダーを判定し、
ページを順に取り出す。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.header import HeaderCodec
from cupsraster.raster.page import Page
from cupsraster.raster.stream import ByteOrder, StreamReader

logger = logging.getLogger(__name__)

MAGIC_SIZE = 4
"""マジックバイトの長さ"""


@dataclass(frozen=True)
class StreamFormat:
    """マジックバイトから判定したストリーム形式

    Attributes:
        version: フォーマットバージョン（1, 2, 3）
        byte_order: 数値フィールドのバイトオーダー
    """

    version: int
    byte_order: ByteOrder


MAGICS: dict[bytes, StreamFormat] = {
    b"RaSt": StreamFormat(1, ByteOrder.BIG),
    b"tSaR": StreamFormat(1, ByteOrder.LITTLE),
    b"RaS2": StreamFormat(2, ByteOrder.BIG),
    b"2SaR": StreamFormat(2, ByteOrder.LITTLE),
    b"RaS3": StreamFormat(3, ByteOrder.BIG),
    b"3SaR": StreamFormat(3, ByteOrder.LITTLE),
}
"""認識するマジックバイトと形式の対応"""


def detect_format(magic: bytes) -> StreamFormat | None:
    """マジックバイトからストリーム形式を判定する

    Args:
        magic: ストリーム先頭の4バイト

    Returns:
        判定した形式。認識できない場合はNone
    """
    return MAGICS.get(bytes(magic))


class Decoder:
    """ラスタストリームデコーダー

    1ストリームにつき1つ生成する。ストリームの読み取り位置はDecoderが所有し、
    同時に有効なPageは1つだけとなる。スレッドセーフではない。

    使用例:
        >>> with open("job.ras", "rb") as f:
        ...     decoder = Decoder(f)
        ...     for page in decoder:
        ...         image = page.image()
    """

    def __init__(self, stream: BinaryIO) -> None:
        """マジックバイトを読み取ってデコーダーを初期化する

        Args:
            stream: 読み取り可能なバイナリストリーム

        Raises:
            RasterError: マジックバイトが認識できない場合（UNKNOWN_FORMAT）、
                4バイト読めなかった場合（END_OF_INPUT / UNEXPECTED_END_OF_INPUT）
            OSError: 下位ストリームの読み取りエラー
        """
        self._reader = StreamReader(stream)
        magic = self._reader.read_exact(MAGIC_SIZE, allow_eof=True)
        stream_format = detect_format(magic)
        if stream_format is None:
            raise RasterError(
                RasterErrorKind.UNKNOWN_FORMAT,
                f"ラスタ形式ではありません: magic={magic!r}",
            )
        self._format = stream_format
        self._codec = HeaderCodec(stream_format.byte_order, stream_format.version)
        self._page: Page | None = None
        self._pages_read = 0
        logger.debug(
            "ラスタストリームを検出しました: version=%d, byte_order=%s",
            stream_format.version,
            stream_format.byte_order.name,
        )

    @property
    def version(self) -> int:
        """フォーマットバージョン"""
        return self._format.version

    @property
    def byte_order(self) -> ByteOrder:
        """バイトオーダー"""
        return self._format.byte_order

    @property
    def stream_format(self) -> StreamFormat:
        """ストリーム形式"""
        return self._format

    @property
    def pages_read(self) -> int:
        """これまでに取り出したページ数"""
        return self._pages_read

    @property
    def bytes_read(self) -> int:
        """マジックバイトを含め、ストリームから読み取ったバイト数"""
        return self._reader.bytes_read

    def next_page(self) -> Page:
        """次のページを返す

        現在のページに未読ラインがあれば先に読み捨てる。
        返したページは次のnext_page()呼び出しまで有効。

        Returns:
            次のページ

        Raises:
            RasterError: ページ境界でストリームが終了した場合（END_OF_INPUT）、
                読み捨て中・ヘッダーの途中で終了した場合（UNEXPECTED_END_OF_INPUT）、
                未知の色順序の場合（INVALID_FORMAT）
        """
        if self._page is not None:
            self._page._discard()
            self._page = None

        header = self._codec.decode(self._reader)
        page = Page(header, self._reader)
        self._page = page
        self._pages_read += 1
        logger.debug(
            "ページ%dを読み取りました: %dx%d, %dバイト/ライン",
            self._pages_read,
            header.raster.width,
            header.raster.height,
            header.raster.bytes_per_line,
        )
        return page

    def __iter__(self) -> Iterator[Page]:
        """ストリームが正常終了するまでページを返す"""
        while True:
            try:
                page = self.next_page()
            except RasterError as e:
                if e.is_end_of_input:
                    return
                raise
            yield page
