"""前方読み込み専用ストリームの読み取りモジュール

バイナリストリームから指定バイト数を確実に読み取る機能を提供する。
短い読み取り（パイプ等）はループで補い、不足した場合は終端の種別を判定して
RasterErrorに変換する。
"""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO

from cupsraster.raster.errors import RasterError, RasterErrorKind


class ByteOrder(Enum):
    """ストリームのバイトオーダー

    値はstructモジュールのバイトオーダー指定文字。
    """

    BIG = ">"
    LITTLE = "<"

    @property
    def struct_prefix(self) -> str:
        """struct書式の先頭に付けるバイトオーダー指定"""
        return self.value


class StreamReader:
    """ストリームからの厳密な読み取りを行うクラス

    ストリームの読み取り位置はこのクラスのみが進める。
    読み取ったバイト数はbytes_readで参照できる。
    """

    def __init__(self, stream: BinaryIO) -> None:
        """読み取り対象のストリームを指定して初期化する

        Args:
            stream: 読み取り可能なバイナリストリーム
        """
        self._stream = stream
        self._bytes_read = 0

    @property
    def bytes_read(self) -> int:
        """これまでに読み取ったバイト数"""
        return self._bytes_read

    def read_exact(self, size: int, *, allow_eof: bool = False) -> bytes:
        """ちょうどsizeバイトを読み取る

        Args:
            size: 読み取るバイト数
            allow_eof: 1バイトも読めなかった場合に正常終了として扱うか

        Returns:
            読み取ったバイト列

        Raises:
            RasterError: ストリームが途中で終了した場合
        """
        buffer = bytearray(size)
        self.readinto_exact(memoryview(buffer), allow_eof=allow_eof)
        return bytes(buffer)

    def readinto_exact(self, view: memoryview, *, allow_eof: bool = False) -> None:
        """viewの長さ分だけ読み取り、viewに書き込む

        Args:
            view: 書き込み先（書き込み可能なmemoryview）
            allow_eof: 1バイトも読めなかった場合に正常終了として扱うか

        Raises:
            RasterError: ストリームが途中で終了した場合
        """
        size = len(view)
        filled = 0
        while filled < size:
            chunk = self._stream.read(size - filled)
            if not chunk:
                break
            view[filled : filled + len(chunk)] = chunk
            filled += len(chunk)
        self._bytes_read += filled

        if filled == size:
            return
        if filled == 0 and allow_eof:
            raise RasterError(RasterErrorKind.END_OF_INPUT)
        raise RasterError(
            RasterErrorKind.UNEXPECTED_END_OF_INPUT,
            f"予期しないストリームの終端です: {size}バイト中{filled}バイトのみ読み取りました",
        )

    def read_byte(self) -> int:
        """1バイトを読み取って整数で返す

        Raises:
            RasterError: ストリームが終了していた場合（UNEXPECTED_END_OF_INPUT）
        """
        return self.read_exact(1)[0]
