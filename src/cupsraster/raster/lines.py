"""ラインデコーダーモジュール

ページのピクセルデータを1ラインずつデコードする。
バージョン1/3は非圧縮、バージョン2はランレングス圧縮で格納される。

ランレングス形式の構造（1ライン分）:
- 繰り返し回数R(1): このラインをさらにR回繰り返す
- パケットの並び: カウントP(1) + 色グループ
  - P <= 127: 続く1個の色グループを(P + 1)回繰り返す
  - P >= 128: 続く(257 - P)個の色グループをそのまま使う
- ラインがbytes_per_lineバイトに達するまでパケットが続く
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.raster.stream import StreamReader


class LineDecoderState(Enum):
    """ランレングスデコーダーの状態"""

    AWAITING_CONTROL_BYTE = "awaiting_control_byte"
    """次のラインの繰り返し回数を読む前"""

    ASSEMBLING_LINE = "assembling_line"
    """パケットからラインを組み立て中"""

    REPLAYING = "replaying"
    """キャッシュしたラインの繰り返しが残っている"""


class LineDecoder(Protocol):
    """ラインデコーダーインターフェース"""

    def decode_into(self, view: memoryview) -> None:
        """1ライン分をデコードしてviewに書き込む

        Args:
            view: 書き込み先（ちょうど1ライン分の長さ）

        Raises:
            RasterError: ラインの途中でストリームが終了した場合、
                または不正なデータの場合
        """
        ...


class RawLineDecoder:
    """非圧縮ラインデコーダー

    1ラインはちょうどbytes_per_lineバイトで、呼び出し元のバッファへ直接読み込む。
    """

    def __init__(self, reader: StreamReader, bytes_per_line: int) -> None:
        """デコーダーを初期化する

        Args:
            reader: 読み取り元
            bytes_per_line: 1ラインのバイト数
        """
        self._reader = reader
        self._bytes_per_line = bytes_per_line

    def decode_into(self, view: memoryview) -> None:
        """1ライン分を読み込む"""
        self._reader.readinto_exact(view[: self._bytes_per_line])


class RunLengthLineDecoder:
    """ランレングス圧縮ラインデコーダー

    ラインの組み立てバッファ、繰り返し回数、色グループ1個分の作業バッファを
    ページ単位の状態として保持する。

    パケットがbytes_per_lineを超えてラインを伸ばす場合はINVALID_FORMATとして扱い、
    切り詰めは行わない。
    """

    MAX_REPEAT_PACKET: int = 127
    """繰り返しパケットとして扱うカウント値の上限"""

    def __init__(self, reader: StreamReader, bytes_per_line: int, group_width: int) -> None:
        """デコーダーを初期化する

        Args:
            reader: 読み取り元
            bytes_per_line: 1ラインのバイト数
            group_width: 色グループ1個分のバイト数

        Raises:
            RasterError: ラインを組み立てられない寸法の場合（INVALID_FORMAT）
        """
        if bytes_per_line > 0 and group_width <= 0:
            raise RasterError(
                RasterErrorKind.INVALID_FORMAT,
                f"色グループの幅が不正です: {group_width}",
            )
        self._reader = reader
        self._bytes_per_line = bytes_per_line
        self._group_width = group_width
        self._line = bytearray(bytes_per_line)
        self._group = bytearray(group_width)
        self._pending_repeats = 0
        self._state = LineDecoderState.AWAITING_CONTROL_BYTE

    @property
    def state(self) -> LineDecoderState:
        """現在の状態"""
        return self._state

    @property
    def pending_repeats(self) -> int:
        """キャッシュしたラインの残り繰り返し回数（常に0以上）"""
        return self._pending_repeats

    def decode_into(self, view: memoryview) -> None:
        """1ライン分をデコードしてviewに書き込む

        繰り返しが残っている場合はストリームを読まずにキャッシュしたラインを返す。
        """
        if self._pending_repeats > 0:
            self._pending_repeats -= 1
            if self._pending_repeats == 0:
                self._state = LineDecoderState.AWAITING_CONTROL_BYTE
            view[: self._bytes_per_line] = self._line
            return

        repeats = self._reader.read_byte()
        self._state = LineDecoderState.ASSEMBLING_LINE
        self._assemble_line()

        self._pending_repeats = repeats
        self._state = (
            LineDecoderState.REPLAYING if repeats > 0 else LineDecoderState.AWAITING_CONTROL_BYTE
        )
        view[: self._bytes_per_line] = self._line

    def _assemble_line(self) -> None:
        """パケットを読み取ってラインバッファを組み立てる

        Raises:
            RasterError: ストリームが途中で終了した場合（UNEXPECTED_END_OF_INPUT）、
                パケットがライン長を超える場合（INVALID_FORMAT）
        """
        line = self._line
        group = memoryview(self._group)
        width = self._group_width
        filled = 0

        while filled < self._bytes_per_line:
            count = self._reader.read_byte()
            if count <= self.MAX_REPEAT_PACKET:
                repeat = count + 1
                self._check_overshoot(filled, repeat)
                self._reader.readinto_exact(group)
                for _ in range(repeat):
                    line[filled : filled + width] = group
                    filled += width
            else:
                literal = 257 - count
                self._check_overshoot(filled, literal)
                for _ in range(literal):
                    self._reader.readinto_exact(memoryview(line)[filled : filled + width])
                    filled += width

    def _check_overshoot(self, filled: int, groups: int) -> None:
        if filled + groups * self._group_width > self._bytes_per_line:
            raise RasterError(
                RasterErrorKind.INVALID_FORMAT,
                f"パケットがライン長を超えています: {filled}バイト目から{groups}個の色グループ "
                f"(ライン長 {self._bytes_per_line}バイト)",
            )
