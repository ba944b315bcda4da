"""ラスタデコードのエラー定義

デコード中に発生するエラーを、種別を表す列挙値を持つ単一の例外クラスで表現する。
下位ストリームのOSErrorはそのまま呼び出し元へ伝播する。
"""

from enum import Enum


class RasterErrorKind(Enum):
    """ラスタエラーの種別

    デコーダーが報告するエラーの閉じた分類。
    END_OF_INPUTのみがエラーではない正常終了を表す。
    """

    UNKNOWN_FORMAT = "unknown_format"
    """マジックバイトが認識できない"""

    UNSUPPORTED = "unsupported"
    """認識できるが未対応の組み合わせ（非チャンキー順序、未対応の色空間・深度）"""

    INVALID_FORMAT = "invalid_format"
    """構造的にありえない値（未知の色順序、CMYK長が4の倍数でない等）"""

    BUFFER_TOO_SMALL = "buffer_too_small"
    """呼び出し元が渡したバッファが小さすぎる"""

    UNEXPECTED_END_OF_INPUT = "unexpected_end_of_input"
    """レコードの途中でストリームが終了した"""

    END_OF_INPUT = "end_of_input"
    """ページ境界でのストリームの正常終了"""


_DEFAULT_MESSAGES: dict[RasterErrorKind, str] = {
    RasterErrorKind.UNKNOWN_FORMAT: "ラスタ形式ではありません",
    RasterErrorKind.UNSUPPORTED: "未対応のラスタ形式です",
    RasterErrorKind.INVALID_FORMAT: "不正なラスタデータです",
    RasterErrorKind.BUFFER_TOO_SMALL: "バッファが小さすぎます",
    RasterErrorKind.UNEXPECTED_END_OF_INPUT: "予期しないストリームの終端です",
    RasterErrorKind.END_OF_INPUT: "ストリームの終端です",
}


class RasterError(Exception):
    """ラスタデコードエラー

    Attributes:
        kind: エラー種別
    """

    def __init__(self, kind: RasterErrorKind, message: str | None = None) -> None:
        """エラー種別とメッセージを指定して初期化する

        Args:
            kind: エラー種別
            message: 詳細メッセージ（省略時は種別ごとの既定メッセージ）
        """
        self.kind = kind
        super().__init__(message or _DEFAULT_MESSAGES[kind])

    @property
    def is_end_of_input(self) -> bool:
        """正常終了を表すエラーかどうか"""
        return self.kind is RasterErrorKind.END_OF_INPUT

    def __repr__(self) -> str:
        return f"RasterError({self.kind.name}, {str(self)!r})"
