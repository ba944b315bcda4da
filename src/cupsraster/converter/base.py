"""Converter基底クラスモジュール

ラスタファイルをページ単位で別形式に書き出すConverterの共通インターフェースと、
ページごとの結果を表すデータ型を定義する。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ConversionStatus(Enum):
    """1ページ分の変換結果

    SKIPPED: ページ指定で対象外になったページ（読み捨てのみ）
    FAILED: 未対応の色空間や途中で終わったストリーム
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionResult:
    """1ページ分の変換結果

    Attributes:
        source_path: 入力ラスタファイル
        page_number: ストリーム内のページ番号（1始まり）
        dest_path: 書き出した画像ファイル（SUCCESS以外はNone）
        status: 結果の種別
        message: 失敗理由
        bytes_after: 書き出した画像ファイルのバイト数
        stream_offset: このページの処理後にストリームから読み取り済みのバイト数
    """

    source_path: Path
    page_number: int
    dest_path: Path | None
    status: ConversionStatus
    message: str = ""
    bytes_after: int = 0
    stream_offset: int = 0

    @property
    def is_success(self) -> bool:
        return self.status is ConversionStatus.SUCCESS


class BaseConverter(ABC):
    """ページ単位Converterの基底クラス"""

    @property
    @abstractmethod
    def supported_extensions(self) -> tuple[str, ...]:
        """慣例的な入力拡張子（ドット付き小文字、例: ".ras"）"""
        ...

    @abstractmethod
    def can_convert(self, file_path: Path) -> bool:
        """file_pathの内容をこのConverterで扱えるかを返す"""
        ...

    @abstractmethod
    def convert(self, source: Path, dest_dir: Path) -> list[ConversionResult]:
        """sourceの全ページを処理し、dest_dirに書き出す

        Args:
            source: 入力ファイル
            dest_dir: 出力ディレクトリ（存在しなければ作成する）

        Returns:
            ストリーム上の順序どおりのページごとの結果
        """
        ...

    def _validate_source(self, source: Path) -> None:
        """入力が読み取り可能な通常ファイルであることを確認する

        Raises:
            FileNotFoundError: 存在しない場合
            ValueError: ディレクトリが指定された場合
        """
        if source.is_dir():
            raise ValueError(f"入力にはファイルを指定してください: {source}")
        if not source.is_file():
            raise FileNotFoundError(f"入力ファイルが見つかりません: {source}")

    def _get_file_size(self, path: Path) -> int:
        """書き出したファイルのバイト数（存在しなければ0）"""
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return 0
