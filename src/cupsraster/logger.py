"""レンダリング進捗とログ出力

renderコマンドのページ変換の進み具合と結果メッセージを出力する。
出力量はVerboseLevelで切り替え、ログファイルが指定されていれば
レベルに関係なくすべてのメッセージを書き残す。
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

if TYPE_CHECKING:
    from cupsraster.converter.base import ConversionResult

PACKAGE_LOGGER = "cupsraster"
"""デコーダー内部のloggingが属するロガー名"""


class VerboseLevel(IntEnum):
    """詳細ログレベル

    QUIET: エラーのみ
    NORMAL: 進捗バーとサマリ
    VERBOSE: ページごとの変換結果（-v）
    DEBUG: デコーダー内部のログ（-vv）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


class ProgressDisplay(Protocol):
    """ストリームの読み取り位置に基づく進捗表示"""

    def start(self, label: str, total: int) -> None:
        """表示を開始する

        Args:
            label: 入力ファイルの表示名
            total: 入力の総バイト数（不明なら0）
        """
        ...

    def update(self, current: int, message: str = "") -> None:
        """読み取り済みバイト数で表示を更新する

        Args:
            current: ストリーム上の読み取り位置
            message: 直前に処理したページの説明
        """
        ...

    def finish(self, success: bool, message: str = "") -> None:
        """表示を終了する

        Args:
            success: 全ページを処理できたか
            message: 失敗時の理由
        """
        ...


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: 画面に出す詳細度
        log_file: 全メッセージの書き出し先（Noneなら書き出さない）
        use_emoji: サマリと進捗に絵文字を使うか
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None
    use_emoji: bool = True


class RenderLogger:
    """renderコマンドのログ出力

    コンテキストマネージャとして使い、終了時にログファイルとハンドラを片付ける。
    DEBUGレベルではcupsrasterパッケージのloggingを標準エラーへ流す。

    使用例:
        >>> with RenderLogger(LogConfig(verbose_level=VerboseLevel.VERBOSE)) as logger:
        ...     logger.info("job.ras を変換します")
        ...     logger.verbose("ページ1 -> job-001.png")
    """

    _ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        self._config = config
        self._log_file: TextIO | None = None
        self._handler: logging.Handler | None = None

        if config.log_file is not None:
            self._log_file = config.log_file.open("w", encoding="utf-8")
        if config.verbose_level >= VerboseLevel.DEBUG:
            self._handler = logging.StreamHandler(sys.stderr)
            self._handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
            package_logger = logging.getLogger(PACKAGE_LOGGER)
            package_logger.addHandler(self._handler)
            package_logger.setLevel(logging.DEBUG)

    def __enter__(self) -> RenderLogger:
        return self

    def __exit__(self, *args: object) -> None:
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None
        if self._handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._handler)
            self._handler = None

    def _emit(
        self,
        label: str,
        message: str,
        *,
        min_level: VerboseLevel,
        prefix: str = "",
        stream: TextIO | None = None,
    ) -> None:
        """min_level以上なら画面に出し、ログファイルには常に書く"""
        if self._config.verbose_level >= min_level:
            print(f"{prefix}{message}", file=stream or sys.stdout)
        if self._log_file is not None:
            stamp = datetime.now().isoformat(sep=" ", timespec="seconds")
            plain = self._ANSI_ESCAPE.sub("", message)
            self._log_file.write(f"[{stamp}] {label}: {plain}\n")
            self._log_file.flush()

    def info(self, message: str) -> None:
        self._emit("INFO", message, min_level=VerboseLevel.NORMAL)

    def verbose(self, message: str) -> None:
        self._emit("VERBOSE", message, min_level=VerboseLevel.VERBOSE)

    def debug(self, message: str) -> None:
        self._emit("DEBUG", message, min_level=VerboseLevel.DEBUG)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message, min_level=VerboseLevel.NORMAL, prefix="警告: ")

    def error(self, message: str) -> None:
        """エラーはQUIETでも標準エラーに出す"""
        self._emit(
            "ERROR",
            message,
            min_level=VerboseLevel.QUIET,
            prefix="エラー: ",
            stream=sys.stderr,
        )

    def create_progress(self) -> ProgressDisplay:
        """詳細度に合った進捗表示を返す（QUIETでは何も表示しない）"""
        if self._config.verbose_level <= VerboseLevel.QUIET:
            return SilentProgressDisplay()
        return ConsoleProgressDisplay(use_emoji=self._config.use_emoji)

    def log_conversion(self, result: ConversionResult) -> None:
        """1ページの変換結果を記録する

        メッセージ付きの結果（失敗や空ページ）は警告として出し、
        全ページの行はVERBOSE以上でのみ表示する。
        """
        if result.message:
            self.warning(f"ページ{result.page_number}: {result.message}")
        dest = result.dest_path.name if result.dest_path else "-"
        self.verbose(
            f"変換: {result.source_path.name} p{result.page_number} -> {dest} "
            f"[{result.status.value}]"
        )

    def log_summary(self, results: list[ConversionResult]) -> None:
        """全ページの集計を出す"""
        succeeded = sum(1 for r in results if r.is_success)
        written = sum(r.bytes_after for r in results)
        head = "✅" if self._config.use_emoji else "[OK]"
        self.info(f"{head} Render complete!")
        self.info(f"   Pages: {succeeded}/{len(results)}")
        if written:
            self.info(f"   Output: {written / 1024:.1f} KB")


class ConsoleProgressDisplay:
    """標準出力に1行の進捗バーを描く"""

    BAR_WIDTH = 40

    def __init__(self, use_emoji: bool = True) -> None:
        self._use_emoji = use_emoji
        self._total = 0

    def _bar(self, fraction: float) -> str:
        filled = int(self.BAR_WIDTH * fraction)
        return "█" * filled + "░" * (self.BAR_WIDTH - filled)

    def start(self, label: str, total: int) -> None:
        self._total = total
        icon = "\U0001f5a8 " if self._use_emoji else ""
        print(f"{icon}Rendering {label}...")

    def update(self, current: int, message: str = "") -> None:
        # 総量が不明なストリームではバーを描かない
        if self._total <= 0:
            return
        fraction = min(current, self._total) / self._total
        tail = f" {message}" if message else ""
        print(f"\r   [{self._bar(fraction)}] {int(fraction * 100)}%{tail}", end="", flush=True)

    def finish(self, success: bool, message: str = "") -> None:
        if success:
            status = "100% " + ("✓" if self._use_emoji else "done")
        else:
            status = "✗" if self._use_emoji else "failed"
            if message:
                status += f": {message}"
        print(f"\r   [{self._bar(1.0)}] {status}")


class SilentProgressDisplay:
    """何も表示しない進捗表示（QUIET用）"""

    def start(self, label: str, total: int) -> None:
        pass

    def update(self, current: int, message: str = "") -> None:
        pass

    def finish(self, success: bool, message: str = "") -> None:
        pass
