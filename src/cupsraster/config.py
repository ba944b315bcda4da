"""Configuration module for cupsraster."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_OUTPUT_FORMATS = ("png", "tiff")


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class OutputConfig:
    """画像出力設定"""

    format: str = "png"
    name_template: str = "{stem}-{page:03d}.{ext}"


@dataclass(frozen=True)
class LoggingConfig:
    """ログ設定"""

    verbose: int = 0
    log_file: Path | None = None


@dataclass(frozen=True)
class RasterConfig:
    """ルート設定"""

    output: OutputConfig = field(default_factory=OutputConfig)
    pages: list[int] = field(default_factory=list)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path) -> RasterConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        RasterConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー、不正な値
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return RasterConfig(
        output=_merge_output_config(data.get("output", {}), default.output),
        pages=_parse_pages(data.get("pages", default.pages)),
        logging=_merge_logging_config(data.get("logging", {}), default.logging),
    )


def get_default_config() -> RasterConfig:
    """デフォルト設定を取得する"""
    return RasterConfig()


def _merge_output_config(data: dict[str, Any], default: OutputConfig) -> OutputConfig:
    """画像出力設定をマージする"""
    if not isinstance(data, dict):
        return default
    output_format = str(data.get("format", default.format)).lower()
    if output_format not in SUPPORTED_OUTPUT_FORMATS:
        raise ConfigError(f"未対応の出力形式です: {output_format}")
    name_template = data.get("name_template", default.name_template)
    _check_name_template(name_template)
    return OutputConfig(
        format=output_format,
        name_template=name_template,
    )


def _merge_logging_config(data: dict[str, Any], default: LoggingConfig) -> LoggingConfig:
    """ログ設定をマージする"""
    if not isinstance(data, dict):
        return default
    verbose = data.get("verbose", default.verbose)
    if not isinstance(verbose, int) or isinstance(verbose, bool):
        raise ConfigError(f"logging.verboseは整数である必要があります: {verbose!r}")
    log_file = data.get("log_file")
    return LoggingConfig(
        verbose=verbose,
        log_file=Path(log_file) if log_file else default.log_file,
    )


def _parse_pages(data: Any) -> list[int]:
    """ページ番号の一覧をパースする（1始まり）"""
    if not isinstance(data, list):
        return []
    pages: list[int] = []
    for item in data:
        if not isinstance(item, int) or isinstance(item, bool) or item < 1:
            raise ConfigError(f"ページ番号は1以上の整数である必要があります: {item!r}")
        pages.append(item)
    return pages


def _check_name_template(template: Any) -> None:
    """出力ファイル名テンプレートがstem/page/extだけで展開できるか確認する"""
    if not isinstance(template, str) or not template:
        raise ConfigError(
            f"output.name_templateは空でない文字列である必要があります: {template!r}"
        )
    try:
        template.format(stem="job", page=1, ext="png")
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        raise ConfigError(f"output.name_templateを展開できません: {template!r} ({e!r})") from e
