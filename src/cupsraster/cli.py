"""CLI entry point for cupsraster."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cupsraster import __version__
from cupsraster.config import (
    SUPPORTED_OUTPUT_FORMATS,
    ConfigError,
    RasterConfig,
    get_default_config,
    load_config,
)
from cupsraster.converter.base import ConversionResult, ConversionStatus
from cupsraster.converter.image import OutputFormat, RasterImageConverter
from cupsraster.logger import LogConfig, RenderLogger, VerboseLevel
from cupsraster.raster.constants import ColorOrder, ColorSpace, describe
from cupsraster.raster.decoder import Decoder
from cupsraster.raster.errors import RasterError, RasterErrorKind
from cupsraster.types import ExitCode

app = typer.Typer(help="CUPSラスタストリームを解析・画像化するCLIツール")
console = Console()


def _exit_code_for(error: RasterError) -> ExitCode:
    """ラスタエラーの種別に対応する終了コードを返す"""
    if error.kind is RasterErrorKind.UNKNOWN_FORMAT:
        return ExitCode.INVALID_INPUT
    if error.kind is RasterErrorKind.UNSUPPORTED:
        return ExitCode.UNSUPPORTED
    return ExitCode.ERROR


def _format_size(size_bytes: int) -> str:
    """バイト数を人間が読みやすい形式に変換する"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


@app.command()
def info(
    input_path: Annotated[Path, typer.Argument(help="ラスタファイルパス")],
) -> None:
    """ページヘッダーの一覧を表示する"""
    if not input_path.is_file():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    table = Table(title=f"Raster Info: {input_path.name}")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Size", justify="left")
    table.add_column("DPI", justify="left")
    table.add_column("Color", justify="left", style="green")
    table.add_column("Depth", justify="left")
    table.add_column("Bytes/Line", justify="right")
    table.add_column("Media", justify="left")

    with open(input_path, "rb") as f:
        try:
            decoder = Decoder(f)
            for number, page in enumerate(decoder, start=1):
                header = page.header
                raster = header.raster
                media = header.extension.page_size_name if header.extension else ""
                table.add_row(
                    str(number),
                    f"{raster.width}x{raster.height}",
                    f"{header.horiz_dpi}x{header.vert_dpi}",
                    f"{describe(ColorSpace, raster.color_space)} / "
                    f"{describe(ColorOrder, raster.color_order)}",
                    f"{raster.bits_per_color}/{raster.bits_per_pixel}",
                    str(raster.bytes_per_line),
                    media or header.media_type or "-",
                )
        except RasterError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(_exit_code_for(e)) from e

    console.print(
        f"Version {decoder.version} ({decoder.byte_order.name.lower()}-endian), "
        f"{decoder.pages_read} page(s), {_format_size(decoder.bytes_read)}"
    )
    console.print(table)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def render(
    input_path: Annotated[Path, typer.Argument(help="ラスタファイルパス")],
    output: Annotated[Path | None, typer.Option("-o", "--output", help="出力ディレクトリ")] = None,
    output_format: Annotated[
        str | None, typer.Option("-f", "--format", help="出力形式（png/tiff）")
    ] = None,
    page: Annotated[
        list[int] | None, typer.Option("-p", "--page", help="出力するページ番号（複数指定可）")
    ] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="エラー以外を出力しない")] = False,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """ラスタファイルの各ページを画像ファイルに書き出す"""
    if not input_path.is_file():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    try:
        config = load_config(config_path) if config_path else get_default_config()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    fmt = (output_format or config.output.format).lower()
    if fmt not in SUPPORTED_OUTPUT_FORMATS:
        console.print(f"[red]Error: 未対応の出力形式です: {fmt}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    log_config = _build_log_config(config, verbose=verbose, quiet=quiet, log_file=log_file)
    dest_dir = output if output is not None else input_path.parent

    with RenderLogger(log_config) as logger:
        progress = logger.create_progress()

        def on_page(result: ConversionResult) -> None:
            logger.log_conversion(result)
            progress.update(result.stream_offset, f"page {result.page_number}")

        converter = RasterImageConverter(
            output_format=OutputFormat(fmt),
            name_template=config.output.name_template,
            pages=page or config.pages,
            on_page=on_page,
        )

        progress.start(input_path.name, input_path.stat().st_size)
        try:
            results = converter.convert(input_path, dest_dir)
        except RasterError as e:
            progress.finish(False, str(e))
            logger.error(str(e))
            raise typer.Exit(_exit_code_for(e)) from e

        failed = [r for r in results if r.status == ConversionStatus.FAILED]
        progress.finish(not failed)
        logger.log_summary(results)

    if failed:
        raise typer.Exit(ExitCode.ERROR)
    raise typer.Exit(ExitCode.SUCCESS)


def _build_log_config(
    config: RasterConfig,
    *,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> LogConfig:
    """CLIオプションと設定ファイルからログ設定を組み立てる（CLIオプション優先）"""
    if quiet:
        level = VerboseLevel.QUIET
    else:
        level = VerboseLevel(min(max(verbose, config.logging.verbose), VerboseLevel.DEBUG))
    return LogConfig(
        verbose_level=level,
        log_file=log_file or config.logging.log_file,
    )


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"cupsraster {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """cupsraster CLI - CUPSラスタストリームの解析と画像化"""
    pass
