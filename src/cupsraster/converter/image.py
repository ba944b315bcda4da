"""画像変換モジュール

ラスタページをPIL.Imageとして取り出す機能と、
ラスタストリームの各ページを画像ファイル（PNG/TIFF）に書き出す機能を提供する。

ページから生成するPIL.Imageの対応:
- BLACK 1ビット -> モード"1"（ビット1が黒）
- BLACK 8ビット -> モード"L"（インク濃度を反転）
- GRAY/SGRAY 1ビット -> モード"1"（ビット1が白）
- GRAY/SGRAY 8ビット -> モード"L"
- CMYK 8ビット -> モード"CMYK"
- その他の組み合わせはUNSUPPORTED
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from cupsraster.converter.base import BaseConverter, ConversionResult, ConversionStatus
from cupsraster.raster.constants import ColorOrder, ColorSpace, describe
from cupsraster.raster.decoder import Decoder
from cupsraster.raster.errors import RasterError, RasterErrorKind

if TYPE_CHECKING:
    from cupsraster.raster.header import RasterParams
    from cupsraster.raster.page import Page

_INVERT_TABLE = bytes(255 - v for v in range(256))


class OutputFormat(Enum):
    """画像出力形式

    RasterImageConverterの出力形式を定義する列挙型。
    """

    PNG = "png"
    TIFF = "tiff"


@dataclass(frozen=True)
class SurfaceLayout:
    """ページのバイト列をPIL.Imageとして解釈する方法

    Attributes:
        mode: PIL.Imageのモード
        rawmode: rawデコーダーに渡すモード
        bytes_per_pixel_line: 1ライン分の画素が占めるバイト数
        invert: デコード前に全バイトを反転するか
    """

    mode: str
    rawmode: str
    bytes_per_pixel_line: int
    invert: bool = False


def surface_layout(raster: RasterParams) -> SurfaceLayout:
    """色空間・深度に対応する画像レイアウトを決定する

    Args:
        raster: ラスタパラメータ

    Returns:
        画像レイアウト

    Raises:
        RasterError: 未対応の組み合わせ（UNSUPPORTED）
    """
    if raster.color_order != ColorOrder.CHUNKY:
        raise RasterError(
            RasterErrorKind.UNSUPPORTED,
            f"未対応の色順序です: {describe(ColorOrder, raster.color_order)}",
        )

    space = raster.color_space
    depth = raster.bits_per_color
    width = raster.width
    if space == ColorSpace.BLACK and depth == 1:
        return SurfaceLayout("1", "1;I", (width + 7) // 8)
    if space == ColorSpace.BLACK and depth == 8:
        return SurfaceLayout("L", "L", width, invert=True)
    if space in (ColorSpace.GRAY, ColorSpace.SGRAY) and depth == 1:
        return SurfaceLayout("1", "1", (width + 7) // 8)
    if space in (ColorSpace.GRAY, ColorSpace.SGRAY) and depth == 8:
        return SurfaceLayout("L", "L", width)
    if space == ColorSpace.CMYK and depth == 8:
        return SurfaceLayout("CMYK", "CMYK", width * 4)

    raise RasterError(
        RasterErrorKind.UNSUPPORTED,
        f"未対応の色空間・深度です: {describe(ColorSpace, space)}, {depth}ビット",
    )


def page_image(page: Page) -> Image.Image:
    """ページの残りのラインをすべて読み込み、PIL.Imageを返す

    read_allで未読ラインをすべて消費するため、read_line/read_allと混在させないこと。
    ページ全体を一度にメモリへ展開するので、大きなページでは
    read_lineとparse_colorsの組み合わせによるライン単位の処理を検討すること。

    Args:
        page: 対象のページ

    Returns:
        幅=ページ幅、高さ=読み込んだライン数の画像

    Raises:
        RasterError: 未対応の組み合わせ（UNSUPPORTED）、
            ライン長が画素数に足りない場合（INVALID_FORMAT）、
            ストリームが途中で終了した場合（UNEXPECTED_END_OF_INPUT）
    """
    raster = page.header.raster
    layout = surface_layout(raster)
    if raster.bytes_per_line < layout.bytes_per_pixel_line:
        raise RasterError(
            RasterErrorKind.INVALID_FORMAT,
            f"ライン長が画素数に対して不足しています: {raster.bytes_per_line} < "
            f"{layout.bytes_per_pixel_line}",
        )

    rows = page.unread_lines()
    data = bytearray(page.size())
    page.read_all(data)
    if layout.invert:
        data = data.translate(_INVERT_TABLE)

    return Image.frombytes(
        layout.mode,
        (raster.width, rows),
        bytes(data),
        "raw",
        layout.rawmode,
        raster.bytes_per_line,
    )


class RasterImageConverter(BaseConverter):
    """ラスタ画像変換クラス

    ラスタストリームの各ページを1ファイルずつ画像として書き出す。

    Attributes:
        output_format: 出力形式（PNGまたはTIFF）
        name_template: 出力ファイル名のテンプレート
    """

    DEFAULT_NAME_TEMPLATE = "{stem}-{page:03d}.{ext}"
    """出力ファイル名の既定テンプレート（stem, page, extを埋め込む）"""

    def __init__(
        self,
        output_format: OutputFormat = OutputFormat.PNG,
        name_template: str = DEFAULT_NAME_TEMPLATE,
        pages: Collection[int] | None = None,
        on_page: Callable[[ConversionResult], None] | None = None,
    ) -> None:
        """RasterImageConverterを初期化する

        Args:
            output_format: 出力形式
            name_template: 出力ファイル名のテンプレート
            pages: 書き出すページ番号（1始まり）。Noneの場合は全ページ
            on_page: ページを処理するたびに呼ばれるコールバック
        """
        self._output_format = output_format
        self._name_template = name_template
        self._pages = frozenset(pages) if pages else None
        self._on_page = on_page

    @property
    def output_format(self) -> OutputFormat:
        """出力形式を返す"""
        return self._output_format

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        """対応する拡張子のタプルを返す"""
        return (".ras", ".pwg", ".cups", ".raster")

    def can_convert(self, file_path: Path) -> bool:
        """このConverterで変換可能なファイルかを判定する

        拡張子ではなく先頭4バイトのマジックで判定する。

        Args:
            file_path: 判定対象のファイルパス

        Returns:
            ラスタストリームの場合True
        """
        if not file_path.is_file():
            return False
        try:
            with open(file_path, "rb") as f:
                Decoder(f)
        except (RasterError, OSError):
            return False
        return True

    def output_path(self, source: Path, dest_dir: Path, page_number: int) -> Path:
        """ページの出力先パスを返す

        Args:
            source: 変換元ファイルのパス
            dest_dir: 出力ディレクトリ
            page_number: ページ番号（1始まり）

        Returns:
            出力先パス
        """
        name = self._name_template.format(
            stem=source.stem,
            page=page_number,
            ext=self._output_format.value,
        )
        return dest_dir / name

    def convert(self, source: Path, dest_dir: Path) -> list[ConversionResult]:
        """ラスタストリームの各ページを画像ファイルに変換する

        ラインを読む前に判明したエラー（未対応の色空間、ライン長不足）と保存の失敗は
        FAILEDとして記録し、次のページへ進む。幅または高さが0のページはSKIPPEDとする。
        ストリームの途中終了などページ境界を失うエラーが発生した場合はそこで打ち切る。

        Args:
            source: 変換元ファイルのパス
            dest_dir: 出力ディレクトリ

        Returns:
            ページごとの変換結果のリスト

        Raises:
            FileNotFoundError: 変換元ファイルが存在しない場合
            RasterError: ストリームの先頭がラスタ形式でない場合
        """
        self._validate_source(source)
        results: list[ConversionResult] = []

        with open(source, "rb") as f:
            decoder = Decoder(f)
            while True:
                try:
                    page = decoder.next_page()
                except RasterError as e:
                    if not e.is_end_of_input:
                        self._record(
                            results,
                            ConversionResult(
                                source_path=source,
                                page_number=decoder.pages_read + 1,
                                dest_path=None,
                                status=ConversionStatus.FAILED,
                                message=str(e),
                                stream_offset=decoder.bytes_read,
                            ),
                        )
                    break

                page_number = decoder.pages_read
                if self._pages is not None and page_number not in self._pages:
                    self._record(
                        results,
                        ConversionResult(
                            source_path=source,
                            page_number=page_number,
                            dest_path=None,
                            status=ConversionStatus.SKIPPED,
                            stream_offset=decoder.bytes_read,
                        ),
                    )
                    continue

                unread_before = page.unread_lines()
                try:
                    image = page.image()
                except RasterError as e:
                    self._record(
                        results,
                        ConversionResult(
                            source_path=source,
                            page_number=page_number,
                            dest_path=None,
                            status=ConversionStatus.FAILED,
                            message=str(e),
                            stream_offset=decoder.bytes_read,
                        ),
                    )
                    # ラインを1つも消費していなければ次のページ境界へ読み捨てられる
                    if page.unread_lines() == unread_before:
                        continue
                    break

                if image.width == 0 or image.height == 0:
                    image.close()
                    self._record(
                        results,
                        ConversionResult(
                            source_path=source,
                            page_number=page_number,
                            dest_path=None,
                            status=ConversionStatus.SKIPPED,
                            message=f"空のページです: {image.width}x{image.height}",
                            stream_offset=decoder.bytes_read,
                        ),
                    )
                    continue

                dest = self.output_path(source, dest_dir, page_number)
                try:
                    self._save(image, dest)
                except (OSError, ValueError) as e:
                    self._record(
                        results,
                        ConversionResult(
                            source_path=source,
                            page_number=page_number,
                            dest_path=None,
                            status=ConversionStatus.FAILED,
                            message=f"画像の保存に失敗しました: {e}",
                            stream_offset=decoder.bytes_read,
                        ),
                    )
                    continue
                finally:
                    image.close()
                self._record(
                    results,
                    ConversionResult(
                        source_path=source,
                        page_number=page_number,
                        dest_path=dest,
                        status=ConversionStatus.SUCCESS,
                        bytes_after=self._get_file_size(dest),
                        stream_offset=decoder.bytes_read,
                    ),
                )

        return results

    def _record(self, results: list[ConversionResult], result: ConversionResult) -> None:
        results.append(result)
        if self._on_page is not None:
            self._on_page(result)

    def _save(self, image: Image.Image, dest: Path) -> None:
        """画像を出力形式で保存する

        PNGはCMYKを扱えないためRGBに変換して保存する。
        """
        dest.parent.mkdir(parents=True, exist_ok=True)

        if self._output_format == OutputFormat.PNG:
            if image.mode == "CMYK":
                image = image.convert("RGB")
            image.save(dest, "PNG")
        else:
            image.save(dest, "TIFF")
