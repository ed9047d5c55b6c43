"""
PDF Renderer

Lays a structured Document out on A4 pages with Pillow and saves them as
a multi-page PDF. Layout is deliberately plain: title block, header lines,
label/value sections, tables, the highlighted amount, an optional image
and a footer on the last page.

Output modes:
- DOWNLOAD: write ``<output_dir>/<document.filename>`` and return the Path
- PREVIEW:  return ``data:application/pdf;base64,...``
"""

import base64
import io
from pathlib import Path
from typing import Optional, Union

import structlog
from PIL import Image, ImageDraw, ImageFont

from finovate.config import get_settings
from finovate.errors import FinovateError
from finovate.models.documents import Document, OutputMode


logger = structlog.get_logger(__name__)

A4_INCHES = (8.27, 11.69)
BLACK = (0, 0, 0)
GREY = (150, 150, 150)
HEADER_FILL = (230, 230, 230)


class DocumentOutputError(FinovateError):
    """A rendered document could not be written to its destination."""
    pass


class _PageWriter:
    """Cursor over a growing list of page images."""

    def __init__(self, dpi: int):
        self.width = round(A4_INCHES[0] * dpi)
        self.height = round(A4_INCHES[1] * dpi)
        self.margin = round(0.8 * dpi)
        scale = dpi / 72
        self.fonts = {
            "title": ImageFont.load_default(size=round(22 * scale)),
            "subtitle": ImageFont.load_default(size=round(14 * scale)),
            "heading": ImageFont.load_default(size=round(12 * scale)),
            "body": ImageFont.load_default(size=round(10 * scale)),
            "amount": ImageFont.load_default(size=round(18 * scale)),
        }
        self.pages: list[Image.Image] = []
        self._new_page()

    @property
    def usable_width(self) -> int:
        return self.width - 2 * self.margin

    def _new_page(self) -> None:
        page = Image.new("RGB", (self.width, self.height), "white")
        self.pages.append(page)
        self.draw = ImageDraw.Draw(page)
        self.y = self.margin

    def _line_height(self, font) -> int:
        left, top, right, bottom = font.getbbox("Ag")
        return round((bottom - top) * 1.6)

    def ensure(self, height: int) -> None:
        if self.y + height > self.height - self.margin:
            self._new_page()

    def wrap(self, text: str, font, max_width: int) -> list[str]:
        lines, current = [], ""
        for word in text.split():
            candidate = f"{current} {word}".strip()
            if current and self.draw.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        return lines + [current] if current else lines or [""]

    def text(self, text: str, style: str = "body", x: Optional[int] = None,
             align: str = "left", fill=BLACK, advance: bool = True) -> None:
        font = self.fonts[style]
        height = self._line_height(font)
        self.ensure(height)
        width = self.draw.textlength(text, font=font)
        if x is None:
            x = self.margin
        if align == "right":
            x = self.width - self.margin - width
        elif align == "center":
            x = (self.width - width) / 2
        self.draw.text((x, self.y), text, font=font, fill=fill)
        if advance:
            self.y += height

    def paragraph(self, text: str, style: str = "body", x: Optional[int] = None) -> None:
        x = self.margin if x is None else x
        for line in self.wrap(text, self.fonts[style], self.width - self.margin - x):
            self.text(line, style, x=x)

    def rule(self, gap: int = 10) -> None:
        self.ensure(2 * gap)
        self.y += gap
        self.draw.line(
            [(self.margin, self.y), (self.width - self.margin, self.y)],
            fill=BLACK,
            width=1,
        )
        self.y += gap

    def space(self, amount: int) -> None:
        self.y += amount

    def image(self, png: bytes, size: int) -> None:
        picture = Image.open(io.BytesIO(png)).convert("RGB")
        picture = picture.resize((size, size))
        self.ensure(size)
        self.pages[-1].paste(picture, (self.margin, round(self.y)))
        self.y += size


class PdfRenderer:
    """Renders Documents to PDF bytes with Pillow."""

    def __init__(self, dpi: Optional[int] = None, output_dir: Optional[Path] = None):
        settings = get_settings().documents
        self._dpi = dpi or settings.page_dpi
        self._output_dir = Path(output_dir) if output_dir is not None else settings.output_dir
        self._producer = settings.brand_name

    def _layout(self, document: Document) -> list[Image.Image]:
        page = _PageWriter(self._dpi)
        label_width = round(page.usable_width * 0.35)

        page.text(document.title, "title")
        if document.subtitle:
            page.text(document.subtitle, "subtitle")
        for line in document.header_lines:
            page.text(line, align="right")
        page.rule()

        for section in document.sections:
            page.text(section.heading, "heading")
            for entry in section.fields:
                if entry.label:
                    page.text(f"{entry.label}:", x=page.margin, advance=False)
                    page.paragraph(entry.value, x=page.margin + label_width)
                else:
                    page.paragraph(entry.value)
            page.space(page.margin // 4)

        for table in document.tables:
            page.rule()
            page.text(table.heading, "heading")
            column_width = page.usable_width / max(len(table.columns), 1)
            row_height = page._line_height(page.fonts["body"])
            page.ensure(row_height)
            page.draw.rectangle(
                [page.margin, page.y, page.width - page.margin, page.y + row_height],
                fill=HEADER_FILL,
            )
            self._row(page, table.columns, column_width)
            for row in table.rows:
                self._row(page, row, column_width)

        if document.highlight is not None:
            page.rule()
            page.text(f"{document.highlight.label}:", "heading", advance=False)
            page.text(document.highlight.value, "amount", align="right")

        if document.image_png:
            page.space(page.margin // 4)
            page.text(document.image_caption, "heading")
            page.image(document.image_png, round(2 * self._dpi))

        page.space(page.margin // 2)
        for line in document.footer_lines:
            page.text(line, fill=GREY)

        return page.pages

    def _row(self, page: _PageWriter, cells, column_width: float) -> None:
        for index, cell in enumerate(cells):
            x = round(page.margin + index * column_width + 4)
            page.text(str(cell), x=x, advance=index == len(cells) - 1)

    def render_pdf(self, document: Document) -> bytes:
        pages = self._layout(document)
        buffer = io.BytesIO()
        pages[0].save(
            buffer,
            format="PDF",
            save_all=True,
            append_images=pages[1:],
            resolution=float(self._dpi),
            title=document.title,
            producer=self._producer,
        )
        logger.debug(
            "document_rendered",
            kind=document.kind.value,
            pages=len(pages),
            size=buffer.tell(),
        )
        return buffer.getvalue()

    def emit(
        self,
        document: Document,
        mode: OutputMode,
        directory: Optional[Path] = None,
    ) -> Union[Path, str]:
        """
        Render and hand back the document in the requested mode.

        Raises:
            DocumentOutputError: If the PDF cannot be written (DOWNLOAD only)
        """
        pdf = self.render_pdf(document)

        if mode == OutputMode.PREVIEW:
            return "data:application/pdf;base64," + base64.b64encode(pdf).decode("ascii")

        target_dir = Path(directory) if directory is not None else self._output_dir
        path = target_dir / document.filename
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(pdf)
        except OSError as e:
            raise DocumentOutputError(f"Cannot write {path}: {e}") from e

        logger.info("document_written", kind=document.kind.value, path=str(path))
        return path
