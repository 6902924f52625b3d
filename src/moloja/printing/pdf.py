"""PDF receipt renderer.

Draws a receipt on a single reportlab page, 80mm wide and as tall as
the height estimate requires. A cursor (mm from the top of the page)
moves down one line spacing after each printed line.
"""

import logging
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple, Union

from reportlab.graphics.barcode import code128
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from moloja.printing.config import ReceiptConfig
from moloja.printing.content import ReceiptContent
from moloja.printing.errors import DocumentConstructionError
from moloja.printing.estimate import (
    BARCODE_HEIGHT,
    ITEM_GAP,
    LINE_SPACING,
    LOGO_HEIGHT,
    PAGE_WIDTH,
    RULE_SPACING,
    SIDE_MARGIN,
    SIGNATURE_HEIGHT,
    TITLE_SPACING_FACTOR,
    TITLE_WIDTH,
    TOP_MARGIN,
    estimate_content_height,
    page_height,
)
from moloja.printing.text import PDF_TEXT_WIDTH, wrap_text

logger = logging.getLogger(__name__)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

# x offsets (mm) of price, quantity, tax and total columns. Item rows are
# drawn at exactly the header offsets.
COLUMN_OFFSETS = (SIDE_MARGIN, 30.0, 42.0, 54.0)
TABLE_HEADER = ("Preço", "Qtd", "Taxa", "Total")


@dataclass
class TextRun:
    """A string drawn on the page (mm, y from the top)."""

    text: str
    x: float
    y: float
    font: str
    size: float


@dataclass
class LayoutState:
    """Render-time geometry, discarded after drawing."""

    page_width: float = PAGE_WIDTH
    page_height: float = 0.0
    margin_left: float = SIDE_MARGIN
    margin_right: float = SIDE_MARGIN
    line_spacing: float = LINE_SPACING
    cursor: float = TOP_MARGIN
    font_size: float = 9.0

    @property
    def center_x(self) -> float:
        return self.page_width / 2

    @property
    def usable_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right


@dataclass
class VectorReceipt:
    """A rendered PDF receipt."""

    data: bytes
    width: float
    height: float
    estimated_height: float
    consumed_height: float
    runs: List[TextRun] = field(default_factory=list)
    item_rows: List[Tuple[str, int, float, float]] = field(default_factory=list)
    total_text: str = ""

    def to_bytes(self) -> bytes:
        """Serialized PDF document."""
        return self.data

    def save(self, path: Union[str, Path]) -> Path:
        """Write the PDF to ``path``."""
        target = Path(path)
        target.write_bytes(self.data)
        return target

    def texts(self) -> List[str]:
        return [run.text for run in self.runs]


class PdfReceiptRenderer:
    """Renders ReceiptContent to a PDF page.

    One renderer instance may be reused; all drawing state lives in the
    per-call LayoutState.
    """

    def render(self, content: ReceiptContent, config: ReceiptConfig) -> VectorReceipt:
        """Render a receipt.

        Args:
            content: Resolved receipt content
            config: Resolved receipt configuration

        Returns:
            VectorReceipt with PDF bytes and layout details

        Raises:
            DocumentConstructionError: If the PDF canvas fails
        """
        estimated = estimate_content_height(content, config, LINE_SPACING)
        state = LayoutState(page_height=page_height(estimated), font_size=config.font_sizes.normal)
        buffer = BytesIO()

        try:
            pdf = canvas.Canvas(buffer, pagesize=(state.page_width * mm, state.page_height * mm))
            pdf.setTitle(f"Recibo {content.invoice_number}")
            pdf.setAuthor(config.company_name)
        except Exception as e:
            logger.error(f"Could not create PDF canvas: {e}")
            raise DocumentConstructionError(f"Could not create PDF canvas: {e}") from e

        receipt = VectorReceipt(
            data=b"",
            width=state.page_width,
            height=state.page_height,
            estimated_height=estimated,
            consumed_height=0.0,
            total_text=content.total_text,
        )
        drawer = _PageDrawer(pdf, state, receipt)

        self._draw_header(drawer, config)
        self._draw_metadata(drawer, content, config)
        self._draw_customer(drawer, content, config)
        self._draw_items(drawer, content, config)
        self._draw_totals(drawer, content, config)
        self._draw_footer(drawer, content, config)

        try:
            pdf.showPage()
            pdf.save()
        except Exception as e:
            logger.error(f"Could not serialize PDF receipt: {e}")
            raise DocumentConstructionError(f"Could not serialize PDF receipt: {e}") from e

        receipt.data = buffer.getvalue()
        receipt.consumed_height = state.cursor
        if state.cursor > estimated:
            logger.warning(
                f"Receipt content ({state.cursor:.1f}mm) exceeds estimate ({estimated:.1f}mm)"
            )
        logger.debug(
            f"Rendered PDF receipt {content.invoice_number}: "
            f"{len(content.items)} items, {state.cursor:.1f}/{state.page_height:.0f}mm"
        )
        return receipt

    def _draw_header(self, drawer: "_PageDrawer", config: ReceiptConfig) -> None:
        """Logo, company name and the optional company lines."""
        sizes = config.font_sizes
        if config.show_logo and config.company_logo:
            drawer.image(config.company_logo, LOGO_HEIGHT)

        for line in wrap_text(config.company_name, TITLE_WIDTH):
            drawer.text(line, sizes.title, FONT_BOLD, align="center",
                        advance=drawer.state.line_spacing * TITLE_SPACING_FACTOR)

        for _, text in config.header_fields():
            for line in wrap_text(text, PDF_TEXT_WIDTH):
                drawer.text(line, sizes.normal, align="center")

        drawer.rule()

    def _draw_metadata(self, drawer: "_PageDrawer", content: ReceiptContent, config: ReceiptConfig) -> None:
        sizes = config.font_sizes
        for line in wrap_text(config.receipt_title, PDF_TEXT_WIDTH):
            drawer.text(line, sizes.header, FONT_BOLD)
        drawer.text(f"Data: {content.issued_text}", sizes.normal)
        drawer.text(f"Data de entrega: {content.issued_text}", sizes.normal)
        drawer.text(f"Nº: {content.invoice_number}", sizes.normal)

    def _draw_customer(self, drawer: "_PageDrawer", content: ReceiptContent, config: ReceiptConfig) -> None:
        sizes = config.font_sizes
        for line in wrap_text(f"Cliente: {content.customer_name}", PDF_TEXT_WIDTH):
            drawer.text(line, sizes.normal)
        for line in wrap_text(f"NIF: {content.customer_nif}", PDF_TEXT_WIDTH):
            drawer.text(line, sizes.normal)
        drawer.rule()

    def _draw_items(self, drawer: "_PageDrawer", content: ReceiptContent, config: ReceiptConfig) -> None:
        """Two-row table header followed by one block per line item."""
        size = config.font_sizes.table
        drawer.text("Artigo", size, FONT_BOLD)
        drawer.columns(TABLE_HEADER, size, FONT_BOLD)
        drawer.rule()

        for item in content.items:
            for line in wrap_text(item.name, PDF_TEXT_WIDTH):
                drawer.text(line, size)
            drawer.columns(
                (
                    content.money(item.unit_price),
                    str(item.quantity),
                    content.tax_text,
                    content.money(item.line_total),
                ),
                size,
            )
            drawer.receipt.item_rows.append(item.as_tuple())
            drawer.space(ITEM_GAP)

    def _draw_totals(self, drawer: "_PageDrawer", content: ReceiptContent, config: ReceiptConfig) -> None:
        sizes = config.font_sizes
        drawer.rule()
        drawer.text(f"TOTAL: {content.total_text}", sizes.header, FONT_BOLD)
        for line in wrap_text(f"Pagamento: {content.payment_method}", PDF_TEXT_WIDTH):
            drawer.text(line, sizes.normal)
        if content.amount_paid is not None:
            drawer.text(f"Valor pago: {content.money(content.amount_paid)}", sizes.normal)
        if content.change is not None:
            drawer.text(f"Troco: {content.money(content.change)}", sizes.normal)
        if content.notes:
            for line in wrap_text(f"Obs.: {content.notes}", PDF_TEXT_WIDTH):
                drawer.text(line, sizes.normal)
        for line in wrap_text(config.exemption_clause, PDF_TEXT_WIDTH):
            drawer.text(line, sizes.footer)

    def _draw_footer(self, drawer: "_PageDrawer", content: ReceiptContent, config: ReceiptConfig) -> None:
        sizes = config.font_sizes
        for line in wrap_text(config.thank_you_message, PDF_TEXT_WIDTH):
            drawer.text(line, sizes.normal, FONT_BOLD, align="center")
        for line in wrap_text(content.footer_sentence(config), PDF_TEXT_WIDTH):
            drawer.text(line, sizes.footer, align="center")

        if config.show_signature:
            drawer.signature(SIGNATURE_HEIGHT, sizes.footer)
        if config.show_barcode:
            drawer.barcode(content.sale_id or content.invoice_number, BARCODE_HEIGHT)

        for text in (config.system_info, config.certificate_number):
            for line in wrap_text(text, PDF_TEXT_WIDTH):
                drawer.text(line, sizes.footer, FONT_ITALIC, align="center")


class _PageDrawer:
    """Cursor-based drawing primitives on a reportlab canvas."""

    def __init__(self, pdf: canvas.Canvas, state: LayoutState, receipt: VectorReceipt):
        self.pdf = pdf
        self.state = state
        self.receipt = receipt

    def _y(self, cursor: float) -> float:
        return (self.state.page_height - cursor) * mm

    def text(
        self,
        text: str,
        size: float,
        font: str = FONT,
        align: str = "left",
        advance: Optional[float] = None,
    ) -> None:
        state = self.state
        state.font_size = size
        self.pdf.setFont(font, size)
        y = self._y(state.cursor)
        if align == "center":
            x = state.center_x
            self.pdf.drawCentredString(x * mm, y, text)
        elif align == "right":
            x = state.page_width - state.margin_right
            self.pdf.drawRightString(x * mm, y, text)
        else:
            x = state.margin_left
            self.pdf.drawString(x * mm, y, text)
        self.receipt.runs.append(TextRun(text=text, x=x, y=state.cursor, font=font, size=size))
        state.cursor += state.line_spacing if advance is None else advance

    def columns(self, values: Tuple[str, ...], size: float, font: str = FONT) -> None:
        """One row of text at the fixed table column offsets."""
        state = self.state
        state.font_size = size
        self.pdf.setFont(font, size)
        y = self._y(state.cursor)
        for x, value in zip(COLUMN_OFFSETS, values):
            self.pdf.drawString(x * mm, y, value)
            self.receipt.runs.append(TextRun(text=value, x=x, y=state.cursor, font=font, size=size))
        state.cursor += state.line_spacing

    def rule(self) -> None:
        state = self.state
        y = self._y(state.cursor - 2.0)
        self.pdf.setLineWidth(0.3)
        self.pdf.line(state.margin_left * mm, y, (state.page_width - state.margin_right) * mm, y)
        state.cursor += RULE_SPACING

    def space(self, height: float) -> None:
        self.state.cursor += height

    def image(self, path: str, height: float) -> None:
        """Centered image, skipped when it cannot be loaded."""
        from PIL import Image, UnidentifiedImageError

        state = self.state
        try:
            with Image.open(path) as img:
                img.load()
                logo = img.convert("RGB")
        except (OSError, UnidentifiedImageError) as e:
            logger.warning(f"Receipt logo {path!r} not loaded: {e}")
            return

        aspect = logo.width / logo.height if logo.height else 1.0
        width = min(state.usable_width, height * aspect)
        x = (state.page_width - width) / 2
        top = state.cursor - state.line_spacing * 0.8
        self.pdf.drawImage(
            ImageReader(logo),
            x * mm,
            self._y(top + height),
            width=width * mm,
            height=height * mm,
            preserveAspectRatio=True,
            anchor="c",
        )
        state.cursor += height + state.line_spacing

    def signature(self, height: float, size: float) -> None:
        state = self.state
        state.cursor += height - state.line_spacing
        y = self._y(state.cursor - 3.0)
        self.pdf.setLineWidth(0.3)
        self.pdf.line(15 * mm, y, (state.page_width - 15) * mm, y)
        self.text("Assinatura", size, align="center")
        state.cursor += state.line_spacing

    def barcode(self, value: str, height: float) -> None:
        """Code128 barcode of ``value``, scaled to the usable width."""
        state = self.state
        value = value.encode("ascii", errors="ignore").decode("ascii") or "0"
        bar_width = 0.25 * mm
        code = code128.Code128(value, barHeight=(height - 2) * mm, barWidth=bar_width, quiet=False)
        if code.width > state.usable_width * mm:
            bar_width *= (state.usable_width * mm) / code.width
            code = code128.Code128(value, barHeight=(height - 2) * mm, barWidth=bar_width, quiet=False)
        x = (state.page_width * mm - code.width) / 2
        top = state.cursor - state.line_spacing * 0.8
        code.drawOn(self.pdf, x, self._y(top + height - 2))
        state.cursor += height + state.line_spacing


def render_pdf(content: ReceiptContent, config: ReceiptConfig) -> VectorReceipt:
    """Render receipt content to a PDF."""
    return PdfReceiptRenderer().render(content, config)
