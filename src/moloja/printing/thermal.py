"""Thermal receipt renderer.

Produces the same sections as the PDF receipt, in the same order, as
32-column plain text for narrow thermal printers.
"""

import logging

from moloja.printing.config import ReceiptConfig
from moloja.printing.content import ReceiptContent
from moloja.printing.layout import Alignment, LayoutEngine, ReceiptLayout, TextSize
from moloja.printing.text import THERMAL_WIDTH

logger = logging.getLogger(__name__)


def item_row_text(content: ReceiptContent, quantity: int, unit_price: float, line_total: float) -> str:
    """``"2 x AOA 500,00 = AOA 1000,00"``"""
    return f"{quantity} x {content.money(unit_price)} = {content.money(line_total)}"


class ThermalReceiptRenderer:
    """Renders ReceiptContent to fixed-width text."""

    def __init__(self, chars_per_line: int = THERMAL_WIDTH):
        self._layout_engine = LayoutEngine(chars_per_line)
        self.chars_per_line = chars_per_line

    def render(self, content: ReceiptContent, config: ReceiptConfig) -> str:
        """Render a receipt.

        Args:
            content: Resolved receipt content
            config: Resolved receipt configuration

        Returns:
            Newline separated receipt text
        """
        layout = self.build_layout(content, config)
        text = self._layout_engine.render_text(layout)
        logger.debug(f"Rendered thermal receipt {content.invoice_number}: {len(content.items)} items")
        return text

    def build_layout(self, content: ReceiptContent, config: ReceiptConfig) -> ReceiptLayout:
        layout = ReceiptLayout()
        self._create_header(layout, config)
        self._create_metadata(layout, content, config)
        self._create_customer(layout, content)
        self._create_items(layout, content)
        self._create_totals(layout, content, config)
        self._create_footer(layout, content, config)
        return layout

    def _create_header(self, layout: ReceiptLayout, config: ReceiptConfig) -> None:
        layout.add_text(config.company_name, Alignment.CENTER, TextSize.LARGE)
        for _, text in config.header_fields():
            layout.add_text(text, Alignment.CENTER)
        layout.add_separator("double")

    def _create_metadata(self, layout: ReceiptLayout, content: ReceiptContent, config: ReceiptConfig) -> None:
        layout.add_text(config.receipt_title, Alignment.CENTER)
        layout.add_text(f"Data: {content.issued_text}")
        layout.add_text(f"Entrega: {content.issued_text}")
        layout.add_text(f"Nº: {content.invoice_number}")

    def _create_customer(self, layout: ReceiptLayout, content: ReceiptContent) -> None:
        layout.add_text(f"Cliente: {content.customer_name}")
        layout.add_text(f"NIF: {content.customer_nif}")
        layout.add_separator()

    def _create_items(self, layout: ReceiptLayout, content: ReceiptContent) -> None:
        layout.add_text("Artigo")
        layout.add_text(f"Qtd x Preço = Total (IVA {content.tax_text})")
        layout.add_separator()
        for item in content.items:
            layout.add_text(item.name)
            layout.add_text(item_row_text(content, item.quantity, item.unit_price, item.line_total))

    def _create_totals(self, layout: ReceiptLayout, content: ReceiptContent, config: ReceiptConfig) -> None:
        layout.add_separator()
        layout.add_text(f"TOTAL: {content.total_text}", Alignment.RIGHT)
        layout.add_text(f"Pagamento: {content.payment_method}")
        if content.amount_paid is not None:
            layout.add_text(f"Valor pago: {content.money(content.amount_paid)}")
        if content.change is not None:
            layout.add_text(f"Troco: {content.money(content.change)}")
        if content.notes:
            layout.add_text(f"Obs.: {content.notes}")
        layout.add_text(config.exemption_clause)

    def _create_footer(self, layout: ReceiptLayout, content: ReceiptContent, config: ReceiptConfig) -> None:
        layout.add_separator()
        layout.add_text(config.thank_you_message, Alignment.CENTER)
        layout.add_text(content.footer_sentence(config), Alignment.CENTER)

        if config.show_signature:
            layout.add_space(2)
            layout.add_text("_" * (self.chars_per_line - 8), Alignment.CENTER)
            layout.add_text("Assinatura", Alignment.CENTER)
        if config.show_barcode:
            layout.add_text(f"Ref: {content.sale_id or content.invoice_number}", Alignment.CENTER)

        layout.add_space()
        layout.add_text(config.system_info, Alignment.CENTER)
        layout.add_text(config.certificate_number, Alignment.CENTER)


def render_thermal(content: ReceiptContent, config: ReceiptConfig) -> str:
    """Render receipt content to 32-column text."""
    return ThermalReceiptRenderer().render(content, config)
