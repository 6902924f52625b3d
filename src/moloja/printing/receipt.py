"""Receipt service for completed sales.

Turns a sale and a business profile into receipts and hands them to an
output sink:
- PDF download
- Thermal print
- Thermal text download
- Share, falling back to download

Every call re-derives the line items and renders from scratch; nothing
is cached between calls and the inputs are never modified.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Tuple, Union

from moloja.printing.config import ReceiptConfig, resolve_config
from moloja.printing.content import ReceiptContent, build_content
from moloja.printing.errors import ShareUnavailableError
from moloja.printing.pdf import PdfReceiptRenderer, VectorReceipt
from moloja.printing.sinks import OutputSink
from moloja.printing.thermal import ThermalReceiptRenderer

logger = logging.getLogger(__name__)

ConfigInput = Union[ReceiptConfig, Mapping[str, Any], None]


class ShareOutcome(Enum):
    """Result of a share request."""

    SHARED = "shared"
    DOWNLOADED = "downloaded"  # No sharing channel, saved instead
    DECLINED = "declined"      # Recipient dismissed the share


@dataclass
class Receipt:
    """Both renditions of one sale's receipt."""

    content: ReceiptContent
    config: ReceiptConfig
    document: VectorReceipt
    thermal: str
    timestamp: datetime


def _file_stem(content: ReceiptContent) -> str:
    safe_id = re.sub(r"[^A-Za-z0-9_-]", "", content.sale_id)
    return safe_id or datetime.now().strftime("%Y%m%d%H%M%S")


def pdf_filename(content: ReceiptContent) -> str:
    return f"receipt-sale-{_file_stem(content)}.pdf"


def thermal_filename(content: ReceiptContent) -> str:
    return f"receipt-thermal-{_file_stem(content)}.txt"


class ReceiptService:
    """Generates receipts and sends them to an output sink."""

    def __init__(self, sink: OutputSink):
        self._sink = sink
        self._pdf_renderer = PdfReceiptRenderer()
        self._thermal_renderer = ThermalReceiptRenderer()

    def _prepare(self, sale: Any, config: ConfigInput) -> Tuple[ReceiptContent, ReceiptConfig]:
        resolved = resolve_config(config)
        return build_content(sale, resolved), resolved

    def generate(self, sale: Any, config: ConfigInput = None) -> Receipt:
        """Render both the PDF and the thermal text of a sale."""
        content, resolved = self._prepare(sale, config)
        return Receipt(
            content=content,
            config=resolved,
            document=self._pdf_renderer.render(content, resolved),
            thermal=self._thermal_renderer.render(content, resolved),
            timestamp=datetime.now(),
        )

    def build_pdf(self, sale: Any, config: ConfigInput = None) -> VectorReceipt:
        """Render the PDF receipt without sending it anywhere.

        Raises:
            DocumentConstructionError: If the PDF cannot be built
        """
        content, resolved = self._prepare(sale, config)
        return self._pdf_renderer.render(content, resolved)

    def thermal_text(self, sale: Any, config: ConfigInput = None) -> str:
        """Render the thermal receipt text."""
        content, resolved = self._prepare(sale, config)
        return self._thermal_renderer.render(content, resolved)

    def to_download(self, sale: Any, config: ConfigInput = None) -> Path:
        """Save the PDF receipt as ``receipt-sale-<id>.pdf``."""
        content, resolved = self._prepare(sale, config)
        document = self._pdf_renderer.render(content, resolved)
        return self._sink.persist(document.to_bytes(), pdf_filename(content))

    async def to_print(self, sale: Any, config: ConfigInput = None) -> bool:
        """Send the thermal receipt to the printer.

        Returns:
            True if printed, False if the printer declined or failed
        """
        content, resolved = self._prepare(sale, config)
        text = self._thermal_renderer.render(content, resolved)
        printed = await self._sink.present(text)
        if not printed:
            logger.warning(f"Receipt {content.invoice_number} was not printed")
        return printed

    def to_thermal_download(self, sale: Any, config: ConfigInput = None) -> Path:
        """Save the thermal receipt as ``receipt-thermal-<id>.txt``."""
        content, resolved = self._prepare(sale, config)
        text = self._thermal_renderer.render(content, resolved)
        return self._sink.persist(text.encode("utf-8"), thermal_filename(content))

    async def to_share(self, sale: Any, config: ConfigInput = None) -> ShareOutcome:
        """Share the PDF receipt, downloading it when sharing is unavailable.

        Returns:
            SHARED, DOWNLOADED (fallback) or DECLINED
        """
        content, resolved = self._prepare(sale, config)
        document = self._pdf_renderer.render(content, resolved)
        filename = pdf_filename(content)
        caption = f"Recibo de venda {content.sale_id or content.invoice_number}"

        try:
            shared = await self._sink.share(document.to_bytes(), filename, caption)
        except ShareUnavailableError as e:
            logger.info(f"Sharing unavailable ({e}), downloading receipt instead")
            self._sink.persist(document.to_bytes(), filename)
            return ShareOutcome.DOWNLOADED

        if not shared:
            logger.info(f"Share of {filename} declined")
            return ShareOutcome.DECLINED
        return ShareOutcome.SHARED
