"""Printing module for Moloja - Sale receipt generation."""

from moloja.printing.config import ReceiptConfig, FontSizes, resolve_config
from moloja.printing.content import ReceiptContent, build_content
from moloja.printing.errors import DocumentConstructionError, ReceiptError, ShareUnavailableError
from moloja.printing.estimate import estimate_height
from moloja.printing.items import LineItem, ItemsShape, extract_items
from moloja.printing.layout import LayoutEngine, ReceiptLayout, TextBlock
from moloja.printing.pdf import VectorReceipt, render_pdf
from moloja.printing.receipt import Receipt, ReceiptService, ShareOutcome
from moloja.printing.sinks import (
    OutputSink,
    FileSink,
    SerialPrinterSink,
    TelegramShareSink,
    create_sink,
)
from moloja.printing.text import wrap_text
from moloja.printing.thermal import render_thermal

__all__ = [
    # Config
    "ReceiptConfig",
    "FontSizes",
    "resolve_config",
    # Content
    "ReceiptContent",
    "build_content",
    "LineItem",
    "ItemsShape",
    "extract_items",
    "wrap_text",
    "estimate_height",
    # Rendering
    "LayoutEngine",
    "ReceiptLayout",
    "TextBlock",
    "VectorReceipt",
    "render_pdf",
    "render_thermal",
    # Service
    "Receipt",
    "ReceiptService",
    "ShareOutcome",
    # Sinks
    "OutputSink",
    "FileSink",
    "SerialPrinterSink",
    "TelegramShareSink",
    "create_sink",
    # Errors
    "ReceiptError",
    "DocumentConstructionError",
    "ShareUnavailableError",
]
