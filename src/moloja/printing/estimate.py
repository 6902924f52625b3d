"""Vertical size estimation for PDF receipts.

The PDF receipt is a single page as long as its content. Its height is
allocated before drawing, so this estimate must never be smaller than
what the renderer actually consumes. Over-estimating only leaves blank
paper at the bottom.

All measures are millimetres.
"""

import math
from typing import Any, Mapping, Optional, Union

from moloja.printing.config import ReceiptConfig, resolve_config
from moloja.printing.content import ReceiptContent, build_content
from moloja.printing.text import PDF_TEXT_WIDTH, wrapped_line_count

# Page geometry
PAGE_WIDTH = 80.0
STANDARD_PAGE_HEIGHT = 297.0
TOP_MARGIN = 10.0
BOTTOM_MARGIN = 10.0
SIDE_MARGIN = 5.0
LINE_SPACING = 5.0
TITLE_SPACING_FACTOR = 1.5
TITLE_WIDTH = 22            # Characters per title line
RULE_SPACING = 4.0
ITEM_GAP = 1.0              # Drawn after each item block
ITEM_MARGIN = 2.0           # Estimated per item, >= ITEM_GAP
LOGO_HEIGHT = 20.0
SIGNATURE_HEIGHT = 15.0
BARCODE_HEIGHT = 12.0

# Allowances
BASE_ALLOWANCE = 150.0      # Header, company block, metadata, customer, table header
TOTALS_ALLOWANCE = 100.0    # Totals, payment, exemption, thanks, footer, certification

OPTIONAL_PROFILE_FIELDS = ("address", "email", "phone", "neighborhood", "city", "social_media")


def _extra_lines(text: Optional[str], width: int = PDF_TEXT_WIDTH) -> int:
    """Continuation lines a text needs beyond its first."""
    if not text:
        return 0
    return wrapped_line_count(text, width) - 1


def item_height(name: str, line_spacing: float = LINE_SPACING) -> float:
    """Estimated height of one item block (name lines + numeric row)."""
    extra = max(0, wrapped_line_count(name, PDF_TEXT_WIDTH) - 1)
    return (2 + extra) * line_spacing + ITEM_MARGIN


def estimate_content_height(
    content: ReceiptContent,
    config: ReceiptConfig,
    line_spacing: float = LINE_SPACING,
) -> float:
    """Estimate the height of a receipt from resolved content."""
    height = BASE_ALLOWANCE

    for item in content.items:
        height += item_height(item.name, line_spacing)

    height += TOTALS_ALLOWANCE

    for name in OPTIONAL_PROFILE_FIELDS:
        if getattr(config, name):
            height += line_spacing

    # Wrapped continuation lines of variable length prose
    title_extra = _extra_lines(config.company_name, TITLE_WIDTH)
    height += title_extra * line_spacing * TITLE_SPACING_FACTOR

    prose = [text for _, text in config.header_fields()]
    prose += [
        config.receipt_title,
        f"Cliente: {content.customer_name}",
        f"NIF: {content.customer_nif}",
        f"Pagamento: {content.payment_method}",
        f"Obs.: {content.notes}" if content.notes else None,
        config.exemption_clause,
        config.thank_you_message,
        content.footer_sentence(config),
        config.system_info,
        config.certificate_number,
    ]
    height += sum(_extra_lines(text) for text in prose) * line_spacing

    if config.show_logo and config.company_logo:
        height += LOGO_HEIGHT + line_spacing
    if config.show_signature:
        height += SIGNATURE_HEIGHT + line_spacing
    if config.show_barcode:
        height += BARCODE_HEIGHT + line_spacing

    return height


def estimate_height(
    sale: Any,
    config: Union[ReceiptConfig, Mapping[str, Any], None] = None,
    line_spacing: float = LINE_SPACING,
) -> float:
    """Estimate the vertical extent of a sale's PDF receipt.

    Non-decreasing in the number of items and in product name length.

    Args:
        sale: Sale mapping
        config: Receipt config or business profile (defaults when None)
        line_spacing: Distance between baselines in mm

    Returns:
        Estimated height in mm
    """
    resolved = resolve_config(config)
    return estimate_content_height(build_content(sale, resolved), resolved, line_spacing)


def page_height(estimated: float) -> float:
    """Page height for an estimated content height."""
    return max(STANDARD_PAGE_HEIGHT, math.ceil(estimated + BOTTOM_MARGIN))
