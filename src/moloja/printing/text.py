"""Text helpers shared by the PDF and thermal renderers.

Word wrapping under a character limit, fixed-width alignment and
the pt-AO number and date formats printed on every receipt.
"""

import logging
import math
from datetime import datetime
from typing import Any, List

logger = logging.getLogger(__name__)

# Characters per line
PDF_TEXT_WIDTH = 38     # Vector document prose
THERMAL_WIDTH = 32      # 58mm paper, 384 dots / 12 dots per char

DATETIME_FORMAT = "%d-%m-%Y %H:%M:%S"


def wrap_text(text: str, max_width: int) -> List[str]:
    """Greedy word wrap.

    Words are accumulated while ``current + " " + word`` fits. A word
    longer than ``max_width`` is hard-split into ``max_width`` chunks so
    no returned line is ever wider than the limit.

    Args:
        text: Text to wrap (newlines start a new line)
        max_width: Maximum characters per line

    Returns:
        List of lines, ``[text]`` when it already fits
    """
    if max_width <= 0:
        return [text] if text else [""]

    if len(text) <= max_width and "\n" not in text:
        return [text]

    lines: List[str] = []
    for raw in text.splitlines() or [""]:
        words = raw.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            if len(word) > max_width:
                if current:
                    lines.append(current)
                    current = ""
                while len(word) > max_width:
                    lines.append(word[:max_width])
                    word = word[max_width:]
                current = word
                continue

            if not current:
                current = word
            elif len(current) + 1 + len(word) <= max_width:
                current = f"{current} {word}"
            else:
                lines.append(current)
                current = word

        if current:
            lines.append(current)

    return lines or [""]


def wrapped_line_count(text: str, max_width: int) -> int:
    """Number of lines ``text`` occupies once wrapped.

    Never less than ``ceil(len(text) / max_width)``, which keeps the
    count monotonic in text length.
    """
    if not text:
        return 1
    by_length = math.ceil(len(text) / max_width) if max_width > 0 else 1
    return max(by_length, len(wrap_text(text, max_width)))


def center(text: str, width: int = THERMAL_WIDTH) -> str:
    """Pad text symmetrically to ``width`` columns."""
    return text[:width].center(width)


def align_right(text: str, width: int = THERMAL_WIDTH) -> str:
    """Right-align text in ``width`` columns."""
    return text[:width].rjust(width)


def rule(width: int = THERMAL_WIDTH, char: str = "-") -> str:
    """Horizontal rule made of ``char``."""
    return char * width


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a number-like value, returning ``default`` when it fails.

    Accepts comma decimal separators (``"12,50"``). NaN and infinities
    are treated as parse failures.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        if isinstance(value, str):
            cleaned = value.strip().replace(" ", "").replace(",", ".")
            if not cleaned:
                return default
            number = float(cleaned)
        else:
            number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_int(value: Any, default: int = 1) -> int:
    """Coerce an integer-like value, truncating decimals."""
    number = to_float(value, float("nan"))
    if math.isnan(number):
        return default
    return int(number)


def format_currency(amount: float, currency: str = "AOA") -> str:
    """Format an amount as ``"AOA 1000,00"``."""
    value = to_float(amount)
    return f"{currency} {value:.2f}".replace(".", ",")


def format_percent(rate: float) -> str:
    """Format a tax rate as ``"14%"`` or ``"6,5%"``."""
    return f"{to_float(rate):g}%".replace(".", ",")


def format_datetime(moment: datetime) -> str:
    """Format a timestamp as ``dd-mm-yyyy hh:mm:ss``."""
    return moment.strftime(DATETIME_FORMAT)


def parse_sale_date(value: Any) -> datetime:
    """Parse an ISO timestamp from sale data, falling back to now."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparsable sale date {value!r}, using current time")
    return datetime.now()
