"""Layout engine for fixed-width thermal receipts.

A receipt is composed as a list of blocks (text, separators, spacing)
and rendered to plain text on a 32-column grid, the width of 58mm
thermal paper (~384 dots at 12 dots per character).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from moloja.printing.text import THERMAL_WIDTH, align_right, center, rule, wrap_text

logger = logging.getLogger(__name__)


class Alignment(Enum):
    """Text alignment options."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextSize(Enum):
    """Text size options.

    Plain text has a single glyph size; LARGE text is printed in
    capitals to stand out.
    """

    SMALL = 1
    LARGE = 2


@dataclass
class TextBlock:
    """A block of text for the receipt."""

    text: str
    alignment: Alignment = Alignment.LEFT
    size: TextSize = TextSize.SMALL


@dataclass
class SeparatorBlock:
    """A visual separator line."""

    style: str = "line"  # line, double, dashes


@dataclass
class SpacerBlock:
    """Vertical spacing."""

    lines: int = 1


Block = Union[TextBlock, SeparatorBlock, SpacerBlock]


@dataclass
class ReceiptLayout:
    """Complete thermal receipt layout definition."""

    blocks: List[Block] = field(default_factory=list)

    def add_text(
        self,
        text: str,
        alignment: Alignment = Alignment.LEFT,
        size: TextSize = TextSize.SMALL,
    ) -> "ReceiptLayout":
        """Add a text block."""
        self.blocks.append(TextBlock(text=text, alignment=alignment, size=size))
        return self

    def add_separator(self, style: str = "line") -> "ReceiptLayout":
        """Add a separator line."""
        self.blocks.append(SeparatorBlock(style=style))
        return self

    def add_space(self, lines: int = 1) -> "ReceiptLayout":
        """Add vertical spacing."""
        self.blocks.append(SpacerBlock(lines=lines))
        return self


class LayoutEngine:
    """Renders ReceiptLayout blocks to fixed-width text."""

    def __init__(self, chars_per_line: int = THERMAL_WIDTH):
        self.chars_per_line = chars_per_line

    def render_lines(self, layout: ReceiptLayout) -> List[str]:
        """Render a layout to a list of lines.

        Every line is at most ``chars_per_line`` characters; centered
        lines are padded on both sides to exactly that width.
        """
        lines: List[str] = []
        for block in layout.blocks:
            if isinstance(block, TextBlock):
                text = block.text.upper() if block.size is TextSize.LARGE else block.text
                for line in wrap_text(text, self.chars_per_line):
                    lines.append(self._align(line, block.alignment))
            elif isinstance(block, SeparatorBlock):
                lines.append(self._separator_text(block.style))
            elif isinstance(block, SpacerBlock):
                lines.extend([""] * block.lines)
        return lines

    def render_text(self, layout: ReceiptLayout) -> str:
        """Render a layout to newline separated text."""
        return "\n".join(self.render_lines(layout)) + "\n"

    def _align(self, line: str, alignment: Alignment) -> str:
        if alignment is Alignment.CENTER:
            return center(line, self.chars_per_line)
        if alignment is Alignment.RIGHT:
            return align_right(line, self.chars_per_line)
        return line

    def _separator_text(self, style: str) -> str:
        separators = {
            "line": rule(self.chars_per_line, "-"),
            "double": rule(self.chars_per_line, "="),
            "dashes": ("- " * self.chars_per_line)[:self.chars_per_line],
        }
        return separators.get(style, separators["line"])
