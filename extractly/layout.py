"""Lay out labeled text blocks into fixed-size pages for export.

A layout pass walks the blocks once with a vertical cursor, wrapping
bodies at word boundaries and starting a new page whenever the next
line would be placed below the page height. Positions are in the
units of `LayoutConfig` (millimetres on an A4 page by default),
measured from the top edge.

Two line-advance modes exist. EXACT advances the cursor once per
wrapped line. HEURISTIC paints the wrapped body as a single text
object and advances the cursor by an estimate derived from the body's
character count, which may over- or under-shoot the painted height.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class LineMode(Enum):
    EXACT = "exact"
    HEURISTIC = "heuristic"


class LineStyle(Enum):
    TITLE = "title"
    HEADING = "heading"
    LABEL = "label"
    BODY = "body"


@dataclass(frozen=True)
class BlockSpacing:
    """Heuristic advance: base + estimated_lines * per_line."""
    base: float
    per_line: float


@dataclass(frozen=True)
class DocumentBlock:
    """A block of body text with an optional label line above it.

    Attributes:
        label: Text of the label line, or None for no label.
        body: Body text; newlines start new paragraphs.
        label_style: Style of the label line (title, heading or label).
        indent: Horizontal offset of body lines from the left margin.
        spacing: Heuristic advance for this block; config default if None.
        gap_after: Extra vertical space after the block.
        estimate_text: Text the heuristic line estimate is taken from;
            the body if None.
        blank_line_if_empty: Reserve one body line even when the body
            is empty.
    """
    label: Optional[str] = None
    body: str = ""
    label_style: LineStyle = LineStyle.LABEL
    indent: float = 0.0
    spacing: Optional[BlockSpacing] = None
    gap_after: float = 0.0
    estimate_text: Optional[str] = None
    blank_line_if_empty: bool = False


@dataclass(frozen=True)
class LayoutLine:
    text: str
    x: float
    y: float
    style: LineStyle = LineStyle.BODY


@dataclass
class LayoutPage:
    number: int
    lines: list[LayoutLine] = field(default_factory=list)

    def texts(self) -> list[str]:
        return [line.text for line in self.lines]


@dataclass(frozen=True)
class LayoutConfig:
    """Page geometry and line metrics for a layout pass."""
    page_width_chars: int = 90
    page_height: float = 270.0
    top_margin: float = 15.0
    left_margin: float = 10.0
    line_height: float = 6.0
    label_line_height: float = 7.0
    title_line_height: float = 10.0
    heading_line_height: float = 8.0
    line_mode: LineMode = LineMode.EXACT
    chars_per_line_estimate: int = 90
    spacing: BlockSpacing = BlockSpacing(base=8.0, per_line=5.0)

    def label_advance(self, style: LineStyle) -> float:
        if style is LineStyle.TITLE:
            return self.title_line_height
        if style is LineStyle.HEADING:
            return self.heading_line_height
        return self.label_line_height


def wrap_text(text: str, width: int) -> list[str]:
    """Wrap text at word boundaries into lines of at most width characters.

    Newlines start a new paragraph and an empty paragraph yields an
    empty line. A word longer than width is never split; it gets a line
    of its own even though that line overflows. Empty text yields no
    lines.
    """
    if not text:
        return []
    width = max(width, 1)

    lines: list[str] = []
    for paragraph in text.split("\n"):
        current: Optional[str] = None
        for word in paragraph.split():
            if current is None:
                current = word
            elif len(current) + 1 + len(word) <= width:
                current += " " + word
            else:
                lines.append(current)
                current = word
            if len(current) > width:
                # Oversized word: alone on its line, unsplit
                lines.append(current)
                current = None
        if current is not None:
            lines.append(current)
        elif not paragraph.strip():
            lines.append("")
    return lines


def estimate_lines(text: str, chars_per_line: int) -> int:
    """Line count estimated from character length alone."""
    return math.ceil(len(text) / max(chars_per_line, 1))


class _PageWriter:
    """Vertical cursor that opens pages lazily and breaks them on overflow."""

    def __init__(self, config: LayoutConfig):
        self.config = config
        self.pages: list[LayoutPage] = []
        self.y = config.top_margin

    def _ensure_room(self) -> LayoutPage:
        if not self.pages:
            self.pages.append(LayoutPage(number=1))
        elif self.y > self.config.page_height:
            self.pages.append(LayoutPage(number=len(self.pages) + 1))
            self.y = self.config.top_margin
        return self.pages[-1]

    def emit(self, text: str, x: float, style: LineStyle, advance: float) -> None:
        page = self._ensure_room()
        page.lines.append(LayoutLine(text, x, self.y, style))
        self.y += advance

    def emit_group(self, lines: list[str], x: float, advance: float) -> None:
        """Place lines as one text object at the cursor, then advance once."""
        if lines:
            page = self._ensure_room()
            for i, text in enumerate(lines):
                page.lines.append(LayoutLine(
                    text, x, self.y + i * self.config.line_height, LineStyle.BODY))
        self.y += advance


def layout(blocks: Iterable[DocumentBlock], config: Optional[LayoutConfig] = None,
           line_mode: Optional[LineMode] = None) -> list[LayoutPage]:
    """Lay blocks out into pages.

    Args:
        blocks: Blocks in document order; they are not modified.
        config: Page geometry; defaults to `LayoutConfig()`.
        line_mode: Overrides `config.line_mode` for this call.

    Returns:
        Pages in order. No blocks (or only empty ones) yield no pages.
    """
    config = config or LayoutConfig()
    mode = line_mode or config.line_mode
    writer = _PageWriter(config)

    for block in blocks:
        if block.label is not None:
            writer.emit(block.label, config.left_margin, block.label_style,
                        config.label_advance(block.label_style))
            if not block.body and not block.blank_line_if_empty:
                writer.y += block.gap_after
                continue

        body_x = config.left_margin + block.indent
        wrapped = wrap_text(block.body, config.page_width_chars)
        if not wrapped and block.blank_line_if_empty:
            wrapped = [""]

        if mode is LineMode.HEURISTIC:
            spacing = block.spacing or config.spacing
            source = block.body if block.estimate_text is None else block.estimate_text
            estimated = estimate_lines(source, config.chars_per_line_estimate)
            writer.emit_group(wrapped, body_x, spacing.base + estimated * spacing.per_line)
        else:
            for text in wrapped:
                writer.emit(text, body_x, LineStyle.BODY, config.line_height)

        writer.y += block.gap_after

    return writer.pages
