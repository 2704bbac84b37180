"""Document formatter for export - turns extraction data into laid-out pages.

Two documents are produced: the current extraction (summary paragraphs
followed by numbered key points) and the whole extraction history (one
labeled block per stored entry). The summary document advances its
cursor from estimated line counts; the history document uses the true
wrapped line count.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from .constants import DashboardConstants
from .layout import (
    BlockSpacing,
    DocumentBlock,
    LayoutConfig,
    LayoutPage,
    LineMode,
    LineStyle,
    layout,
)
from .records import HistoryEntry


class ExportFormatter:
    """Formats extraction results and history into export pages."""

    # Units are millimetres on an A4 page
    BODY_INDENT = 2.0
    SECTION_GAP = 4.0
    ENTRY_GAP = 4.0

    SUMMARY_SPACING = BlockSpacing(base=8.0, per_line=5.0)
    KEY_POINT_SPACING = BlockSpacing(base=7.0, per_line=4.0)

    def __init__(self, config: Optional[LayoutConfig] = None):
        """Initialize formatter.

        Args:
            config: Page geometry shared by both documents.
        """
        self.config = config or LayoutConfig()
        self.pages: List[LayoutPage] = []

    def summary_blocks(self, summary_paragraphs: Iterable[str],
                       key_points: Iterable[str]) -> List[DocumentBlock]:
        """Build the blocks of the single-extraction document."""
        blocks = [
            DocumentBlock(label=DashboardConstants.SUMMARY_EXPORT_TITLE,
                          label_style=LineStyle.TITLE),
            DocumentBlock(label=DashboardConstants.SUMMARY_HEADING,
                          label_style=LineStyle.HEADING),
        ]
        for paragraph in summary_paragraphs:
            blocks.append(DocumentBlock(body=paragraph, spacing=self.SUMMARY_SPACING))

        blocks[-1] = replace(blocks[-1], gap_after=self.SECTION_GAP)
        blocks.append(DocumentBlock(label=DashboardConstants.KEY_POINTS_HEADING,
                                    label_style=LineStyle.HEADING))

        for number, point in enumerate(key_points, 1):
            # The estimate counts the point alone, not its number prefix
            blocks.append(DocumentBlock(body=f"{number}. {point}",
                                        indent=self.BODY_INDENT,
                                        spacing=self.KEY_POINT_SPACING,
                                        estimate_text=point))
        return blocks

    def history_blocks(self, entries: Iterable[HistoryEntry]) -> List[DocumentBlock]:
        """Build the blocks of the full-history document."""
        blocks = [DocumentBlock(label=DashboardConstants.HISTORY_EXPORT_TITLE,
                                label_style=LineStyle.TITLE)]
        for number, entry in enumerate(entries, 1):
            blocks.append(DocumentBlock(
                label=f"{number}. {entry.url}",
                body=entry.content,
                indent=self.BODY_INDENT,
                gap_after=self.ENTRY_GAP,
                blank_line_if_empty=True,
            ))
        return blocks

    def format_summary(self, summary_paragraphs: Iterable[str],
                       key_points: Iterable[str]) -> List[LayoutPage]:
        """Lay out the single-extraction document using estimated line counts."""
        blocks = self.summary_blocks(summary_paragraphs, key_points)
        self.pages = layout(blocks, self.config, line_mode=LineMode.HEURISTIC)
        return self.pages

    def format_history(self, entries: Iterable[HistoryEntry]) -> List[LayoutPage]:
        """Lay out the history document using the exact wrapped line count."""
        blocks = self.history_blocks(entries)
        self.pages = layout(blocks, self.config, line_mode=LineMode.EXACT)
        return self.pages

    def get_page_count(self) -> int:
        """Return the number of pages from the last format call."""
        return len(self.pages)

    def get_page(self, page_num: int) -> Optional[LayoutPage]:
        """Get a page from the last format call (0-indexed), or None."""
        if 0 <= page_num < len(self.pages):
            return self.pages[page_num]
        return None
