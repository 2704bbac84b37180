"""Write exported documents to PDF files."""

import logging
import os
from typing import Iterable, List, Optional

from .constants import DashboardConstants
from .export_formatter import ExportFormatter
from .layout import LayoutPage
from .pdf_generator import HISTORY_BODY_SIZE, PDFGenerator
from .records import ExtractionResult, HistoryEntry

logger = logging.getLogger(__name__)


class ExportOutput:
    """Generates the export PDFs and saves them under their fixed names."""

    def __init__(self, formatter: Optional[ExportFormatter] = None,
                 pdf_generator: Optional[PDFGenerator] = None):
        self.formatter = formatter or ExportFormatter()
        self.pdf_generator = pdf_generator or PDFGenerator()
        self.last_path: Optional[str] = None

    def save_to_file(self, pages: List[LayoutPage], filename: str,
                     directory: Optional[str] = None,
                     title: Optional[str] = None,
                     body_size: Optional[int] = None) -> tuple[bool, str]:
        """Generate a PDF file from pages.

        Args:
            pages: Pages from the layout engine.
            filename: Output file name; '.pdf' is appended if missing.
            directory: Directory to write into; the current one if None.
            title: Optional PDF metadata title.
            body_size: Point size of body text; the generator default if None.

        Returns:
            Tuple of (success, error_message).
        """
        if not filename.endswith('.pdf'):
            filename += '.pdf'
        path = os.path.join(directory, filename) if directory else filename

        valid, error = self.validate_output_path(path)
        if not valid:
            logger.warning(f"Export to {path} refused: {error}")
            return False, error

        try:
            pdf_content = self.pdf_generator.generate_pdf(pages, title=title,
                                                          body_size=body_size)
            with open(path, 'wb') as f:
                f.write(pdf_content)
        except OSError as e:
            logger.warning(f"Could not write export {path}: {e}")
            return False, f"Save error: {str(e)}"

        self.last_path = path
        return True, ""

    def export_summary(self, result: ExtractionResult,
                       key_points: Optional[Iterable[str]] = None,
                       directory: Optional[str] = None) -> tuple[bool, str]:
        """Export the current extraction as extracted-summary.pdf.

        Args:
            result: The extraction whose summary is exported.
            key_points: The key points as currently edited; defaults to the
                extraction's original list.
            directory: Output directory.
        """
        points = list(key_points) if key_points is not None else result.key_points
        pages = self.formatter.format_summary(result.paragraphs(), points)
        return self.save_to_file(pages, DashboardConstants.SUMMARY_EXPORT_FILENAME,
                                 directory, title=DashboardConstants.SUMMARY_EXPORT_TITLE)

    def export_history(self, entries: Iterable[HistoryEntry],
                       directory: Optional[str] = None) -> tuple[bool, str]:
        """Export every history entry as all-extracted-content.pdf."""
        pages = self.formatter.format_history(entries)
        return self.save_to_file(pages, DashboardConstants.HISTORY_EXPORT_FILENAME,
                                 directory, title=DashboardConstants.HISTORY_EXPORT_TITLE,
                                 body_size=HISTORY_BODY_SIZE)

    def validate_output_path(self, filename: str) -> tuple[bool, str]:
        """Check if the output path is valid and writable.

        Args:
            filename: The proposed output filename.

        Returns:
            Tuple of (is_valid, error_message).
        """
        directory = os.path.dirname(filename) or '.'
        if not os.path.isdir(directory):
            return False, f"Directory does not exist: {directory}"
        if not os.access(directory, os.W_OK):
            return False, f"Directory is not writable: {directory}"
        if os.path.exists(filename) and not os.access(filename, os.W_OK):
            return False, f"File exists and is not writable: {filename}"
        return True, ""
