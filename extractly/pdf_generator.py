"""Paint laid-out export pages into a PDF.

The generator is the document-writer end of the export path: it takes
`LayoutPage` objects, whose line positions are measured in millimetres
from the top of the page, and draws each line with reportlab at the
corresponding point coordinates. It makes no layout decisions itself.
"""

import io
from typing import Dict, List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .layout import LayoutPage, LineStyle


class FontLoadError(Exception):
    """Exception raised when a font family is not available."""


# Built-in PDF font families: (regular, bold)
FONT_FAMILIES: Dict[str, Tuple[str, str]] = {
    "Helvetica": ("Helvetica", "Helvetica-Bold"),
    "Times": ("Times-Roman", "Times-Bold"),
    "Courier": ("Courier", "Courier-Bold"),
}

# Point size and weight per line style
STYLE_FONTS: Dict[LineStyle, Tuple[int, bool]] = {
    LineStyle.TITLE: (18, False),
    LineStyle.HEADING: (14, False),
    LineStyle.LABEL: (12, True),
    LineStyle.BODY: (11, False),
}

# Body text of the history document is set one point larger
HISTORY_BODY_SIZE = 12


class PDFGenerator:
    """Generate PDF files from export pages."""

    def __init__(self, font_family: str = "Helvetica"):
        """Initialize PDF generator.

        Args:
            font_family: One of the built-in families in FONT_FAMILIES.

        Raises:
            FontLoadError: If the family is unknown.
        """
        if font_family not in FONT_FAMILIES:
            raise FontLoadError(f"Unknown font: {font_family}")
        self.font_name, self.font_name_bold = FONT_FAMILIES[font_family]
        self.page_width, self.page_height = A4

        self.unprintable_chars: set[str] = set()
        self.has_unprintable = False

    def _font_for(self, style: LineStyle,
                  body_size: Optional[int] = None) -> Tuple[str, int]:
        size, bold = STYLE_FONTS[style]
        if style is LineStyle.BODY and body_size is not None:
            size = body_size
        return (self.font_name_bold if bold else self.font_name), size

    def to_pdf_point(self, x_mm: float, y_mm: float) -> Tuple[float, float]:
        """Convert top-down millimetres to reportlab's bottom-up points."""
        return x_mm * mm, self.page_height - y_mm * mm

    def generate_pdf(self, pages: List[LayoutPage], title: Optional[str] = None,
                     body_size: Optional[int] = None) -> bytes:
        """Generate a PDF document from laid-out pages.

        Args:
            pages: Pages from the layout engine, in order.
            title: Optional document title for the PDF metadata.
            body_size: Point size of body lines; STYLE_FONTS if None.

        Returns:
            Complete PDF document as bytes.
        """
        self.unprintable_chars = set()
        self.has_unprintable = False
        pdf_buffer = io.BytesIO()

        c = canvas.Canvas(pdf_buffer, pagesize=A4)
        if title:
            c.setTitle(title)

        for page in pages:
            for line in page.lines:
                font_name, font_size = self._font_for(line.style, body_size)
                c.setFont(font_name, font_size)
                x, y = self.to_pdf_point(line.x, line.y)
                c.drawString(x, y, self._make_pdf_safe(line.text))
            c.showPage()

        c.save()
        return pdf_buffer.getvalue()

    def _make_pdf_safe(self, text: str) -> str:
        """Replace characters the standard fonts cannot encode.

        The built-in fonts use Windows-1252; anything outside it becomes
        '?' and is remembered for the warning message.
        """
        result = []
        for char in text:
            try:
                char.encode('cp1252')
                result.append(char)
            except UnicodeEncodeError:
                self.unprintable_chars.add(char)
                self.has_unprintable = True
                result.append('?')
        return ''.join(result)

    def get_unprintable_warning(self) -> Optional[str]:
        """Describe the characters replaced during the last generation, if any."""
        if not self.has_unprintable:
            return None

        char_list = sorted(self.unprintable_chars)
        shown = [f"'{char}' (U+{ord(char):04X})" if ord(char) >= 32 else f"U+{ord(char):04X}"
                 for char in char_list[:10]]
        if len(char_list) > 10:
            shown.append(f"... and {len(char_list) - 10} more")

        return (f"Warning: {len(char_list)} unique unprintable character(s) "
                f"were replaced with '?' in the PDF output: {', '.join(shown)}")
