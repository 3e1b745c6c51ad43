"""PDF generation infrastructure."""

from lumix.infrastructure.pdf.renderer import (
    CONTINUATION_Y,
    PAGE_BREAK_Y,
    ROW_HEIGHT,
    Fpdf2DocumentRenderer,
    IDocumentRenderer,
    layout_rows,
)

_renderer: Fpdf2DocumentRenderer | None = None


def get_document_renderer() -> Fpdf2DocumentRenderer:
    """Get singleton document renderer instance."""
    global _renderer
    if _renderer is None:
        _renderer = Fpdf2DocumentRenderer()
    return _renderer


__all__ = [
    "CONTINUATION_Y",
    "PAGE_BREAK_Y",
    "ROW_HEIGHT",
    "Fpdf2DocumentRenderer",
    "IDocumentRenderer",
    "get_document_renderer",
    "layout_rows",
]
