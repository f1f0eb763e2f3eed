"""
Stage 3: Exporter
Writes a rendered report as Markdown, HTML, PDF, MDX and JSON
"""

from .export_manager import ExportManager
from .html_renderer import HTMLRenderer
from .pdf_renderer import PDFRenderer
from .exceptions import ExportError, PDFRenderError

__all__ = [
    'ExportManager',
    'HTMLRenderer',
    'PDFRenderer',
    'ExportError',
    'PDFRenderError'
]
