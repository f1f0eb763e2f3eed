"""
Custom exceptions for Stage 3 Exporter
"""


class ExportError(Exception):
    """Raised when a report cannot be exported"""
    pass


class PDFRenderError(ExportError):
    """Raised when headless Chromium fails to print the report"""
    pass
