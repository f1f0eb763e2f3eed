"""
Configuration for Stage 3 Exporter
"""

# Supported export formats, in the order they are usually requested
EXPORT_FORMATS = ["md", "html", "pdf", "mdx", "json"]
DEFAULT_FILENAME = "report"
EXPORT_VERSION = "1.0.0"

# Front-matter defaults for MDX exports
DEFAULT_MDX_TITLE = "Report"
DEFAULT_MDX_AUTHOR = "Dataset Report Pipeline"

# PDF page setup (headless Chromium)
PDF_FORMAT = "A4"
PDF_MARGINS = {
    "top": "20mm",
    "right": "15mm",
    "bottom": "20mm",
    "left": "15mm",
}
PDF_RENDER_TIMEOUT_MS = 30000
