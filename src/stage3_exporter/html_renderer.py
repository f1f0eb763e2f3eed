"""
Wrap report markdown in a styled, standalone HTML document

Markdown is converted at export time with markdown-it-py (CommonMark plus
tables and strikethrough), so the document needs no scripts or network
access. The same document serves the HTML export and the PDF print.
"""

import logging
from typing import Optional

from jinja2 import Environment
from markdown_it import MarkdownIt

from . import config

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title | e }}</title>
  <style>
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      max-width: 900px;
      margin: 40px auto;
      padding: 20px;
      line-height: 1.6;
      color: #333;
      background: #fff;
    }
    h1 { color: #2563eb; border-bottom: 3px solid #2563eb; padding-bottom: 10px; margin-bottom: 30px; }
    h2 { color: #1e40af; margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; }
    h3 { color: #4b5563; margin-top: 30px; }
    table { border-collapse: collapse; width: 100%; margin: 20px 0; }
    th, td { border: 1px solid #e5e7eb; padding: 12px 16px; text-align: left; }
    th { background-color: #f3f4f6; font-weight: 600; }
    tr:nth-child(even) { background-color: #f9fafb; }
    code { background: #f3f4f6; padding: 2px 6px; border-radius: 3px; font-family: 'Courier New', monospace; }
    pre { background: #1f2937; color: #f9fafb; padding: 16px; border-radius: 6px; overflow-x: auto; }
    pre code { background: none; padding: 0; color: inherit; }
    blockquote { border-left: 4px solid #2563eb; padding-left: 20px; margin-left: 0; color: #4b5563; }
    @media print {
      body { margin: 0; padding: 20px; }
      h1, h2 { page-break-after: avoid; }
      table { page-break-inside: avoid; }
    }
  </style>
</head>
<body>
  <div id="content">
{{ body }}
  </div>
</body>
</html>
"""


def markdown_parser() -> MarkdownIt:
    """CommonMark parser with GFM tables and strikethrough; raw HTML passes through"""
    return MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])


class HTMLRenderer:
    """Render markdown into a complete HTML document"""

    def __init__(self, parser: Optional[MarkdownIt] = None):
        self.parser = parser or markdown_parser()
        self._template = Environment(autoescape=False).from_string(HTML_TEMPLATE)

    def convert(self, markdown: str, title: Optional[str] = None) -> str:
        logger.debug(f"Converting markdown to HTML ({len(markdown)} chars)")
        return self._template.render(
            title=title or config.DEFAULT_MDX_TITLE,
            body=self.parser.render(markdown),
        )
