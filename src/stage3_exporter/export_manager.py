"""
Export a rendered report to md, html, pdf, mdx and json files
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .exceptions import ExportError
from .html_renderer import HTMLRenderer
from .pdf_renderer import PDFRenderer

logger = logging.getLogger(__name__)


class ExportManager:
    """
    Write one report to several formats.

    Each format is attempted once; a failing format is logged and the others
    still run.
    """

    def __init__(
        self,
        html_renderer: Optional[HTMLRenderer] = None,
        pdf_renderer: Optional[PDFRenderer] = None
    ):
        self.html_renderer = html_renderer or HTMLRenderer()
        self.pdf_renderer = pdf_renderer or PDFRenderer()
        self._exporters = {
            "md": self.export_markdown,
            "html": self.export_html,
            "pdf": self.export_pdf,
            "mdx": self.export_mdx,
            "json": self.export_json,
        }

    @staticmethod
    def validate_formats(formats: List[str]) -> List[str]:
        valid = []
        for fmt in formats:
            if fmt in config.EXPORT_FORMATS:
                valid.append(fmt)
            else:
                logger.warning(f"⚠️ Invalid export format: {fmt}")
        return valid

    def export_all(
        self,
        content: str,
        formats: List[str],
        output_dir: str,
        filename: str = config.DEFAULT_FILENAME,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, str]:
        """
        Export content to every valid format.

        Args:
            content: Rendered report markdown
            formats: Requested formats; unknown ones are skipped with a warning
            output_dir: Created if missing
            filename: Base name without extension
            metadata: Title/author/version for mdx front-matter and json export

        Returns:
            {format: written path} for the formats that succeeded

        Raises:
            ExportError: None of the requested formats is valid
        """
        valid_formats = self.validate_formats(formats)
        if not valid_formats:
            raise ExportError("No valid export formats specified")

        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        outputs: Dict[str, str] = {}
        for fmt in valid_formats:
            output_path = out_dir / f"{filename}.{fmt}"
            try:
                self._exporters[fmt](content, str(output_path), metadata or {})
                outputs[fmt] = str(output_path)
                logger.info(f"✅ Exported {fmt}: {output_path}")
            except Exception as e:
                logger.error(f"❌ Failed to export {fmt}: {e}")

        return outputs

    def export_markdown(self, content: str, output_path: str, metadata: Dict[str, Any]) -> None:
        Path(output_path).write_text(content, encoding="utf-8")

    def export_html(self, content: str, output_path: str, metadata: Dict[str, Any]) -> None:
        html = self.html_renderer.convert(content, title=metadata.get("title"))
        Path(output_path).write_text(html, encoding="utf-8")

    def export_pdf(self, content: str, output_path: str, metadata: Dict[str, Any]) -> None:
        html = self.html_renderer.convert(content, title=metadata.get("title"))
        self.pdf_renderer.convert(html, output_path)

    def export_mdx(self, content: str, output_path: str, metadata: Dict[str, Any]) -> None:
        Path(output_path).write_text(self.to_mdx(content, metadata), encoding="utf-8")

    def export_json(self, content: str, output_path: str, metadata: Dict[str, Any]) -> None:
        data = {
            "content": content,
            "metadata": metadata,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "version": config.EXPORT_VERSION,
        }
        Path(output_path).write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")

    @staticmethod
    def to_mdx(content: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        """Prefix front-matter (title, date, author, plus metadata) unless already present"""
        if content.startswith("---\n"):
            return content

        front_matter = {
            "title": config.DEFAULT_MDX_TITLE,
            "date": datetime.now(timezone.utc).strftime("%Y-%m-%d"),
            "author": config.DEFAULT_MDX_AUTHOR,
        }
        front_matter.update({k: v for k, v in (metadata or {}).items() if v is not None})

        lines = [f"{key}: {json.dumps(value, default=str)}" for key, value in front_matter.items()]
        return "---\n" + "\n".join(lines) + "\n---\n\n" + content
