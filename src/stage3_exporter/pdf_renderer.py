"""
Print an HTML document to PDF with headless Chromium (Playwright)
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from . import config
from .exceptions import PDFRenderError

logger = logging.getLogger(__name__)


class PDFRenderer:
    """A4 PDF output with background graphics and fixed margins"""

    def __init__(self, headless: bool = True, timeout_ms: int = config.PDF_RENDER_TIMEOUT_MS):
        self.headless = headless
        self.timeout_ms = timeout_ms

    async def convert_async(self, html: str, output_path: str) -> str:
        logger.debug(f"Converting HTML to PDF: {output_path}")
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless)
            try:
                page = await browser.new_page()
                await page.set_content(html, wait_until="load", timeout=self.timeout_ms)
                await page.pdf(
                    path=output_path,
                    format=config.PDF_FORMAT,
                    print_background=True,
                    margin=config.PDF_MARGINS,
                )
            finally:
                await browser.close()
        logger.debug("PDF created successfully")
        return output_path

    def convert(self, html: str, output_path: str) -> str:
        """
        Blocking wrapper around convert_async.

        Raises:
            PDFRenderError: Chromium could not be launched or printing failed
        """
        try:
            return asyncio.run(self.convert_async(html, output_path))
        except PlaywrightError as e:
            raise PDFRenderError(f"PDF rendering failed: {e}") from e
