"""
Text normalization utilities
"""

import re
from typing import Optional


class TextCleaner:
    """Clean free-text fields: whitespace, markup, bracketed references"""

    @staticmethod
    def clean(text: Optional[str]) -> str:
        """
        Collapse whitespace and strip markup.

        Removes [1]-style references, HTML tags and the common entities.
        """
        if not text or not isinstance(text, str):
            return ""

        cleaned = re.sub(r'\[[^\]]*\]', '', text)
        cleaned = re.sub(r'<[^>]*>', '', cleaned)
        cleaned = (
            cleaned.replace('&nbsp;', ' ')
            .replace('&amp;', '&')
            .replace('&lt;', '<')
            .replace('&gt;', '>')
        )
        return re.sub(r'\s+', ' ', cleaned).strip()

    @staticmethod
    def clean_abstract(text: Optional[str]) -> str:
        """Join the non-empty lines of a long text into a single paragraph"""
        if not text:
            return ""

        lines = text.replace('\r\n', '\n').replace('\r', '\n').split('\n')
        joined = ' '.join(line.strip() for line in lines if line.strip())
        return re.sub(r'\s+', ' ', joined).strip()

    @staticmethod
    def truncate(text: str, max_length: int = 200) -> str:
        if not text or len(text) <= max_length:
            return text
        return text[:max_length].strip() + "..."

    @staticmethod
    def sanitize(text: str) -> str:
        """Keep letters, digits, whitespace, dashes and underscores"""
        if not text:
            return ""
        return re.sub(r'[^a-zA-Z0-9\s\-_]', '', text).strip()

    @staticmethod
    def normalize_case(text: str) -> str:
        if not text:
            return ""
        return text.lower().strip()
