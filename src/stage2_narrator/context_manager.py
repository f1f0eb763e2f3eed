"""
Context window management: token estimates, truncation and chunking
"""

import logging
import math
import re
from typing import List

from . import config

logger = logging.getLogger(__name__)


class ContextManager:
    """
    Keep prompt text inside a model's context window.

    Token counts are estimated at a fixed 4 characters per token; no
    tokenizer is involved, so results are deterministic.
    """

    def __init__(self, max_tokens: int = config.DEFAULT_CONTEXT_WINDOW):
        self.max_tokens = max_tokens
        self.tokens_per_char = config.TOKENS_PER_CHAR

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(len(text) * self.tokens_per_char)

    def fits_in_context(self, text: str, reserve_for_output: int = config.DEFAULT_RESERVE) -> bool:
        return self.estimate_tokens(text) <= self.max_tokens - reserve_for_output

    def max_chars(self, reserve_for_output: int = config.DEFAULT_RESERVE) -> int:
        """Character budget left after reserving tokens for the output (at least 1)"""
        return max(1, math.floor((self.max_tokens - reserve_for_output) / self.tokens_per_char))

    def truncate(self, text: str, reserve_for_output: int = config.DEFAULT_RESERVE) -> str:
        """Cut text at the character budget and append a truncation marker"""
        max_chars = self.max_chars(reserve_for_output)
        if len(text) <= max_chars:
            return text

        logger.debug(f"Truncating text from {len(text)} to {max_chars} characters")
        return text[:max_chars] + config.TRUNCATION_MARKER

    def chunk_text(
        self,
        text: str,
        reserve_for_output: int = config.DEFAULT_RESERVE,
        overlap: int = config.CHUNK_OVERLAP
    ) -> List[str]:
        """
        Split text into overlapping windows that each fit the budget.

        Each window after the first starts `overlap` characters before the
        previous window's end. The start always advances, so the loop ends.
        """
        max_chars = self.max_chars(reserve_for_output)
        if len(text) <= max_chars:
            return [text]

        chunks = []
        start = 0
        while start < len(text):
            end = min(start + max_chars, len(text))
            chunks.append(text[start:end])

            next_start = end - overlap
            if next_start + overlap >= len(text):
                break
            # Overlap as large as the window would never move forward
            start = next_start if next_start > start else start + 1

        logger.debug(f"Split {len(text)} characters into {len(chunks)} chunks")
        return chunks

    def chunk_by_paragraphs(self, text: str, reserve_for_output: int = config.DEFAULT_RESERVE) -> List[str]:
        """
        Greedily pack blank-line separated paragraphs into chunks.

        A paragraph that alone exceeds the budget is split with chunk_text.
        """
        max_chars = self.max_chars(reserve_for_output)
        paragraphs = re.split(r'\n\n+', text)

        chunks: List[str] = []
        current = ""

        for paragraph in paragraphs:
            if len(current) + len(paragraph) + 2 > max_chars:
                if current:
                    chunks.append(current.strip())
                    current = ""

                if len(paragraph) > max_chars:
                    chunks.extend(self.chunk_text(paragraph, reserve_for_output, config.PARAGRAPH_CHUNK_OVERLAP))
                else:
                    current = paragraph
            else:
                current += ("\n\n" if current else "") + paragraph

        if current:
            chunks.append(current.strip())

        return chunks

    def summarize_for_context(self, text: str, target_length: int) -> str:
        """Keep the head and tail of a long text (40% each)"""
        if len(text) <= target_length:
            return text

        head_size = math.floor(target_length * 0.4)
        tail_size = math.floor(target_length * 0.4)
        tail = text[len(text) - tail_size:] if tail_size else ""
        return text[:head_size] + config.OMISSION_MARKER + tail

    def get_context_usage(self, text: str) -> float:
        """Estimated share of the context window used, in percent"""
        return (self.estimate_tokens(text) / self.max_tokens) * 100
