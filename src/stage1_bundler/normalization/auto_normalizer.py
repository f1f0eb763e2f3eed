"""
Automatic field normalization routed by column name and value shape
"""

import logging
from typing import Any, Dict, List

from .. import config
from .date_normalizer import DateNormalizer
from .numeric_normalizer import NumericNormalizer
from .text_cleaner import TextCleaner

logger = logging.getLogger(__name__)


class AutoNormalizer:
    """
    Pick a normalizer per field from the lower-cased key.

    Precedence: date > numeric > percent > array > text > unchanged.
    Records are never mutated; new dicts are returned.
    """

    def normalize_record(self, record: Any) -> Any:
        """Normalize every field of one record"""
        if not isinstance(record, dict):
            return record

        return {key: self._normalize_field(key, value) for key, value in record.items()}

    def normalize_records(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Normalize a list of records"""
        normalized = [self.normalize_record(record) for record in records]
        logger.debug(f"Normalized {len(normalized)} records")
        return normalized

    def _normalize_field(self, key: str, value: Any) -> Any:
        key_lower = str(key).lower()

        if self._is_date_field(key_lower):
            return DateNormalizer.normalize(value)

        if self._is_numeric_field(key_lower):
            return NumericNormalizer.normalize(value)

        if self._is_percent_field(key_lower):
            return NumericNormalizer.normalize_percent(value)

        if self._is_array_field(key_lower, value):
            return self._normalize_array(value)

        if self._is_text_field(key_lower, value):
            if any(keyword in key_lower for keyword in config.ABSTRACT_KEYWORDS):
                return TextCleaner.clean_abstract(value)
            return TextCleaner.clean(value)

        return value

    @staticmethod
    def _is_date_field(key: str) -> bool:
        return any(keyword in key for keyword in config.DATE_KEYWORDS)

    @staticmethod
    def _is_numeric_field(key: str) -> bool:
        return any(keyword in key for keyword in config.NUMERIC_KEYWORDS)

    @staticmethod
    def _is_percent_field(key: str) -> bool:
        return (
            any(keyword in key for keyword in config.PERCENT_KEYWORDS)
            or key.endswith(config.PERCENT_SUFFIX)
        )

    @staticmethod
    def _is_array_field(key: str, value: Any) -> bool:
        if isinstance(value, list):
            return True
        if any(keyword in key for keyword in config.ARRAY_KEYWORDS):
            return True
        return isinstance(value, str) and any(d in value for d in config.ARRAY_DELIMITERS)

    @staticmethod
    def _is_text_field(key: str, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return (
            any(keyword in key for keyword in config.TEXT_KEYWORDS)
            or len(value) > config.LONG_TEXT_THRESHOLD
        )

    @staticmethod
    def _normalize_array(value: Any) -> List[str]:
        if isinstance(value, list):
            items = [str(item).strip() for item in value if item is not None]
            return [item for item in items if item]

        if isinstance(value, str):
            # First delimiter present wins, in priority order
            delimiter = next((d for d in config.ARRAY_DELIMITERS if d in value), ',')
            return [part.strip() for part in value.split(delimiter) if part.strip()]

        return []
