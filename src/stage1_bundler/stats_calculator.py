"""
Column statistics, value distributions and numeric/date ranges for a dataset
"""

import json
import logging
import math
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from . import config
from .normalization import DateNormalizer, to_number
from .validation import is_date_like

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _hashable(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True, default=str)
    return value


def _percent(part: int, whole: int) -> str:
    return f"{(part / whole) * 100:.2f}%"


def _parse_date(value: Any) -> Optional[datetime]:
    iso = DateNormalizer.normalize(value)
    if iso is None:
        return None
    return datetime.strptime(iso, '%Y-%m-%dT%H:%M:%S.%fZ')


class StatsCalculator:
    """Compute descriptive statistics over a list of records"""

    def calculate_stats(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Calculate statistics for a dataset.

        Args:
            records: Dataset records; columns are taken from the first record

        Returns:
            {record_count, columns, distributions, ranges}, or {record_count: 0}
            for an empty dataset (a valid result, not an error)
        """
        if not records:
            return {"record_count": 0}

        keys = list(records[0].keys()) if isinstance(records[0], dict) else []
        column_values = {
            key: [record.get(key) if isinstance(record, dict) else None for record in records]
            for key in keys
        }

        stats = {
            "record_count": len(records),
            "columns": self._column_stats(column_values),
            "distributions": self._distributions(column_values),
            "ranges": self._ranges(column_values),
        }
        logger.debug(f"Calculated stats for {len(keys)} columns over {len(records)} records")
        return stats

    def _column_stats(self, column_values: Dict[str, List[Any]]) -> Dict[str, Any]:
        columns = {}
        for key, values in column_values.items():
            present = [value for value in values if not _is_empty(value)]
            null_count = len(values) - len(present)
            columns[key] = {
                "null_count": null_count,
                "null_percentage": _percent(null_count, len(values)),
                "unique_count": len({_hashable(value) for value in present}),
                "fill_rate": _percent(len(present), len(values)),
                "type": self.infer_column_type(key, present),
            }
        return columns

    def _distributions(self, column_values: Dict[str, List[Any]]) -> Dict[str, List[Dict[str, Any]]]:
        distributions = {}
        for key, values in column_values.items():
            present = [value for value in values if not _is_empty(value)]
            if not present:
                distributions[key] = []
                continue

            counts = Counter(_hashable(value) for value in present)
            distributions[key] = [
                {
                    "value": str(value),
                    "count": count,
                    "percentage": _percent(count, len(present)),
                }
                for value, count in counts.most_common(config.TOP_DISTRIBUTION_VALUES)
            ]
        return distributions

    def _ranges(self, column_values: Dict[str, List[Any]]) -> Dict[str, Any]:
        ranges = {}
        for key, values in column_values.items():
            present = [value for value in values if not _is_empty(value)]
            if not present:
                continue

            numbers = [n for n in (to_number(value) for value in present) if n is not None]
            if numbers and len(numbers) >= len(present) * config.NUMERIC_RANGE_THRESHOLD:
                series = pd.Series(numbers, dtype=float)
                ranges[key] = {
                    "type": "numeric",
                    "min": float(series.min()),
                    "max": float(series.max()),
                    "mean": float(series.mean()),
                    "median": float(series.median()),
                    "std_dev": float(series.std(ddof=0)),
                }

            if self._has_date_hint(key) or self.infer_column_type(key, present) == "date":
                dates = [d for d in (_parse_date(value) for value in present) if d is not None]
                if dates:
                    earliest, latest = min(dates), max(dates)
                    span_seconds = (latest - earliest).total_seconds()
                    ranges[f"{key}_range"] = {
                        "type": "date",
                        "earliest": DateNormalizer.normalize(earliest),
                        "latest": DateNormalizer.normalize(latest),
                        "span_days": math.ceil(span_seconds / 86400),
                    }
        return ranges

    @staticmethod
    def _has_date_hint(key: str) -> bool:
        key_lower = str(key).lower()
        return "date" in key_lower or "time" in key_lower

    def infer_column_type(self, key: str, values: List[Any]) -> str:
        """
        Classify a column from its non-empty values.

        numeric > boolean > date > array > string; "unknown" when there are no values.
        """
        if not values:
            return "unknown"

        if all(to_number(value) is not None for value in values):
            return "numeric"

        if all(isinstance(value, bool) or value in ("0", "1") for value in values):
            return "boolean"

        if self._has_date_hint(key):
            parsed = sum(1 for value in values if _parse_date(value) is not None)
        else:
            parsed = sum(1 for value in values if is_date_like(value))
        if parsed >= len(values) * config.DATE_MATCH_THRESHOLD:
            return "date"

        if any(isinstance(value, list) or (isinstance(value, str) and "," in value) for value in values):
            return "array"

        return "string"
