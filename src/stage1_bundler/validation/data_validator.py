"""
Lightweight dataset checks: emptiness, required columns, first-record types
"""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import DataValidationError, EmptyDatasetError
from .schema_inferrer import is_date_like

logger = logging.getLogger(__name__)


class DataValidator:
    """Checks run before a dataset is used for a report"""

    @staticmethod
    def validate_records(records: List[Dict[str, Any]], required_columns: Optional[List[str]] = None) -> None:
        """
        Raise if the dataset is empty or lacks required columns.

        Columns are taken from the first record.
        """
        if not records:
            raise EmptyDatasetError("Dataset is empty")

        columns = list(records[0].keys())
        logger.debug(f"Dataset columns: {columns}")

        if required_columns:
            missing = [col for col in required_columns if col not in columns]
            if missing:
                raise DataValidationError(
                    f"Missing required columns: {', '.join(missing)}\n"
                    f"Available: {', '.join(columns)}"
                )

    @staticmethod
    def infer_column_types(records: List[Dict[str, Any]]) -> Dict[str, str]:
        """Type of each column judged from the first record only"""
        if not records:
            return {}

        types = {}
        for key, value in records[0].items():
            if value is None:
                types[key] = "unknown"
            elif isinstance(value, bool):
                types[key] = "boolean"
            elif isinstance(value, (int, float)):
                types[key] = "number"
            elif is_date_like(str(value)):
                types[key] = "date"
            else:
                types[key] = "string"
        return types
