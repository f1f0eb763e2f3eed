"""
Dataset connectors: read CSV, JSON and Excel files into lists of records
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from . import config
from .exceptions import DatasetNotFoundError, DatasetParseError, UnsupportedFormatError

logger = logging.getLogger(__name__)


def _to_native(value: Any) -> Any:
    """Convert pandas/numpy scalars to plain Python values"""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, 'item') and not isinstance(value, (list, dict, str)):
        return value.item()
    return value


def _frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame -> records with NaN mapped to None and strings trimmed"""
    df = df.astype(object).where(pd.notna(df), None)
    records = []
    for row in df.to_dict(orient="records"):
        record = {}
        for key, value in row.items():
            value = _to_native(value)
            if isinstance(value, str):
                value = value.strip()
            record[str(key).strip()] = value
        records.append(record)
    return records


class DatasetConnector:
    """Base class for connectors"""

    extensions = set()

    def __init__(self, file_path: str):
        """
        Initialize connector

        Args:
            file_path: Path to the dataset file

        Raises:
            DatasetNotFoundError: If the file does not exist
            UnsupportedFormatError: If the extension is not handled by this connector
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise DatasetNotFoundError(f"Dataset not found: {file_path}")

        if self.file_path.suffix.lower() not in self.extensions:
            raise UnsupportedFormatError(
                f"Unsupported file format: {self.file_path.suffix}. "
                f"{type(self).__name__} expects {', '.join(sorted(self.extensions))}"
            )

    def load(self) -> List[Dict[str, Any]]:
        """Return the dataset as records - implemented by subclasses"""
        raise NotImplementedError


class CSVConnector(DatasetConnector):
    """Read delimited text with a header row"""

    extensions = {".csv"}

    def __init__(self, file_path: str, delimiter: str = ",", skip_empty_lines: bool = True):
        super().__init__(file_path)
        self.delimiter = delimiter
        self.skip_empty_lines = skip_empty_lines

    def load(self) -> List[Dict[str, Any]]:
        """
        Parse the CSV: header row as keys, values trimmed, numbers cast.

        Returns:
            One record per data row; [] for an empty or header-only file

        Raises:
            DatasetParseError: If the file is malformed
        """
        logger.info(f"Loading CSV: {self.file_path.name}")

        try:
            df = pd.read_csv(
                self.file_path,
                sep=self.delimiter,
                skip_blank_lines=self.skip_empty_lines,
                skipinitialspace=True,
            )
        except pd.errors.EmptyDataError:
            logger.warning(f"⚠️ CSV file is empty: {self.file_path.name}")
            return []
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise DatasetParseError(f"Failed to parse CSV {self.file_path.name}: {e}")

        records = _frame_to_records(df)
        logger.info(f"✅ Loaded {len(records)} records from {self.file_path.name}")
        return records


class JSONConnector(DatasetConnector):
    """Read a JSON array, or the records/data array of a JSON object"""

    extensions = {".json"}

    def load(self) -> List[Dict[str, Any]]:
        logger.info(f"Loading JSON: {self.file_path.name}")

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetParseError(f"Failed to parse JSON {self.file_path.name}: {e}")

        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            records = data.get("records") or data.get("data") or []
        else:
            records = []

        if not isinstance(records, list):
            raise DatasetParseError(
                f"Expected an array of records in {self.file_path.name}, got {type(records).__name__}"
            )
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise DatasetParseError(
                    f"Record {index} in {self.file_path.name} is a {type(record).__name__}, not an object"
                )

        logger.info(f"✅ Loaded {len(records)} records from {self.file_path.name}")
        return records


class ExcelConnector(DatasetConnector):
    """Read one worksheet of an Excel workbook"""

    extensions = {".xlsx", ".xlsm"}

    def __init__(self, file_path: str, sheet_name: Optional[str] = None):
        super().__init__(file_path)
        self.sheet_name = sheet_name

    def load(self) -> List[Dict[str, Any]]:
        sheet = self.sheet_name if self.sheet_name is not None else 0
        logger.info(f"Loading Excel: {self.file_path.name} (sheet: {sheet})")

        try:
            df = pd.read_excel(self.file_path, sheet_name=sheet, engine="openpyxl")
        except (ValueError, KeyError) as e:
            raise DatasetParseError(f"Failed to read Excel {self.file_path.name}: {e}")

        df = df.dropna(how="all")
        records = _frame_to_records(df)
        logger.info(f"✅ Loaded {len(records)} records from {self.file_path.name}")
        return records


CONNECTORS = {
    ".csv": CSVConnector,
    ".json": JSONConnector,
    ".xlsx": ExcelConnector,
    ".xlsm": ExcelConnector,
}


def load_records(file_path: str, **options) -> List[Dict[str, Any]]:
    """
    Load a dataset with the connector registered for its extension.

    Args:
        file_path: Dataset path
        **options: Connector-specific options (delimiter, sheet_name, ...)

    Raises:
        DatasetNotFoundError, UnsupportedFormatError, DatasetParseError
    """
    path = Path(file_path)
    if not path.exists():
        raise DatasetNotFoundError(f"Dataset not found: {file_path}")

    suffix = path.suffix.lower()
    connector_cls = CONNECTORS.get(suffix)
    if connector_cls is None:
        raise UnsupportedFormatError(
            f"Unsupported file format: {suffix}. "
            f"Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
        )

    return connector_cls(str(path), **options).load()
