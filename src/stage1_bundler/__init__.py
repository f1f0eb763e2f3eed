"""
Stage 1: Bundler
Loads a dataset (CSV, JSON, Excel), normalizes and validates it, and produces a
Bundle of records, statistics, schema metadata and computed fields
"""

from .bundle_loader import BundleLoader
from .connectors import CSVConnector, ExcelConnector, JSONConnector, load_records
from .formula_engine import FormulaEngine
from .models import Bundle, EnrichedBundle
from .stats_calculator import StatsCalculator
from .exceptions import (
    BundleError,
    DatasetNotFoundError,
    UnsupportedFormatError,
    DatasetParseError,
    EmptyDatasetError,
    DataValidationError,
    FormulaError,
    InvalidFormulaSyntaxError,
    UnknownFunctionError
)

__all__ = [
    'BundleLoader',
    'CSVConnector',
    'ExcelConnector',
    'JSONConnector',
    'load_records',
    'FormulaEngine',
    'Bundle',
    'EnrichedBundle',
    'StatsCalculator',
    'BundleError',
    'DatasetNotFoundError',
    'UnsupportedFormatError',
    'DatasetParseError',
    'EmptyDatasetError',
    'DataValidationError',
    'FormulaError',
    'InvalidFormulaSyntaxError',
    'UnknownFunctionError'
]
