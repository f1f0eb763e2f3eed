"""
Custom exceptions for the Bundle Loader
"""


class BundleError(Exception):
    """Base exception for dataset bundling errors"""
    pass


class DatasetNotFoundError(BundleError):
    """Raised when the dataset file does not exist"""
    pass


class UnsupportedFormatError(BundleError):
    """Raised when the dataset extension has no connector"""
    pass


class DatasetParseError(BundleError):
    """Raised when a dataset file cannot be parsed"""
    pass


class EmptyDatasetError(BundleError):
    """Raised when a dataset has zero records"""
    pass


class DataValidationError(BundleError):
    """Raised when records are missing required columns"""
    pass


class FormulaError(BundleError):
    """Base exception for computed field formulas"""
    pass


class InvalidFormulaSyntaxError(FormulaError):
    """Raised when a formula does not match NAME(arg, ...)"""
    pass


class UnknownFunctionError(FormulaError):
    """Raised when a formula names a function the engine does not know"""
    pass
