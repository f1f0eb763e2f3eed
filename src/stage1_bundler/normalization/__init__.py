"""
Field normalizers: numbers, dates, text and key-routed auto normalization
"""

from .auto_normalizer import AutoNormalizer
from .date_normalizer import DateNormalizer
from .numeric_normalizer import NumericNormalizer, parse_float, to_number
from .text_cleaner import TextCleaner

__all__ = [
    'AutoNormalizer',
    'DateNormalizer',
    'NumericNormalizer',
    'TextCleaner',
    'parse_float',
    'to_number',
]
