"""
Numeric value normalization: currency, thousands separators, percentages
"""

import math
import re
from typing import Any, Optional

# Leading number the way parseFloat reads it: sign, digits, optional fraction and exponent
_LEADING_NUMBER = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_CURRENCY_SYMBOLS = re.compile(r'[$€£¥₹]')


def parse_float(value: Any) -> Optional[float]:
    """
    Read the leading number from a value, ignoring trailing garbage.

    "12abc" -> 12.0, "abc" -> None, 7 -> 7.0. NaN and booleans are not numbers.

    Args:
        value: Any scalar

    Returns:
        Parsed float, or None when nothing numeric leads the value
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value).strip()
    if text.lstrip('+-').startswith('Infinity'):
        return float('-inf') if text.startswith('-') else float('inf')

    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(1))


def to_number(value: Any) -> Optional[float]:
    """
    Strict coercion: the whole value must be a finite number.

    Empty strings and None are not numbers here, unlike Number("") in some languages.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class NumericNormalizer:
    """Normalize numeric values written with currency, commas or percent signs"""

    @staticmethod
    def normalize(value: Any) -> Optional[float]:
        """
        Strip currency symbols, separators and a trailing percent, then parse.

        Returns:
            The number, or None for empty or unparseable input
        """
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, (int, float)):
            return None if math.isnan(value) else value

        if isinstance(value, str):
            cleaned = _CURRENCY_SYMBOLS.sub("", value)
            cleaned = cleaned.replace(",", "")
            cleaned = re.sub(r'\s', "", cleaned)
            cleaned = re.sub(r'%$', "", cleaned)
            return parse_float(cleaned)

        return to_number(value)

    @staticmethod
    def normalize_percent(value: Any) -> Optional[float]:
        """Convert "45%" to 0.45; values without a percent sign are parsed as-is"""
        if not value:
            return None

        text = str(value).strip()
        if text.endswith("%"):
            number = NumericNormalizer.normalize(text[:-1])
            return number / 100 if number is not None else None

        return NumericNormalizer.normalize(value)

    @staticmethod
    def round(value: Optional[float], decimals: int = 2) -> Optional[float]:
        if value is None:
            return None
        return round(value, decimals)

    @staticmethod
    def format(value: Optional[float], decimals: int = 3) -> str:
        """Format with thousands separators, e.g. 1234.5 -> "1,234.5" """
        if value is None:
            return "N/A"
        text = f"{value:,.{decimals}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @staticmethod
    def format_currency(value: Optional[float], currency: str = "USD") -> str:
        if value is None:
            return "N/A"
        symbols = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "INR": "₹"}
        symbol = symbols.get(currency.upper(), f"{currency.upper()} ")
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):,.2f}"
