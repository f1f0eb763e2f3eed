"""
Evaluator for computed-field formulas such as SUM(revenue) or TOP(product, revenue, 1)
"""

import logging
import math
import re
from typing import Any, Dict, List, Optional

from .exceptions import InvalidFormulaSyntaxError, UnknownFunctionError
from .normalization import DateNormalizer, parse_float

logger = logging.getLogger(__name__)

# NAME(args) with the whole remainder captured so nested calls survive
FORMULA_PATTERN = re.compile(r'^([A-Z_]+)\((.+)\)$')

FUNCTIONS = {"SUM", "AVG", "COUNT", "MIN", "MAX", "TOP", "PERCENT_CHANGE", "GROUP_BY"}
AGGREGATIONS = {"SUM", "AVG", "COUNT"}


def split_arguments(args: str) -> List[str]:
    """Split on commas that are not inside parentheses"""
    parts = []
    depth = 0
    current = []
    for char in args:
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        if char == ',' and depth == 0:
            parts.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append(''.join(current).strip())
    return parts


class FormulaEngine:
    """
    Evaluate NAME(arg, ...) formulas over a list of records.

    Arguments are bare column names. GROUP_BY takes an aggregation
    expression (SUM/AVG/COUNT of a column) as its second argument.
    """

    def evaluate(self, formula: str, data: List[Dict[str, Any]]) -> Any:
        """
        Evaluate a formula.

        Args:
            formula: Formula text, e.g. "AVG(revenue)"
            data: Records to aggregate

        Returns:
            A number, a group key, or a mapping of group key to aggregate

        Raises:
            InvalidFormulaSyntaxError: If the formula does not match NAME(arg, ...)
            UnknownFunctionError: If NAME is not a supported function
        """
        logger.debug(f"Evaluating formula: {formula}")

        match = FORMULA_PATTERN.match(formula.strip())
        if not match:
            raise InvalidFormulaSyntaxError(f"Invalid formula syntax: {formula}")

        func_name, args_text = match.groups()
        args = split_arguments(args_text)
        if not any(args):
            raise InvalidFormulaSyntaxError(f"Invalid formula syntax: {formula}")

        if func_name not in FUNCTIONS:
            raise UnknownFunctionError(f"Unknown formula function: {func_name}")

        if func_name == "SUM":
            return self.sum(data, args[0])
        if func_name == "AVG":
            return self.avg(data, args[0])
        if func_name == "COUNT":
            return len(data)
        if func_name == "MIN":
            return self.min(data, args[0])
        if func_name == "MAX":
            return self.max(data, args[0])
        if func_name == "TOP":
            n = int(args[2]) if len(args) > 2 and args[2].isdigit() else 1
            return self.top(data, args[0], self._arg(args, 1, formula), n)
        if func_name == "PERCENT_CHANGE":
            return self.percent_change(data, args[0], self._arg(args, 1, formula))
        return self.group_by(data, args[0], self._arg(args, 1, formula))

    @staticmethod
    def _arg(args: List[str], index: int, formula: str) -> str:
        if len(args) <= index or not args[index]:
            raise InvalidFormulaSyntaxError(f"Invalid formula syntax: {formula} (missing argument {index + 1})")
        return args[index]

    @staticmethod
    def _values(data: List[Dict[str, Any]], column: str) -> List[Optional[float]]:
        return [parse_float(row.get(column)) if isinstance(row, dict) else None for row in data]

    def sum(self, data: List[Dict[str, Any]], column: str) -> float:
        """Sum of parsed values; anything non-numeric counts as 0"""
        return sum(value or 0 for value in self._values(data, column))

    def avg(self, data: List[Dict[str, Any]], column: str) -> float:
        """SUM divided by row count, so non-numeric rows pull the average down"""
        if not data:
            return 0
        return self.sum(data, column) / len(data)

    def min(self, data: List[Dict[str, Any]], column: str) -> Optional[float]:
        values = [v for v in self._values(data, column) if v is not None and not math.isnan(v)]
        return min(values) if values else None

    def max(self, data: List[Dict[str, Any]], column: str) -> Optional[float]:
        values = [v for v in self._values(data, column) if v is not None and not math.isnan(v)]
        return max(values) if values else None

    def top(self, data: List[Dict[str, Any]], group_column: str, value_column: str, n: int = 1) -> str:
        """
        Group key with the highest summed value.

        Only the first key is returned; n is accepted for formula compatibility.
        """
        grouped = self.group_by(data, group_column, f"SUM({value_column})")
        ranked = sorted(grouped.items(), key=lambda item: item[1], reverse=True)
        return ranked[0][0] if ranked else ""

    def percent_change(self, data: List[Dict[str, Any]], value_column: str, period_column: str) -> float:
        """
        Compare the summed value of the later half of the data with the earlier half.

        Rows are ordered by the period column; unparseable periods sort last.
        """
        def period_key(row: Dict[str, Any]):
            iso = DateNormalizer.normalize(row.get(period_column)) if isinstance(row, dict) else None
            return (iso is None, iso or "")

        ordered = sorted(data, key=period_key)
        mid = len(ordered) // 2
        first = self.sum(ordered[:mid], value_column)
        second = self.sum(ordered[mid:], value_column)

        if first == 0:
            return 0
        return ((second - first) / first) * 100

    def group_by(self, data: List[Dict[str, Any]], group_column: str, aggregation: str) -> Dict[str, Any]:
        """
        Aggregate per group.

        Args:
            group_column: Column whose values define the groups
            aggregation: "SUM(col)", "AVG(col)" or "COUNT(col)"
        """
        match = FORMULA_PATTERN.match(aggregation.strip())
        if not match or ',' in match.group(2):
            raise InvalidFormulaSyntaxError(f"Invalid aggregation: {aggregation}")

        func_name, column = match.group(1), match.group(2).strip()
        if func_name not in AGGREGATIONS:
            raise UnknownFunctionError(f"Unknown aggregation: {func_name}")

        groups: Dict[str, List[Dict[str, Any]]] = {}
        for row in data:
            key = str(row.get(group_column)) if isinstance(row, dict) else "None"
            groups.setdefault(key, []).append(row)

        result = {}
        for key, rows in groups.items():
            if func_name == "SUM":
                result[key] = self.sum(rows, column)
            elif func_name == "AVG":
                result[key] = self.avg(rows, column)
            else:
                result[key] = len(rows)
        return result
