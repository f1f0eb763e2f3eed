"""
Jinja2 rendering of prompt files and report templates, with report-friendly filters
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment

from src.stage1_bundler.normalization import DateNormalizer

from .exceptions import PromptNotFoundError, TemplateNotFoundError

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def round_filter(value: Any, decimals: int = 2) -> Any:
    if not _is_number(value):
        return value
    return round(value, decimals)


def format_number(value: Any) -> Any:
    """1234567.891 -> "1,234,567.89" (at most two decimals, no trailing zeros)"""
    if not _is_number(value):
        return value
    text = f"{value:,.2f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def date_filter(value: Any, fmt: str = "short") -> Any:
    """short -> 1/15/2025, long -> January 15, 2025"""
    iso = DateNormalizer.normalize(value)
    if iso is None:
        return value
    parsed = datetime.strptime(iso, '%Y-%m-%dT%H:%M:%S.%fZ')
    if fmt == "short":
        return f"{parsed.month}/{parsed.day}/{parsed.year}"
    if fmt == "long":
        return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"
    return value


def truncate_filter(value: Any, length: int = 50, suffix: str = "...") -> Any:
    if not isinstance(value, str) or len(value) <= length:
        return value
    return value[:length] + suffix


def capitalize_filter(value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return value
    return value[0].upper() + value[1:].lower()


def dump_filter(value: Any, indent: int = 2) -> str:
    return json.dumps(value, indent=indent, default=str, ensure_ascii=False)


def percent_filter(value: Any, decimals: int = 1) -> Any:
    """0.1234 -> "12.3%" """
    if not _is_number(value):
        return value
    return f"{value * 100:.{decimals}f}%"


def join_filter(value: Any, separator: str = ", ") -> Any:
    if not isinstance(value, (list, tuple)):
        return value
    return separator.join(str(item) for item in value)


def first_filter(value: Any, n: int = 5) -> Any:
    if not isinstance(value, (list, tuple)):
        return value
    return list(value[:n])


def sort_filter(value: Any, key: Optional[str] = None, reverse: bool = False) -> Any:
    """Sort a list, optionally by a dict key; None values sort last"""
    if not isinstance(value, (list, tuple)):
        return value

    def sort_key(item: Any):
        target = item.get(key) if key and isinstance(item, dict) else item
        return (target is None, target)

    try:
        return sorted(value, key=sort_key, reverse=reverse)
    except TypeError:
        logger.warning(f"⚠️ Could not sort values of mixed types (key={key})")
        return list(value)


REPORT_FILTERS = {
    "round": round_filter,
    "format_number": format_number,
    "date": date_filter,
    "truncate": truncate_filter,
    "capitalize": capitalize_filter,
    "dump": dump_filter,
    "percent": percent_filter,
    "join": join_filter,
    "first": first_filter,
    "sort": sort_filter,
}


def create_environment() -> Environment:
    """Jinja2 environment for markdown output: no autoescaping, None renders as empty"""
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        finalize=lambda value: "" if value is None else value,
    )
    env.filters.update(REPORT_FILTERS)
    return env


class TemplateRenderer:
    """Render prompts and report templates"""

    def __init__(self, environment: Optional[Environment] = None):
        self.env = environment or create_environment()

    def render_string(self, template: str, context: Dict[str, Any]) -> str:
        return self.env.from_string(template).render(**context)

    def render_file(self, template_path: str, context: Dict[str, Any]) -> str:
        """
        Render a template file.

        Raises:
            TemplateNotFoundError: If the file does not exist
        """
        path = Path(template_path)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template file not found: {template_path}")

        rendered = self.render_string(path.read_text(encoding="utf-8"), context)
        logger.debug(f"Rendered template {path.name}: {len(rendered)} characters")
        return rendered

    @staticmethod
    def load_prompt_file(prompt_path: str) -> str:
        """
        Read a prompt file.

        Raises:
            PromptNotFoundError: If the file does not exist
        """
        path = Path(prompt_path)
        if not path.is_file():
            raise PromptNotFoundError(f"Prompt file not found: {prompt_path}")
        return path.read_text(encoding="utf-8")
