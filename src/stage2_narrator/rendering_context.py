"""
Rendering context: the named sections a report template and its prompts can read
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from . import config
from .exceptions import ReportError

logger = logging.getLogger(__name__)

# Keys of the base section; report variables may not reuse them
BASE_KEYS = (
    "report_name",
    "author",
    "version",
    "generated_at",
    "bundle",
    "custom_fields",
    "computed_fields",
    "stats",
    "metadata",
    "column_stats",
    "distributions",
    "ranges",
    "record_count",
    "schema_id",
    "normalized",
    "processed",
)


def reserved_names() -> set:
    """Names no custom field, computed field or variable may take"""
    return set(BASE_KEYS) | config.RESERVED_CONTEXT_ROOTS


def _walk(value: Any, parts: Iterable[str]) -> Any:
    """Follow dict keys, list indexes and attributes; None when a step is missing"""
    for part in parts:
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, (list, tuple)):
            if not part.lstrip("-").isdigit():
                return None
            index = int(part)
            value = value[index] if -len(value) <= index < len(value) else None
        else:
            value = getattr(value, part, None)
    return value


class RenderingContext:
    """
    Sections of data available while generating a report.

    base       report metadata, the bundle and its stats
    custom     config-declared custom fields
    computed   formula results
    variables  resolved report variables, in declaration order

    Names are unique across sections, so the flat view used by templates
    has no ambiguous keys.
    """

    def __init__(
        self,
        base: Dict[str, Any],
        custom: Optional[Dict[str, Any]] = None,
        computed: Optional[Dict[str, Any]] = None
    ):
        self.base = dict(base)
        self.custom: Dict[str, Any] = {}
        self.computed: Dict[str, Any] = {}
        self.variables: Dict[str, Any] = {}

        for name, value in (custom or {}).items():
            self._check_name(name, "custom field")
            self.custom[name] = value
        for name, value in (computed or {}).items():
            self._check_name(name, "computed field")
            self.computed[name] = value

    def _taken(self) -> set:
        return reserved_names() | set(self.base) | set(self.custom) | set(self.computed) | set(self.variables)

    def _check_name(self, name: str, kind: str) -> None:
        if name in self._taken():
            raise ReportError(f"{kind.capitalize()} name '{name}' collides with an existing context key")

    def conflicting_names(self, names: Iterable[str]) -> List[str]:
        """Names already taken by another section or reserved"""
        taken = self._taken()
        return [name for name in names if name in taken]

    def set_variable(self, name: str, value: Any) -> None:
        """Record a resolved variable; each name is set exactly once"""
        self._check_name(name, "variable")
        self.variables[name] = value

    def as_dict(self) -> Dict[str, Any]:
        """Flat view for template rendering (plus a 'variables' section)"""
        flat = dict(self.base)
        flat.update(self.custom)
        flat.update(self.computed)
        flat.update(self.variables)
        flat["variables"] = dict(self.variables)
        return flat

    def resolve_path(self, path: str) -> Any:
        """
        Resolve a dotted path such as "bundle.stats.revenue.mean".

        Roots: "bundle", "context"/"ctx" (the flat view), "variables", or any
        key of the flat view. Missing paths resolve to None and are logged.
        """
        parts = [part for part in path.split(".") if part]
        if not parts:
            return None

        root, rest = parts[0], parts[1:]
        if root == "bundle":
            value = _walk(self.base.get("bundle"), rest)
        elif root in ("context", "ctx"):
            value = _walk(self.as_dict(), rest)
        elif root == "variables":
            value = _walk(self.variables, rest)
        else:
            value = _walk(self.as_dict(), parts)

        if value is None:
            logger.warning(f"⚠️ Input path '{path}' resolved to nothing")
        return value

    def names(self) -> List[str]:
        return list(self.as_dict().keys())
