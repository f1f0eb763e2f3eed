"""
Bundle data structures produced by the Bundle Loader
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Bundle:
    """Result of loading and analyzing one dataset"""
    source: str
    records: List[Dict[str, Any]]
    stats: Dict[str, Any]
    metadata: Dict[str, Any]
    samples: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def record_count(self) -> int:
        return self.metadata.get("record_count", len(self.records))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnrichedBundle(Bundle):
    """Bundle plus config-declared custom fields and formula results"""
    custom_fields: Dict[str, Any] = field(default_factory=dict)
    computed_fields: Dict[str, Any] = field(default_factory=dict)
