"""
On-disk registry of inferred schemas, keyed by dataset identifier
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import config
from .schema_inferrer import FieldSchema, SchemaDescription, SchemaInferrer

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """
    Store inferred schemas and their metadata.

    Each schema is cached as <cache_dir>/<id>.json. The cache is only a
    convenience: write failures are logged and never raised. Instances are
    independent, so tests can point one at a temporary directory.
    """

    def __init__(self, cache_dir: str = config.DEFAULT_SCHEMA_CACHE_DIR):
        self.cache_dir = Path(cache_dir)
        self._schemas: Dict[str, SchemaDescription] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._load_all_from_cache()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def register(
        self,
        schema_id: str,
        schema: SchemaDescription,
        record_count: Optional[int] = None,
        source: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Register (or re-register) a schema and write it to the cache.

        Returns:
            The stored metadata
        """
        logger.debug(f"Registering schema: {schema_id}")
        previous = self._metadata.get(schema_id, {})

        metadata = {
            "id": schema_id,
            "created_at": previous.get("created_at", self._now()),
            "updated_at": self._now(),
            "shape": SchemaInferrer.describe_schema(schema),
            "fields": {name: field.to_dict() for name, field in schema.items()},
            "record_count": record_count,
            "source": source,
        }

        self._schemas[schema_id] = schema
        self._metadata[schema_id] = metadata
        self._save_to_cache(schema_id, metadata)
        return metadata

    def get(self, schema_id: str) -> Optional[SchemaDescription]:
        return self._schemas.get(schema_id)

    def get_metadata(self, schema_id: str) -> Optional[Dict[str, Any]]:
        return self._metadata.get(schema_id)

    def has(self, schema_id: str) -> bool:
        return schema_id in self._schemas

    def delete(self, schema_id: str) -> bool:
        """Remove a schema from memory and from the cache directory"""
        existed = schema_id in self._schemas or schema_id in self._metadata
        self._schemas.pop(schema_id, None)
        self._metadata.pop(schema_id, None)

        cache_path = self._cache_path(schema_id)
        if cache_path.exists():
            cache_path.unlink()
        return existed

    def list(self) -> List[str]:
        return list(self._schemas.keys())

    def list_with_metadata(self) -> List[Dict[str, Any]]:
        return list(self._metadata.values())

    def clear(self) -> None:
        """Forget all schemas held in memory (cache files are left alone)"""
        logger.debug("Clearing all schemas")
        self._schemas.clear()
        self._metadata.clear()

    def _cache_path(self, schema_id: str) -> Path:
        return self.cache_dir / f"{schema_id}.json"

    def _save_to_cache(self, schema_id: str, metadata: Dict[str, Any]) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self._cache_path(schema_id), 'w') as f:
                json.dump(metadata, f, indent=2, default=str)
        except OSError as e:
            logger.warning(f"⚠️ Failed to cache schema {schema_id}: {e}")

    def _load_all_from_cache(self) -> None:
        files = sorted(self.cache_dir.glob("*.json"))
        for cache_file in files:
            try:
                with open(cache_file, 'r') as f:
                    metadata = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.debug(f"Skipping unreadable schema cache {cache_file.name}: {e}")
                continue

            schema_id = metadata.get("id", cache_file.stem)
            self._metadata[schema_id] = metadata
            if isinstance(metadata.get("fields"), dict):
                self._schemas[schema_id] = {
                    name: FieldSchema.from_dict(data)
                    for name, data in metadata["fields"].items()
                }

        if files:
            logger.debug(f"Loaded {len(self._metadata)} schemas from {self.cache_dir}")
