"""
Bundle Loader - turns a dataset file into a Bundle with stats, schema and samples

Usage:
    loader = BundleLoader()
    bundle = loader.load_with_processing("data/sales.csv")
    enriched = loader.enrich(bundle, custom_fields, computed_fields)
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .connectors import load_records
from .exceptions import EmptyDatasetError, FormulaError
from .formula_engine import FormulaEngine
from .models import Bundle, EnrichedBundle
from .normalization import AutoNormalizer, to_number
from .stats_calculator import StatsCalculator
from .validation import SchemaDescription, SchemaInferrer, SchemaRegistry

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _field_value(field: Any, key: str) -> Any:
    """Read a field declaration given as a dict or as an object with attributes"""
    if isinstance(field, dict):
        return field.get(key)
    return getattr(field, key, None)


class BundleLoader:
    """
    Compose connector, normalizer, schema inference, stats and formulas into Bundles.

    Every collaborator can be injected; defaults are created otherwise.
    """

    def __init__(
        self,
        normalizer: Optional[AutoNormalizer] = None,
        schema_inferrer: Optional[SchemaInferrer] = None,
        schema_registry: Optional[SchemaRegistry] = None,
        stats_calculator: Optional[StatsCalculator] = None,
        formula_engine: Optional[FormulaEngine] = None,
        schema_cache_dir: str = config.DEFAULT_SCHEMA_CACHE_DIR
    ):
        self.normalizer = normalizer or AutoNormalizer()
        self.schema_inferrer = schema_inferrer or SchemaInferrer()
        self.schema_registry = schema_registry or SchemaRegistry(schema_cache_dir)
        self.stats_calculator = stats_calculator or StatsCalculator()
        self.formula_engine = formula_engine or FormulaEngine()

    def load(self, file_path: str, **connector_options) -> Bundle:
        """
        Load a dataset with basic stats.

        Raises:
            DatasetNotFoundError, UnsupportedFormatError, DatasetParseError
            EmptyDatasetError: If the dataset has zero records
        """
        records = self._read(file_path, **connector_options)
        return self._build_bundle(file_path, records, self.compute_basic_stats(records))

    def load_with_normalization(self, file_path: str, **connector_options) -> Bundle:
        """Load and normalize every field before computing stats"""
        records = self._read(file_path, **connector_options)
        normalized = self.normalizer.normalize_records(records)
        logger.info(f"✅ Normalized {len(normalized)} records")

        return self._build_bundle(
            file_path,
            normalized,
            self.compute_basic_stats(normalized),
            normalized=True,
            normalization_timestamp=_now(),
        )

    def load_with_validation(
        self,
        file_path: str,
        schema_id: Optional[str] = None,
        **connector_options
    ) -> Bundle:
        """
        Load, infer and register a schema, then coerce records against it.

        Records that fail coercion are kept as loaded; the failures are
        reported in metadata["validation"].
        """
        records = self._read(file_path, **connector_options)
        schema_id, schema = self._register_schema(file_path, records, schema_id)
        validated, report = self.schema_inferrer.coerce_records(records, schema)

        return self._build_bundle(
            file_path,
            validated,
            self.compute_basic_stats(validated),
            schema_id=schema_id,
            schema_description=self.schema_inferrer.describe_schema(schema),
            validation=report,
        )

    def load_with_processing(self, file_path: str, **connector_options) -> Bundle:
        """
        Full processing: normalize, infer/register schema, coerce, enhanced stats.

        Stats are computed from the final record list held by the bundle.
        """
        logger.info(f"Step 1: Loading dataset {Path(file_path).name}")
        records = self._read(file_path, **connector_options)

        logger.info("Step 2: Normalizing fields")
        normalized = self.normalizer.normalize_records(records)

        logger.info("Step 3: Inferring schema")
        schema_id, schema = self._register_schema(file_path, normalized, None)

        logger.info("Step 4: Validating records against schema")
        validated, report = self.schema_inferrer.coerce_records(normalized, schema)

        logger.info("Step 5: Calculating statistics")
        stats = self.compute_basic_stats(validated)
        stats.update(self.stats_calculator.calculate_stats(validated))

        bundle = self._build_bundle(
            file_path,
            validated,
            stats,
            schema_id=schema_id,
            schema_description=self.schema_inferrer.describe_schema(schema),
            validation=report,
            normalized=True,
            normalization_timestamp=_now(),
            processed=True,
        )
        logger.info(
            f"✅ Processed {bundle.record_count} records "
            f"({report['valid_records']} valid, {report['invalid_records']} invalid)"
        )
        return bundle

    def enrich(
        self,
        bundle: Bundle,
        custom_fields: Optional[List[Any]] = None,
        computed_fields: Optional[List[Any]] = None
    ) -> EnrichedBundle:
        """
        Add custom fields and evaluate computed fields.

        Args:
            bundle: Source bundle
            custom_fields: [{name, value}] declarations
            computed_fields: [{name, function}] declarations

        Raises:
            FormulaError: Naming the field whose formula failed
        """
        custom = {}
        for field in custom_fields or []:
            custom[_field_value(field, "name")] = _field_value(field, "value")
        if custom:
            logger.info(f"Added {len(custom)} custom fields")

        computed = {}
        for field in computed_fields or []:
            name = _field_value(field, "name")
            formula = _field_value(field, "function")
            try:
                computed[name] = self.formula_engine.evaluate(formula, bundle.records)
            except FormulaError as e:
                logger.error(f"❌ Formula error for {name}: {e}")
                raise FormulaError(f"Formula '{name}' failed: {e}") from e
        if computed:
            logger.info(f"✅ Computed {len(computed)} fields")

        return EnrichedBundle(
            source=bundle.source,
            records=bundle.records,
            stats=bundle.stats,
            metadata=bundle.metadata,
            samples=bundle.samples,
            custom_fields=custom,
            computed_fields=computed,
        )

    def _read(self, file_path: str, **connector_options) -> List[Dict[str, Any]]:
        records = load_records(file_path, **connector_options)
        if not records:
            raise EmptyDatasetError(f"Dataset is empty: {file_path}")
        return records

    def _build_bundle(
        self,
        file_path: str,
        records: List[Dict[str, Any]],
        stats: Dict[str, Any],
        **extra_metadata
    ) -> Bundle:
        metadata = {
            "ingested_at": _now(),
            "source_file": str(file_path),
            "record_count": len(records),
        }
        metadata.update(extra_metadata)

        bundle = Bundle(
            source=str(file_path),
            records=records,
            stats=stats,
            metadata=metadata,
            samples={"main": records[:config.SAMPLE_SIZE]},
        )
        logger.debug(f"Bundle created: {len(records)} records from {file_path}")
        return bundle

    def _register_schema(
        self,
        file_path: str,
        records: List[Dict[str, Any]],
        schema_id: Optional[str]
    ):
        schema: SchemaDescription = self.schema_inferrer.infer_schema(records)
        schema_id = schema_id or self.generate_schema_id(file_path, schema)
        self.schema_registry.register(
            schema_id,
            schema,
            record_count=len(records),
            source=str(file_path),
        )
        logger.info(f"Registered schema {schema_id} ({len(schema)} fields)")
        return schema_id, schema

    @staticmethod
    def generate_schema_id(file_path: str, schema: SchemaDescription) -> str:
        """<file stem>_<hash of the field shape>, so a changed dataset gets a new id"""
        shape = {name: field.to_dict() for name, field in schema.items()}
        digest = hashlib.sha256(json.dumps(shape, sort_keys=True, default=str).encode()).hexdigest()
        return f"{Path(file_path).stem}_{digest[:12]}"

    @staticmethod
    def compute_basic_stats(records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Per-column numeric or categorical summary.

        A column is numeric when every non-null value coerces to a finite number.
        """
        if not records:
            return {}

        columns = list(records[0].keys())
        stats: Dict[str, Any] = {
            "row_count": len(records),
            "column_count": len(columns),
            "column_names": columns,
        }

        for column in columns:
            values = [record.get(column) for record in records if record.get(column) is not None]
            numbers = [to_number(value) for value in values]

            if values and all(number is not None for number in numbers):
                total = sum(numbers)
                stats[column] = {
                    "type": "numeric",
                    "count": len(numbers),
                    "sum": total,
                    "mean": total / len(numbers),
                    "min": min(numbers),
                    "max": max(numbers),
                }
            else:
                hashable = [json.dumps(v, default=str) if isinstance(v, (list, dict)) else v for v in values]
                stats[column] = {
                    "type": "categorical",
                    "count": len(values),
                    "unique": len(set(hashable)),
                    "sample": values[:3],
                }

        return stats
