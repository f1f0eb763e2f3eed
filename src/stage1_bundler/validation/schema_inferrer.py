"""
Infer a per-field schema from a sample of records and coerce records against it
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ConfigDict, Field, ValidationError, create_model

from .. import config
from ..exceptions import EmptyDatasetError
from ..normalization import DateNormalizer, to_number

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
URL_PATTERN = re.compile(r'^https?://\S+$', re.IGNORECASE)
DATE_REGEXES = [re.compile(pattern) for pattern in config.DATE_PATTERNS]

BOOLEAN_LIKE = {'1', '0', 'true', 'false', 'yes', 'no'}

# Field type tags
NUMERIC = "numeric"
STRING = "string"
BOOLEAN = "boolean"
DATE = "date"
EMAIL = "email"
URL = "url"
ENUM = "enum"
ARRAY = "array"
OBJECT = "object"


@dataclass
class FieldSchema:
    """Inferred type of one field"""
    type: str
    optional: bool = False
    enum_values: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": self.type, "optional": self.optional}
        if self.enum_values:
            result["enum_values"] = list(self.enum_values)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldSchema":
        return cls(
            type=data.get("type", STRING),
            optional=bool(data.get("optional", False)),
            enum_values=list(data.get("enum_values", [])),
        )


# field name -> FieldSchema
SchemaDescription = Dict[str, FieldSchema]


def is_date_like(value: Any) -> bool:
    """A string matching one of the literal date shapes that also parses"""
    if not isinstance(value, str):
        return False
    if not any(regex.match(value) for regex in DATE_REGEXES):
        return False
    return DateNormalizer.normalize(value) is not None


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class SchemaInferrer:
    """Heuristic, deterministic schema inference over sampled records"""

    def infer_schema(
        self,
        records: List[Dict[str, Any]],
        sample_size: int = config.SCHEMA_SAMPLE_SIZE
    ) -> SchemaDescription:
        """
        Infer a schema from the first sample_size records.

        Args:
            records: Dataset records
            sample_size: Number of leading records to inspect

        Returns:
            Mapping of field name to FieldSchema, in first-seen key order

        Raises:
            EmptyDatasetError: If records is empty
        """
        if not records:
            raise EmptyDatasetError("Cannot infer schema from empty dataset")

        sample = records[:min(sample_size, len(records))]

        # Union of keys across the sample, first-seen order
        keys: List[str] = []
        seen = set()
        for record in sample:
            if isinstance(record, dict):
                for key in record:
                    if key not in seen:
                        seen.add(key)
                        keys.append(key)

        schema = {key: self._infer_field(sample, key) for key in keys}
        logger.debug(f"Inferred schema for {len(schema)} fields from {len(sample)} records")
        return schema

    def _infer_field(self, sample: List[Dict[str, Any]], key: str) -> FieldSchema:
        raw = [record.get(key) if isinstance(record, dict) else None for record in sample]
        values = [value for value in raw if not _is_empty(value)]
        optional = len(values) < len(sample)

        if not values:
            return FieldSchema(type=STRING, optional=True)

        if any(isinstance(value, list) for value in values):
            return FieldSchema(type=ARRAY, optional=optional)

        if any(isinstance(value, dict) for value in values):
            return FieldSchema(type=OBJECT, optional=optional)

        if all(to_number(value) is not None for value in values):
            return FieldSchema(type=NUMERIC, optional=optional)

        if all(isinstance(value, bool) or str(value).lower() in BOOLEAN_LIKE for value in values):
            return FieldSchema(type=BOOLEAN, optional=optional)

        strings = [value for value in values if isinstance(value, str)]

        emails = sum(1 for value in strings if EMAIL_PATTERN.match(value))
        if emails >= len(values) * config.EMAIL_MATCH_THRESHOLD:
            return FieldSchema(type=EMAIL, optional=optional)

        urls = sum(1 for value in strings if URL_PATTERN.match(value))
        if urls >= len(values) * config.URL_MATCH_THRESHOLD:
            return FieldSchema(type=URL, optional=optional)

        dates = sum(1 for value in values if is_date_like(value))
        if dates >= len(values) * config.DATE_MATCH_THRESHOLD:
            return FieldSchema(type=DATE, optional=optional)

        distinct: List[Any] = []
        for value in values:
            if value not in distinct:
                distinct.append(value)
        if len(distinct) <= config.MAX_ENUM_VALUES and len(distinct) < len(sample) * config.ENUM_DISTINCT_RATIO:
            return FieldSchema(type=ENUM, optional=optional, enum_values=distinct)

        return FieldSchema(type=STRING, optional=optional)

    @staticmethod
    def describe_schema(schema: SchemaDescription) -> Dict[str, str]:
        """Human-readable type description per field"""
        labels = {
            NUMERIC: "number | string (auto-coerced)",
            BOOLEAN: "boolean | string (auto-coerced)",
            DATE: "date string",
            EMAIL: "email string",
            URL: "url string",
            ARRAY: "array",
            OBJECT: "object",
            STRING: "string",
        }

        description = {}
        for name, field_schema in schema.items():
            if field_schema.type == ENUM:
                label = "enum(" + ", ".join(str(v) for v in field_schema.enum_values) + ")"
            else:
                label = labels.get(field_schema.type, "unknown")
            if field_schema.optional:
                label += " (optional)"
            description[name] = label
        return description

    @staticmethod
    def build_model(schema: SchemaDescription, model_name: str = "InferredRecord"):
        """
        Build a pydantic model that coerces records to the inferred types.

        Field names are aliased so that any column name (spaces, leading
        underscores) is accepted. Unknown columns pass through.
        """
        type_map = {
            NUMERIC: Union[int, float],
            BOOLEAN: bool,
            DATE: str,
            EMAIL: str,
            URL: str,
            ARRAY: list,
            OBJECT: dict,
            STRING: str,
            ENUM: Any,
        }

        fields = {}
        for index, (name, field_schema) in enumerate(schema.items()):
            python_type = type_map.get(field_schema.type, Any)
            if field_schema.optional:
                fields[f"field_{index}"] = (Optional[python_type], Field(None, alias=name))
            else:
                fields[f"field_{index}"] = (python_type, Field(..., alias=name))

        return create_model(
            model_name,
            __config__=ConfigDict(extra="allow", populate_by_name=True),
            **fields
        )

    def coerce_records(
        self,
        records: List[Dict[str, Any]],
        schema: SchemaDescription
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Coerce each record against the schema.

        A record that fails validation is kept unchanged and counted as invalid.

        Returns:
            (records, report) where report has total_records, valid_records,
            invalid_records and the first errors
        """
        model = self.build_model(schema)
        coerced = []
        errors = []
        invalid = 0

        for index, record in enumerate(records):
            try:
                dumped = model.model_validate(record).model_dump(by_alias=True)
                coerced.append({key: dumped.get(key) for key in record})
            except ValidationError as e:
                invalid += 1
                coerced.append(record)
                if len(errors) < 10:
                    first = e.errors()[0]
                    location = ".".join(str(part) for part in first.get("loc", ()))
                    errors.append(f"Record {index}: {location}: {first.get('msg')}")

        if invalid:
            logger.warning(f"⚠️ {invalid}/{len(records)} records failed schema validation (originals kept)")

        report = {
            "total_records": len(records),
            "valid_records": len(records) - invalid,
            "invalid_records": invalid,
            "errors": errors,
        }
        return coerced, report
