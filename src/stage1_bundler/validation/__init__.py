"""
Schema inference, schema registry and dataset validation
"""

from .data_validator import DataValidator
from .schema_inferrer import FieldSchema, SchemaDescription, SchemaInferrer, is_date_like
from .schema_registry import SchemaRegistry

__all__ = [
    'DataValidator',
    'FieldSchema',
    'SchemaDescription',
    'SchemaInferrer',
    'SchemaRegistry',
    'is_date_like',
]
