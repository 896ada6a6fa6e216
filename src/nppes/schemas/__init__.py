"""
Schema definitions for NPPES files and tabular views.

File schemas are declarative column tables consumed by the row parser;
frame schemas are Pandera models for exported tables.
"""

from nppes.schemas.columns import ColumnSpec, FieldKind, RecordSchema, RepeatedGroup
from nppes.schemas.frames import CountFrameSchema, ProviderFrameSchema
from nppes.schemas.main import MAIN_SCHEMA
from nppes.schemas.reference import (
    ENDPOINT_SCHEMA,
    OTHER_NAME_SCHEMA,
    PRACTICE_LOCATION_SCHEMA,
    TAXONOMY_SCHEMA,
)
from nppes.schemas.registry import DataRole, SchemaRegistry

__all__ = [
    "ENDPOINT_SCHEMA",
    "MAIN_SCHEMA",
    "OTHER_NAME_SCHEMA",
    "PRACTICE_LOCATION_SCHEMA",
    "TAXONOMY_SCHEMA",
    "ColumnSpec",
    "CountFrameSchema",
    "DataRole",
    "FieldKind",
    "ProviderFrameSchema",
    "RecordSchema",
    "RepeatedGroup",
    "SchemaRegistry",
]
