"""
Schema registry for versioning and discovery.

Provides centralized access to the file column tables and the tabular
frame schemas with version tracking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

import pandera.pandas as pa

from nppes.schemas.columns import RecordSchema
from nppes.schemas.frames import CountFrameSchema, ProviderFrameSchema
from nppes.schemas.main import MAIN_SCHEMA
from nppes.schemas.reference import (
    ENDPOINT_SCHEMA,
    OTHER_NAME_SCHEMA,
    PRACTICE_LOCATION_SCHEMA,
    TAXONOMY_SCHEMA,
)

if TYPE_CHECKING:
    import pandas as pd


class DataRole(Enum):
    """Classification of schemas by the data they describe."""

    SOURCE = "source"  # Main NPPES provider file
    REFERENCE = "reference"  # Reference files joined by NPI or code
    OUTPUT = "output"  # Tabular views produced for export


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered schema."""

    name: str
    schema: RecordSchema[Any] | type[pa.DataFrameModel]
    version: str
    role: DataRole
    description: str

    @property
    def is_file_schema(self) -> bool:
        return isinstance(self.schema, RecordSchema)


def _file_info(schema: RecordSchema[Any], role: DataRole, description: str) -> SchemaInfo:
    return SchemaInfo(
        name=schema.name,
        schema=schema,
        version=schema.version,
        role=role,
        description=description,
    )


class SchemaRegistry:
    """
    Centralized registry for all schemas.

    Provides version tracking and schema discovery.
    """

    _version = "1.0.0"

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        MAIN_SCHEMA.name: _file_info(
            MAIN_SCHEMA,
            DataRole.SOURCE,
            "NPPES provider file (npidata_pfile), 330 columns",
        ),
        TAXONOMY_SCHEMA.name: _file_info(
            TAXONOMY_SCHEMA,
            DataRole.REFERENCE,
            "NUCC health care provider taxonomy code set",
        ),
        OTHER_NAME_SCHEMA.name: _file_info(
            OTHER_NAME_SCHEMA,
            DataRole.REFERENCE,
            "Additional organization names per NPI (othername_pfile)",
        ),
        PRACTICE_LOCATION_SCHEMA.name: _file_info(
            PRACTICE_LOCATION_SCHEMA,
            DataRole.REFERENCE,
            "Secondary practice locations per NPI (pl_pfile)",
        ),
        ENDPOINT_SCHEMA.name: _file_info(
            ENDPOINT_SCHEMA,
            DataRole.REFERENCE,
            "Electronic endpoints per NPI (endpoint_pfile)",
        ),
        "provider_frame": SchemaInfo(
            name="provider_frame",
            schema=ProviderFrameSchema,
            version="1.0.0",
            role=DataRole.OUTPUT,
            description="One row per provider for CSV/JSON export",
        ),
        "count_frame": SchemaInfo(
            name="count_frame",
            schema=CountFrameSchema,
            version="1.0.0",
            role=DataRole.OUTPUT,
            description="Ranked provider counts per state or taxonomy code",
        ),
    }

    @classmethod
    def registry_version(cls) -> str:
        """Get the registry version."""
        return cls._version

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """
        Get full schema info by name.

        Args:
            name: Schema identifier.

        Returns:
            SchemaInfo with metadata.

        Raises:
            KeyError: If schema not found.
        """
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise KeyError(msg)
        return cls._schemas[name]

    @classmethod
    def get(cls, name: str) -> RecordSchema[Any] | type[pa.DataFrameModel]:
        """Get a schema by name."""
        return cls.get_info(name).schema

    @classmethod
    def get_file_schema(cls, name: str) -> RecordSchema[Any]:
        """
        Get the column table of an input file.

        Raises:
            KeyError: If schema not found.
            TypeError: If the schema describes a frame, not a file.
        """
        schema = cls.get(name)
        if not isinstance(schema, RecordSchema):
            msg = f"Schema '{name}' is a frame schema, not a file schema"
            raise TypeError(msg)
        return schema

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered schema names."""
        return list(cls._schemas.keys())

    @classmethod
    def list_by_role(cls, role: DataRole) -> list[str]:
        """List schemas filtered by their data role."""
        return [name for name, info in cls._schemas.items() if info.role == role]

    @classmethod
    def validate(cls, df: "pd.DataFrame", schema_name: str) -> "pd.DataFrame":
        """
        Validate a DataFrame against a registered frame schema.

        Args:
            df: DataFrame to validate.
            schema_name: Name of schema to validate against.

        Returns:
            Validated DataFrame.

        Raises:
            TypeError: If the schema is a file schema.
            pandera.errors.SchemaError: If validation fails.
        """
        schema = cls.get(schema_name)
        if isinstance(schema, RecordSchema):
            msg = f"Schema '{schema_name}' is a file schema and cannot validate frames"
            raise TypeError(msg)
        return schema.validate(df)
