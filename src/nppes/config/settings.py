"""
Typed configuration models using Pydantic.

A single NppesConfig value is built at startup and passed explicitly to
the ingestion pipeline, loaders and query helpers.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DataPathsConfig(BaseModel):
    """Data file paths configuration.

    Per-file paths are relative to data_root. A path left unset is looked
    up by its standard NPPES file name pattern in data_root (see
    ``nppes.dataset.discover_files``).
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Directory holding the NPPES files"
    )
    providers: Path | None = Field(
        default=None, description="Main provider file (npidata_pfile_*.csv)"
    )
    taxonomy: Path | None = Field(
        default=None, description="NUCC taxonomy file (nucc_taxonomy_*.csv)"
    )
    other_names: Path | None = Field(
        default=None, description="Other name reference file (othername_pfile_*.csv)"
    )
    practice_locations: Path | None = Field(
        default=None, description="Practice location reference file (pl_pfile_*.csv)"
    )
    endpoints: Path | None = Field(
        default=None, description="Endpoint reference file (endpoint_pfile_*.csv)"
    )

    def resolve(self, path_attr: str) -> Path:
        """Resolve a relative path against data_root."""
        rel_path = getattr(self, path_attr)
        if rel_path is None:
            msg = f"Path '{path_attr}' is not configured"
            raise ValueError(msg)
        return self.data_root / rel_path


class IngestionConfig(BaseModel):
    """Ingestion pipeline configuration."""

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(
        default=10_000, ge=1, le=1_000_000, description="Rows per parse batch"
    )
    max_workers: int = Field(
        default=4, ge=1, le=64, description="Threads parsing batches of one chunk"
    )
    chunk_batches: int = Field(
        default=4,
        ge=1,
        description="Batches per worker read into memory at once",
    )
    skip_invalid: bool = Field(
        default=False, description="Skip invalid rows instead of aborting the load"
    )
    validate_header: bool = Field(
        default=True, description="Require the exact canonical header"
    )
    encoding: str = Field(default="utf-8", description="Text encoding of input files")

    @property
    def chunk_size(self) -> int:
        """Rows tokenized into memory before a parallel parse round."""
        return self.batch_size * self.max_workers * self.chunk_batches


class QueryConfig(BaseModel):
    """Query and ranking defaults."""

    model_config = ConfigDict(frozen=True)

    default_top_n: int = Field(default=10, ge=1, description="Default N for top-N rankings")
    result_limit: int = Field(
        default=20, ge=1, description="Rows shown by the CLI query command"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Render log events as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure level is a standard logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


class NppesConfig(BaseModel):
    """Complete configuration."""

    model_config = ConfigDict(frozen=True)

    data_paths: DataPathsConfig = Field(default_factory=DataPathsConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def data_root(self) -> Path:
        """Convenience accessor for the data directory."""
        return self.data_paths.data_root
