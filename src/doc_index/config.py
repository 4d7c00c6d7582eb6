"""Centralized configuration for doc-index using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value is validated at construction; a bad environment fails fast with
    ``pydantic.ValidationError`` instead of surfacing mid-query.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Corpus and snapshot location
    docs_dir: Path = Field(default=Path("./docs"), description="Directory holding <category>/*.md documents")
    index_filename: str = Field(
        default="search-index.json", min_length=1, description="Snapshot file name inside docs_dir"
    )

    # Query defaults
    default_max_results: int = Field(default=3, ge=0, description="Results returned when the caller gives no limit")
    default_min_score: float = Field(default=0.2, ge=0.0, description="Score floor applied when none is given")

    # Excerpts
    excerpt_context_chars: int = Field(default=400, ge=0, description="Characters kept on each side of a match")
    highlight_marker: str = Field(default="**", description="Emphasis marker wrapped around matches")

    # Ranking
    title_boost: float = Field(default=2.5, gt=0.0, description="Weight of title matches")
    body_boost: float = Field(default=1.0, gt=0.0, description="Weight of content matches")
    bm25_k1: float = Field(default=1.2, ge=0.0, description="BM25 term frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=False, description="Emit structured JSON logs")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized

    @property
    def index_path(self) -> Path:
        return self.docs_dir / self.index_filename
