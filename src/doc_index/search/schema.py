"""
Schema definition for the document index.

A schema names the fields of a ``DocumentRecord`` that are analyzed and how
much each contributes to scoring:
- TextField: analyzed text with tokenization, stopwords and stemming
- StoredField: kept in the document store but never tokenized

Each text field carries:
- boost: field weight applied to its BM25 contribution (title > body)
- analyzer_name: which analyzer from ``analyzers`` tokenizes it
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Types of fields supported in the schema."""

    TEXT = "text"
    STORED = "stored"


@dataclass(frozen=True)
class TextField:
    """
    Analyzed text field for full-text search.

    Args:
        name: Attribute of the document record (e.g., "title", "content")
        boost: Field weight in scoring (default: 1.0)
        analyzer_name: Name of analyzer to use (default: None = standard)
    """

    name: str
    boost: float = 1.0
    analyzer_name: str | None = None

    @property
    def field_type(self) -> FieldType:
        return FieldType.TEXT

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.field_type.value, "boost": self.boost}
        if self.analyzer_name:
            data["analyzer_name"] = self.analyzer_name
        return data


@dataclass(frozen=True)
class StoredField:
    """Stored-only field (not indexed)."""

    name: str

    @property
    def field_type(self) -> FieldType:
        return FieldType.STORED

    @property
    def boost(self) -> float:
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.field_type.value}


SchemaField = TextField | StoredField


def field_from_dict(data: dict[str, Any]) -> SchemaField:
    """Deserialize a field definition from dict."""
    field_type = FieldType(data["type"])
    if field_type == FieldType.TEXT:
        return TextField(
            name=data["name"],
            boost=float(data.get("boost", 1.0)),
            analyzer_name=data.get("analyzer_name"),
        )
    return StoredField(name=data["name"])


@dataclass
class Schema:
    """
    Schema definition for a search index.

    Example:
        schema = Schema(
            fields=[
                TextField("title", boost=2.5),
                TextField("content", analyzer_name="english"),
            ],
        )
    """

    fields: list[SchemaField]
    unique_field: str = "id"
    name: str = "default"

    def __post_init__(self) -> None:
        self._field_map: dict[str, SchemaField] = {f.name: f for f in self.fields}
        if len(self._field_map) != len(self.fields):
            msg = f"Schema '{self.name}' declares duplicate field names"
            raise ValueError(msg)

    def __getitem__(self, name: str) -> SchemaField:
        return self._field_map[name]

    def __contains__(self, name: str) -> bool:
        return name in self._field_map

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def text_fields(self) -> list[TextField]:
        """Return all text fields."""
        return [f for f in self.fields if isinstance(f, TextField)]

    def get_boost(self, field_name: str) -> float:
        """Get boost factor for a field."""
        if field_name in self._field_map:
            return self._field_map[field_name].boost
        return 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "unique_field": self.unique_field,
            "fields": [f.to_dict() for f in self.fields],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Schema:
        fields = [field_from_dict(f) for f in data["fields"]]
        return cls(
            fields=fields,
            unique_field=data.get("unique_field", "id"),
            name=data.get("name", "default"),
        )


def create_default_schema(*, title_boost: float = 2.5, body_boost: float = 1.0) -> Schema:
    """
    Create the default schema for markdown documents.

    Fields:
    - id: Unique identifier (stored only)
    - title: Document title, also carries the "category/" prefix (text, boost=2.5)
    - content: Raw markdown body (text, boost=1.0)
    """
    return Schema(
        name="markdown-docs",
        unique_field="id",
        fields=[
            StoredField("id"),
            TextField("title", boost=title_boost, analyzer_name="english"),
            TextField("content", boost=body_boost, analyzer_name="english"),
        ],
    )
