"""Domain models for indexing and search.

Value objects are immutable (frozen=True) so a record handed to the indexer
cannot change underneath a generation that references it.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


CATEGORY_SEPARATOR = "/"


class DocumentRecord(BaseModel):
    """A single markdown document as supplied by the corpus loader.

    ``id`` is opaque and must stay stable across rebuilds for the same logical
    document. ``title`` and ``content`` may be empty.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    content: str = ""

    @field_validator("id")
    @classmethod
    def _require_id(cls, value: str) -> str:
        if not value:
            raise ValueError("Document id must be non-empty")
        return value

    @property
    def category(self) -> str | None:
        """Title prefix before the first ``/``, the corpus' category convention."""
        head, sep, _ = self.title.partition(CATEGORY_SEPARATOR)
        return head if sep else None

    def in_category(self, category: str) -> bool:
        return self.title.startswith(f"{category}{CATEGORY_SEPARATOR}")


class SearchResult(BaseModel):
    """Value object for a single ranked hit with its highlighted excerpt."""

    model_config = ConfigDict(frozen=True)

    doc_id: str
    score: float
    title: str
    excerpt: str = Field(default="")
