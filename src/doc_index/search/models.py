"""Search data models."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Posting:
    """A posting records one term's occurrences in one field of one document."""

    doc_id: str
    field: str
    frequency: int
    weight: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize with minimal keys: d=doc, f=field, n=frequency, w=weight."""
        return {"d": self.doc_id, "f": self.field, "n": self.frequency, "w": self.weight}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Posting":
        frequency = int(data["n"])
        if frequency <= 0:
            msg = f"Posting frequency must be positive, got {frequency}"
            raise ValueError(msg)
        return cls(
            doc_id=str(data["d"]),
            field=str(data["f"]),
            frequency=frequency,
            weight=float(data.get("w", 1.0)),
        )
