"""Statistical helpers for BM25 style scoring.

The functions here stay independent of the index layout so the scoring engine
and its tests can exercise them directly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated term statistics for a field."""

    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


def compute_field_length_stats(field_lengths: Mapping[str, Mapping[str, int]]) -> dict[str, FieldLengthStats]:
    """Return aggregate stats for each field given per-document lengths."""

    stats: dict[str, FieldLengthStats] = {}
    for field_name, lengths in field_lengths.items():
        stats[field_name] = FieldLengthStats(
            field=field_name,
            total_terms=sum(max(length, 0) for length in lengths.values()),
            document_count=len(lengths),
        )
    return stats


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return a BM25 inverse document frequency that never goes negative.

    ``log(1 + (N - df + 0.5) / (df + 0.5))`` stays positive even when a term
    appears in every document of a small corpus.
    """

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    df = min(doc_freq, total_docs)
    return math.log(1.0 + (total_docs - df + 0.5) / (df + 0.5))


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = 1.2, b: float = 0.75) -> float:
    """Compute the BM25 term weight without IDF.

    The weight grows monotonically with ``tf`` and saturates towards ``k1 + 1``.
    """

    if tf <= 0:
        return 0.0
    normalized_length = doc_length / max(avg_doc_length, 1e-9)
    denominator = tf + k1 * (1 - b + b * normalized_length)
    return (tf * (k1 + 1)) / denominator
