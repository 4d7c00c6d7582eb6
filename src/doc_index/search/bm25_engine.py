"""BM25F scoring over an in-memory inverted index."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from doc_index.search.analyzers import get_analyzer
from doc_index.search.inverted_index import InvertedIndex
from doc_index.search.stats import FieldLengthStats, bm25, calculate_idf, compute_field_length_stats


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the BM25 engine."""

    doc_id: str
    score: float


@dataclass(frozen=True)
class QueryTokens:
    """Immutable snapshot of query terms aligned with index fields."""

    per_field: Mapping[str, tuple[str, ...]]
    ordered_terms: tuple[str, ...]
    seed_text: str

    @classmethod
    def empty(cls) -> QueryTokens:
        return cls(MappingProxyType({}), (), "")

    def is_empty(self) -> bool:
        return not self.per_field


class BM25SearchEngine:
    """Compute field-boosted BM25 scores for documents in an inverted index.

    Each text field contributes ``idf(term) * bm25(tf, field length) * boost``.
    Boosts come from the postings themselves, so the schema in effect at build
    time decides how much a title match outweighs a body match.
    """

    def __init__(self, *, k1: float = 1.2, b: float = 0.75) -> None:
        self.k1 = k1
        self.b = b

    def tokenize_query(self, index: InvertedIndex, seed_text: str) -> QueryTokens:
        """Analyze ``seed_text`` with every text field's analyzer, dropping duplicates."""

        normalized_seed = seed_text.strip()
        if not normalized_seed:
            return QueryTokens.empty()

        per_field: dict[str, tuple[str, ...]] = {}
        ordered_terms: list[str] = []
        for text_field in index.schema.text_fields:
            analyzer = get_analyzer(text_field.analyzer_name)
            terms: list[str] = []
            for token in analyzer(normalized_seed):
                if token.text and token.text not in terms:
                    terms.append(token.text)
            if not terms:
                continue
            per_field[text_field.name] = tuple(terms)
            ordered_terms.extend(term for term in terms if term not in ordered_terms)

        if not per_field:
            return QueryTokens.empty()
        return QueryTokens(MappingProxyType(per_field), tuple(ordered_terms), normalized_seed)

    def score(
        self,
        index: InvertedIndex,
        query_tokens: QueryTokens,
        *,
        field_length_stats: Mapping[str, FieldLengthStats] | None = None,
    ) -> list[RankedDocument]:
        """Return every matching document, best first, ties in insertion order."""

        if query_tokens.is_empty() or index.doc_count == 0:
            return []

        if field_length_stats is None:
            field_length_stats = compute_field_length_stats(index.field_lengths)
        doc_scores: dict[str, float] = defaultdict(float)
        total_docs = index.doc_count

        for field_name, terms in query_tokens.per_field.items():
            stats = field_length_stats.get(field_name)
            if stats is None:
                continue
            doc_lengths = index.field_lengths.get(field_name, {})
            for term in terms:
                postings = index.get_postings(term, field_name)
                if not postings:
                    continue
                idf = calculate_idf(len(postings), total_docs)
                for posting in postings:
                    doc_length = doc_lengths.get(posting.doc_id, posting.frequency)
                    weight = bm25(posting.frequency, doc_length, stats.average_length, k1=self.k1, b=self.b)
                    doc_scores[posting.doc_id] += idf * weight * posting.weight

        return sorted(
            (RankedDocument(doc_id=doc_id, score=score) for doc_id, score in doc_scores.items() if score > 0),
            key=lambda entry: (-entry.score, index.rank_of(entry.doc_id)),
        )
