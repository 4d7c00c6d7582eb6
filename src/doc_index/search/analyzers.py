"""Analyzer utilities for the markdown search index.

Analyzers follow a composable tokenizer/filter design: a tokenizer splits raw
text on word boundaries and a chain of filters case-folds, drops stopwords and
stems what is left. Schema text fields reference analyzers by name so the
query side always runs the same pipeline as the indexing side.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, **updates: object) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
        }
        data.update(updates)
        return Token(**data)  # type: ignore[arg-type]


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class WordTokenizer:
    """Regex tokenizer that splits on word boundaries."""

    def __init__(self, pattern: str = r"\w+(?:'\w+)*", flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class CaseFoldFilter:
    """Filter that case-folds token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = token.text.casefold()
            if folded == token.text:
                yield token
            else:
                yield token.copy_with(text=folded)


DEFAULT_STOPWORDS = (
    "a",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "but",
    "by",
    "for",
    "if",
    "in",
    "into",
    "is",
    "it",
    "no",
    "not",
    "of",
    "on",
    "or",
    "such",
    "that",
    "the",
    "their",
    "then",
    "there",
    "these",
    "they",
    "this",
    "to",
    "was",
    "will",
    "with",
)

_SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("ization", "ize"),
    ("ational", "ate"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("iveness", "ive"),
    ("tional", "tion"),
    ("biliti", "ble"),
    ("entli", "ent"),
    ("izer", "ize"),
    ("ator", "ate"),
    ("ation", "ate"),
    ("ness", ""),
    ("ment", ""),
)

_SIMPLE_SUFFIXES: tuple[str, ...] = ("ingly", "edly", "ing", "ed", "ly", "s")

# Stems shorter than this are left alone so "is" or "us" never collapse.
_MIN_STEM_LENGTH = 3


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Sequence[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = frozenset(word.casefold() for word in vocab)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.casefold() not in self.stopwords:
                yield token


class SuffixStemFilter:
    """Strips common English suffixes so inflected forms share a term."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = stem(token.text)
            yield token if stemmed == token.text else token.copy_with(text=stemmed)


def stem(word: str) -> str:
    """Return a light Porter-style stem of ``word``."""

    for suffix, replacement in _SUFFIX_RULES:
        if word.endswith(suffix):
            candidate = word[: -len(suffix)] + replacement
            if len(candidate) >= _MIN_STEM_LENGTH:
                return candidate
    for suffix in _SIMPLE_SUFFIXES:
        if word.endswith(suffix) and not word.endswith("ss"):
            candidate = word[: -len(suffix)]
            if len(candidate) >= _MIN_STEM_LENGTH:
                return candidate
    return word


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(
        self,
        tokenizer: Callable[[str], Iterable[Token]],
        filters: Sequence[TokenFilter] | None = None,
    ) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer wired into the schema."""

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        apply_stemming: bool = True,
    ) -> None:
        filters: list[TokenFilter] = [CaseFoldFilter(), StopFilter(stopwords)]
        if apply_stemming:
            filters.append(SuffixStemFilter())
        self.pipeline = AnalyzerPipeline(WordTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)


class SimpleAnalyzer:
    """Word split plus case folding, nothing else."""

    def __init__(self) -> None:
        self.pipeline = AnalyzerPipeline(WordTokenizer(), [CaseFoldFilter()])

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)


_ANALYZER_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "default": lambda: StandardAnalyzer(),
    "english": lambda: StandardAnalyzer(),
    "english-nostem": lambda: StandardAnalyzer(apply_stemming=False),
    "simple": lambda: SimpleAnalyzer(),
}


def get_analyzer(name: str | None) -> Analyzer:
    """Return analyzer by name, defaulting to the standard analyzer."""

    if name is None:
        return _ANALYZER_FACTORIES["default"]()
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized]()
