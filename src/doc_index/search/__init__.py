"""
Search indexing and query engine package.

This package provides a pure-Python search stack:
- schema: Field definitions and boosts
- analyzers: Tokenizers and filters (case folding, stopwords, stemming)
- inverted_index: Term postings built per generation
- stats: BM25 scoring statistics
- bm25_engine: Query scoring engine
- snippet: Highlighted excerpts
- indexer: Corpus to generation builds
- storage: Snapshot persistence
"""
