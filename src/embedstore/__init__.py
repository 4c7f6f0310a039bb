"""In-memory word/entity embedding store.

This package parses text-format embedding tables (GloVe / word2vec text
format) into an immutable store of L2-normalized vectors, and provides
vector averaging and brute-force k-nearest-neighbor search over it.
"""

from .distances import CosineDistance, Distance, L2Distance, create_distance
from .exceptions import DuplicateKeyWarning, FormatError
from .record_parser import EmbeddingRecord, iter_records, parse_record
from .search import VectorSearchEntry, knn_search, search_by_vector
from .store import EmbeddingStore, EmbeddingStoreBuilder, build_store, load_embeddings
from .vector_math import FLOAT_EPS, average_document, average_text, average_weighted, normalize_l2

__all__ = [
    "CosineDistance",
    "Distance",
    "DuplicateKeyWarning",
    "EmbeddingRecord",
    "EmbeddingStore",
    "EmbeddingStoreBuilder",
    "FLOAT_EPS",
    "FormatError",
    "L2Distance",
    "VectorSearchEntry",
    "average_document",
    "average_text",
    "average_weighted",
    "build_store",
    "create_distance",
    "iter_records",
    "knn_search",
    "load_embeddings",
    "normalize_l2",
    "parse_record",
    "search_by_vector",
]
