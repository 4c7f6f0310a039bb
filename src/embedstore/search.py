"""Brute-force k-nearest-neighbor search over an EmbeddingStore.

Every stored vector is scored against the query; a bounded max-heap keeps
the k best entries seen so far. O(n log k) time, O(k) extra space plus
one fixed-size block of scores, no index structure.
"""

import heapq
import logging
from dataclasses import dataclass
from itertools import islice
from typing import TYPE_CHECKING, List, Optional, Union

import numpy as np

from .distances import Distance, create_distance

if TYPE_CHECKING:
    from .store import EmbeddingStore

logger = logging.getLogger(__name__)

# Rows scored per distance call; bounds the per-query temporaries.
BLOCK_ROWS = 4096


@dataclass(frozen=True)
class VectorSearchEntry:
    """One search hit. Lower distance is more similar."""
    key: str
    distance: float

    def to_dict(self) -> dict:
        return {"key": self.key, "distance": self.distance}

    def __str__(self) -> str:
        return f"{self.key} {self.distance}"


class _MaxHeapItem:
    """Reverses the ordering so heapq's min-heap keeps the worst entry on top.

    Entries are ranked by (distance, key), which makes ties deterministic.
    """

    __slots__ = ("distance", "key")

    def __init__(self, distance: float, key: str):
        self.distance = distance
        self.key = key

    def __lt__(self, other: "_MaxHeapItem") -> bool:
        return (self.distance, self.key) > (other.distance, other.key)


def _resolve_distance(distance: Union[Distance, str]) -> Distance:
    if isinstance(distance, str):
        return create_distance(distance)
    return distance


def search_by_vector(
    store: "EmbeddingStore",
    query_vector: np.ndarray,
    distance: Union[Distance, str],
    k: int = 10,
    exclude_key: Optional[str] = None,
    block_rows: int = BLOCK_ROWS,
) -> List[VectorSearchEntry]:
    """Find the k stored entries closest to an arbitrary vector.

    The matrix is scored ``block_rows`` rows at a time, so temporaries stay
    bounded no matter how large the store is.

    Args:
        store: Store to scan.
        query_vector: 1D vector of length ``store.dimension``.
        distance: Distance object, or a registered name such as "cosine".
        k: Number of neighbors to return. Zero yields an empty list.
        exclude_key: Key to leave out of the results, if any.
        block_rows: Rows scored per distance call.

    Returns:
        Up to k VectorSearchEntry objects, ascending by distance, ties
        ordered by key.

    Raises:
        ValueError: If k is negative, block_rows is not positive, the
            distance name is unknown or the query has the wrong dimension.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    query_vector = np.asarray(query_vector, dtype=np.float32)
    if query_vector.shape != (store.dimension,):
        raise ValueError(
            f"Query vector shape {query_vector.shape} does not match "
            f"store dimension {store.dimension}"
        )

    if block_rows <= 0:
        raise ValueError(f"block_rows must be positive, got {block_rows}")

    dist = _resolve_distance(distance)

    if k == 0 or len(store) == 0:
        return []

    # Rows are numbered in key insertion order, so the i-th key owns row i.
    keys = iter(store.key_rows.keys())
    heap: List[_MaxHeapItem] = []
    for start in range(0, len(store), block_rows):
        block = store.matrix[start:start + block_rows]
        scores = dist.compute_many(query_vector, block)
        for key, score in zip(islice(keys, len(block)), scores):
            if exclude_key is not None and key == exclude_key:
                continue
            item = _MaxHeapItem(float(score), key)
            if len(heap) < k:
                heapq.heappush(heap, item)
            elif (item.distance, item.key) < (heap[0].distance, heap[0].key):
                heapq.heapreplace(heap, item)

    results = []
    while heap:
        item = heapq.heappop(heap)
        results.append(VectorSearchEntry(key=item.key, distance=item.distance))
    results.reverse()

    logger.debug(f"Search returned {len(results)} results for k={k} using {dist!r}")
    return results


def knn_search(
    store: "EmbeddingStore",
    query_key: str,
    distance: Union[Distance, str],
    exclude_exact_match: bool = True,
    k: int = 10,
) -> List[VectorSearchEntry]:
    """Find the k stored entries closest to the vector of ``query_key``.

    Args:
        store: Store to scan.
        query_key: Key whose vector is the query.
        distance: Distance object, or a registered name such as "l2".
        exclude_exact_match: If True, the query key itself is not returned.
        k: Number of neighbors to return.

    Returns:
        Up to k entries ascending by distance; empty if the key is unknown.

    Raises:
        ValueError: If k is negative or the distance name is unknown.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    distance = _resolve_distance(distance)
    query_vector = store.vector_by_key(query_key)
    if query_vector is None:
        logger.debug(f"Query key '{query_key}' not found, returning []")
        return []

    return search_by_vector(
        store,
        query_vector,
        distance,
        k=k,
        exclude_key=query_key if exclude_exact_match else None,
    )
