"""Distance functions for nearest-neighbor search.

Lower is more similar. Every distance can score a single pair or a whole
(n, dim) matrix against one query vector.
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np


class Distance(ABC):
    """Abstract base class for a symmetric distance between vectors."""

    name: str = ""

    @abstractmethod
    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two 1D vectors of equal length."""
        pass

    def compute_many(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        """Distance from ``query`` to each row of ``vectors``.

        Subclasses override this with a vectorized version.
        """
        return np.array([self.compute(query, row) for row in vectors], dtype=np.float32)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class L2Distance(Distance):
    """Euclidean distance."""

    name = "l2"

    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        diff = a - b
        return float(np.sqrt(np.dot(diff, diff)))

    def compute_many(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        if vectors.shape[0] == 0:
            return np.empty(0, dtype=np.float32)
        # Row-wise dot of (vectors - query)
        diff = vectors - query
        return np.sqrt(np.einsum('ij,ij->i', diff, diff))


class CosineDistance(Distance):
    """One minus cosine similarity.

    A zero vector has similarity 0 with everything, i.e. distance 1.
    """

    name = "cosine"

    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        norms = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
        if norms == 0.0:
            return 1.0
        return 1.0 - float(np.dot(a, b)) / norms

    def compute_many(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        if vectors.shape[0] == 0:
            return np.empty(0, dtype=np.float32)
        dots = vectors @ query
        norms = np.linalg.norm(vectors, axis=1) * np.linalg.norm(query)
        similarities = np.zeros(vectors.shape[0], dtype=np.float32)
        mask = norms > 0
        similarities[mask] = dots[mask] / norms[mask]
        return 1.0 - similarities


DISTANCE_CLASSES: Dict[str, Type[Distance]] = {
    L2Distance.name: L2Distance,
    CosineDistance.name: CosineDistance,
}


def create_distance(name: str) -> Distance:
    """Create a distance by name ("l2" or "cosine", case-insensitive).

    Raises:
        ValueError: If the name is not registered.
    """
    cls = DISTANCE_CLASSES.get(name.strip().lower())
    if cls is None:
        raise ValueError(
            f"Unknown distance '{name}'. "
            f"Available: {list(DISTANCE_CLASSES.keys())}"
        )
    return cls()
