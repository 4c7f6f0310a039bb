"""Vector algebra over stored embeddings: L2 normalization and averages."""

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence, Tuple

import numpy as np

from .record_parser import WS_SPLIT

if TYPE_CHECKING:
    from .store import EmbeddingStore

logger = logging.getLogger(__name__)

# Norms below this are treated as zero and left alone.
FLOAT_EPS = 2 * float(np.finfo(np.float32).tiny)


def normalize_l2(vector: np.ndarray) -> np.ndarray:
    """Scale a vector to unit Euclidean norm.

    Float arrays are scaled in place. Anything else (integer arrays, lists)
    is first copied into a new float32 array. Vectors whose norm is below
    FLOAT_EPS are returned unchanged.

    Args:
        vector: 1D vector. Float arrays must be writeable.

    Returns:
        The normalized array: the input itself when it was a float array.
    """
    if not (isinstance(vector, np.ndarray) and np.issubdtype(vector.dtype, np.floating)):
        vector = np.asarray(vector, dtype=np.float32)
    norm = np.sqrt(np.dot(vector, vector))
    if abs(norm) >= FLOAT_EPS:
        vector /= norm
    return vector


def average_text(store: "EmbeddingStore", text: str, normalize: bool = False) -> np.ndarray:
    """Average the vectors of the whitespace-separated tokens of ``text``.

    Unknown tokens are ignored, and the sum is divided by the number of
    tokens that were found. If none are found the result is all zeros.

    Args:
        store: Store to look tokens up in.
        text: Whitespace-delimited text.
        normalize: If True, L2-normalize the average.

    Returns:
        A new float32 array of length ``store.dimension``.
    """
    result = np.zeros(store.dimension, dtype=np.float32)
    found = 0

    for token in WS_SPLIT.split(text):
        vector = store.vector_by_key(token)
        if vector is not None:
            result += vector
            found += 1

    if found > 0:
        result /= found

    logger.debug(f"Text average: {found} known tokens")

    if normalize:
        normalize_l2(result)
    return result


def average_weighted(
    store: "EmbeddingStore",
    word_ids: Sequence[int],
    quantities: Sequence[float],
    weight: Optional[Callable[[int], float]] = None,
    normalize: bool = False,
    divide_by_weight_sum: bool = False,
) -> np.ndarray:
    """Weighted average of the vectors of a bag of word ids.

    Each found id contributes ``vector * quantity * weight(id)``. Ids with
    no vector in the store's id map are ignored.

    NOTE: by default the sum is divided by the number of ids that were
    found, not by the total quantity or weight. Pass
    ``divide_by_weight_sum=True`` to divide by the sum of
    ``quantity * weight`` over the found ids instead.

    Args:
        store: Store built with a resolver, so that ids map to vectors.
        word_ids: Word ids of the document, in order.
        quantities: Multiplicity of each id, aligned with ``word_ids``.
        weight: Optional term weight such as IDF. Defaults to 1.0 per id.
        normalize: If True, L2-normalize the average.
        divide_by_weight_sum: Use the weight-sum divisor described above.

    Returns:
        A new float32 array of length ``store.dimension``.

    Raises:
        ValueError: If ``word_ids`` and ``quantities`` differ in length.
    """
    if len(word_ids) != len(quantities):
        raise ValueError(
            f"Got {len(word_ids)} word ids but {len(quantities)} quantities"
        )

    result = np.zeros(store.dimension, dtype=np.float32)
    found = 0
    weight_sum = 0.0

    for word_id, qty in zip(word_ids, quantities):
        vector = store.vector_by_id(word_id)
        if vector is None:
            continue
        mult = weight(word_id) if weight is not None else 1.0
        result += vector * np.float32(mult * qty)
        weight_sum += mult * qty
        found += 1

    if divide_by_weight_sum:
        if weight_sum != 0:
            result /= weight_sum
    elif found > 0:
        result /= found

    if normalize:
        normalize_l2(result)
    return result


def average_document(
    store: "EmbeddingStore",
    doc: Iterable[Tuple[int, float]],
    weight: Optional[Callable[[int], float]] = None,
    normalize: bool = False,
    divide_by_weight_sum: bool = False,
) -> np.ndarray:
    """Same as average_weighted, for a document given as (id, quantity) pairs."""
    pairs = list(doc)
    word_ids = [word_id for word_id, _ in pairs]
    quantities = [qty for _, qty in pairs]
    return average_weighted(
        store,
        word_ids,
        quantities,
        weight=weight,
        normalize=normalize,
        divide_by_weight_sum=divide_by_weight_sum,
    )
