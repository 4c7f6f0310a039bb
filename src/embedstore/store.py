"""In-memory embedding store.

A store is assembled once by EmbeddingStoreBuilder and is immutable
afterwards, so it can be shared by any number of reader threads.

NOTE: vectors live as rows of a single read-only float32 matrix. The
key map and the id map both hold row numbers, so a key and its id always
resolve to the very same vector and nothing is copied.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .distances import Distance
from .exceptions import DuplicateKeyWarning, FormatError
from .record_parser import EmbeddingRecord, iter_records
from .search import VectorSearchEntry, knn_search
from .vector_math import average_text, average_weighted, normalize_l2

logger = logging.getLogger(__name__)

# Maps a key to a compact integer id; None filters the key out of the id map.
Resolver = Callable[[str], Optional[int]]

REPORT_INTERVAL_QTY = 50000


@dataclass(frozen=True, eq=False)
class EmbeddingStore:
    """Read-only lookup from keys (and optionally ids) to unit vectors.

    Build it with build_store() or load_embeddings() rather than directly.
    """
    dimension: int
    matrix: np.ndarray
    key_rows: Mapping[str, int]
    id_rows: Mapping[int, int]
    zero_vector: np.ndarray
    duplicates: Tuple[DuplicateKeyWarning, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.key_rows)

    def __contains__(self, key: object) -> bool:
        return key in self.key_rows

    def keys(self) -> Iterable[str]:
        """Keys in insertion order."""
        return self.key_rows.keys()

    def vector_by_key(self, key: str) -> Optional[np.ndarray]:
        """Vector for a key, or None if the key is unknown."""
        row = self.key_rows.get(key)
        return None if row is None else self.matrix[row]

    def vector_by_id(self, word_id: int) -> Optional[np.ndarray]:
        """Vector for a word id, or None.

        Always None if the store was built without a resolver.
        """
        row = self.id_rows.get(word_id)
        return None if row is None else self.matrix[row]

    def vector_by_key_or_zero(self, key: str) -> np.ndarray:
        """Vector for a key, falling back to the all-zero vector."""
        vector = self.vector_by_key(key)
        return self.zero_vector if vector is None else vector

    def average_text(self, text: str, normalize: bool = False) -> np.ndarray:
        """See vector_math.average_text."""
        return average_text(self, text, normalize=normalize)

    def average_weighted(
        self,
        word_ids: Sequence[int],
        quantities: Sequence[float],
        weight: Optional[Callable[[int], float]] = None,
        normalize: bool = False,
        divide_by_weight_sum: bool = False,
    ) -> np.ndarray:
        """See vector_math.average_weighted."""
        return average_weighted(
            self,
            word_ids,
            quantities,
            weight=weight,
            normalize=normalize,
            divide_by_weight_sum=divide_by_weight_sum,
        )

    def knn_search(
        self,
        query_key: str,
        distance: Union[Distance, str],
        exclude_exact_match: bool = True,
        k: int = 10,
    ) -> List[VectorSearchEntry]:
        """See search.knn_search."""
        return knn_search(self, query_key, distance, exclude_exact_match=exclude_exact_match, k=k)

    def __repr__(self) -> str:
        return (
            f"EmbeddingStore(size={len(self)}, dimension={self.dimension}, "
            f"ids={len(self.id_rows)})"
        )


class EmbeddingStoreBuilder:
    """Accumulates parsed records and produces an immutable EmbeddingStore.

    The first non-blank record fixes the dimensionality. Every accepted
    vector is L2-normalized before it is stored.
    """

    def __init__(
        self,
        resolver: Optional[Resolver] = None,
        source_name: str = "<lines>",
        report_interval: int = REPORT_INTERVAL_QTY,
    ):
        """Initialize an empty builder.

        Args:
            resolver: Optional key-to-id recoder. Keys it maps to None are
                kept in the key map but left out of the id map. If two
                keys resolve to the same id, the id points at the later one.
            source_name: Name of the input, used in log messages.
            report_interval: Log progress every this many lines.
                Zero or negative disables progress logging.
        """
        self.resolver = resolver
        self.source_name = source_name
        self.report_interval = report_interval

        self.dimension = 0
        self._rows: List[np.ndarray] = []
        self._key_rows: Dict[str, int] = {}
        self._id_rows: Dict[int, int] = {}
        self._duplicates: List[DuplicateKeyWarning] = []
        self._built = False

    def add(self, record: EmbeddingRecord) -> None:
        """Add one parsed record.

        Raises:
            FormatError: If the record has no vector elements, or its
                length differs from the established dimensionality.
            RuntimeError: If build() was already called.
        """
        if self._built:
            raise RuntimeError("Cannot add records after build()")

        if record.is_blank:
            return

        vector = record.vector
        if self.dimension == 0:
            if len(vector) == 0:
                raise FormatError(record.line_num, "no vector elements found")
            self.dimension = len(vector)
        elif len(vector) != self.dimension:
            raise FormatError(
                record.line_num,
                f"# of vector elements ({len(vector)}) is different "
                f"from preceding lines ({self.dimension})",
            )

        if record.key in self._key_rows:
            duplicate = DuplicateKeyWarning(record.key, record.line_num)
            logger.info(str(duplicate))
            self._duplicates.append(duplicate)
            return

        row = len(self._rows)
        self._rows.append(normalize_l2(vector))
        self._key_rows[record.key] = row

        if self.resolver is not None:
            word_id = self.resolver(record.key)
            if word_id is not None:
                self._id_rows[int(word_id)] = row

    def add_lines(self, lines: Iterable[str]) -> int:
        """Parse and add every line. Returns the number of lines read."""
        line_count = 0
        for record in iter_records(lines):
            self.add(record)
            line_count = record.line_num
            if self.report_interval > 0 and line_count % self.report_interval == 0:
                logger.info(
                    f"Loaded {line_count} source word vectors from '{self.source_name}'"
                )
        return line_count

    def build(self) -> EmbeddingStore:
        """Freeze the accumulated vectors into an EmbeddingStore.

        Raises:
            RuntimeError: If build() was already called.
        """
        if self._built:
            raise RuntimeError("build() can only be called once")
        self._built = True

        if self._rows:
            matrix = np.stack(self._rows)
        else:
            matrix = np.empty((0, self.dimension), dtype=np.float32)
        matrix.flags.writeable = False
        self._rows = []

        zero_vector = np.zeros(self.dimension, dtype=np.float32)
        zero_vector.flags.writeable = False

        return EmbeddingStore(
            dimension=self.dimension,
            matrix=matrix,
            key_rows=MappingProxyType(self._key_rows),
            id_rows=MappingProxyType(self._id_rows),
            zero_vector=zero_vector,
            duplicates=tuple(self._duplicates),
        )


def build_store(
    lines: Iterable[str],
    resolver: Optional[Resolver] = None,
    source_name: str = "<lines>",
    report_interval: int = REPORT_INTERVAL_QTY,
) -> EmbeddingStore:
    """Build a store from any iterable of text lines.

    ``lines`` can be an open file, a decompressing stream wrapper or a
    plain list. Construction is all-or-nothing: the first FormatError
    propagates and no store is returned.

    Args:
        lines: Input lines in the word2vec/GloVe text format.
        resolver: Optional key-to-id recoder and filter.
        source_name: Name of the input, used in log messages.
        report_interval: Log progress every this many lines.

    Returns:
        The finished EmbeddingStore.

    Raises:
        FormatError: On the first malformed line.
    """
    builder = EmbeddingStoreBuilder(
        resolver=resolver, source_name=source_name, report_interval=report_interval
    )
    line_count = builder.add_lines(lines)
    store = builder.build()

    logger.info(
        f"Finished loading {len(store)} word vectors ({len(store.id_rows)} with ids) "
        f"from '{source_name}' (out of {line_count} lines), "
        f"dimensionality: {store.dimension}"
    )
    return store


def load_embeddings(
    path: str,
    resolver: Optional[Resolver] = None,
    encoding: str = "utf-8",
    report_interval: int = REPORT_INTERVAL_QTY,
) -> EmbeddingStore:
    """Load a plain-text embedding file.

    Compressed inputs are not handled here: open them with the matching
    decompressor in text mode and pass the stream to build_store().

    Raises:
        FileNotFoundError: If the file does not exist.
        FormatError: On the first malformed line.
    """
    logger.debug(f"Loading embeddings from '{path}'")
    with open(path, "r", encoding=encoding) as f:
        return build_store(f, resolver=resolver, source_name=str(path), report_interval=report_interval)
