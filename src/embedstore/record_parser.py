"""Parser for the GloVe / word2vec text format.

Each line holds a key followed by whitespace-separated floats::

    king 0.50451 0.68607 -0.59517 ...

A line that is empty or starts with whitespace has an empty key and is
treated as blank. Dimensionality and duplicates are checked by the store
builder, not here.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import numpy as np

from .exceptions import FormatError

# ASCII whitespace only: keys may contain non-breaking spaces and other
# Unicode separators.
WS_SPLIT = re.compile(r"\s+", re.ASCII)

# Decimal floats, NaN and Infinity with an optional f/d suffix. Python's
# float() alone would also take "1_0", "inf" and "nan".
FLOAT_TOKEN = re.compile(
    r"[+-]?(?:NaN|Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)[fFdD]?",
    re.ASCII,
)


@dataclass
class EmbeddingRecord:
    """One parsed line. ``vector`` is None for blank lines."""
    key: str
    vector: Optional[np.ndarray]
    line_num: int

    @property
    def is_blank(self) -> bool:
        return self.vector is None


def parse_record(line: str, line_num: int) -> EmbeddingRecord:
    """Parse a single line of an embedding table.

    Args:
        line: Raw input line; a trailing line terminator is ignored.
        line_num: 1-based line number, used in error messages.

    Returns:
        An EmbeddingRecord. Its vector is a float32 array, possibly empty,
        or None if the key is empty.

    Raises:
        FormatError: If a vector element is not a valid float.
    """
    parts = WS_SPLIT.split(line.rstrip("\r\n"))
    # Trailing whitespace produces an empty last token.
    while len(parts) > 1 and parts[-1] == "":
        parts.pop()

    key = parts[0]
    if not key:
        return EmbeddingRecord(key="", vector=None, line_num=line_num)

    vector = np.empty(len(parts) - 1, dtype=np.float32)
    for i, token in enumerate(parts[1:]):
        if not FLOAT_TOKEN.fullmatch(token):
            raise FormatError(
                line_num,
                f"can't parse float # {i + 1}: '{token}'",
                token_index=i + 1,
            )
        vector[i] = float(token.rstrip("fFdD"))

    return EmbeddingRecord(key=key, vector=vector, line_num=line_num)


def iter_records(lines: Iterable[str], start: int = 1) -> Iterator[EmbeddingRecord]:
    """Lazily parse lines, numbering them from ``start``.

    Blank records are yielded too so callers can count lines. The first
    malformed line raises FormatError and ends the iteration.
    """
    for line_num, line in enumerate(lines, start):
        yield parse_record(line, line_num)
