"""Errors and diagnostics raised while loading embedding tables."""

from typing import Optional


class FormatError(ValueError):
    """A malformed line in an embedding table.

    Fatal to store construction: the whole load is aborted and no partial
    store is returned.

    Attributes:
        line_num: 1-based line number of the offending line.
        token_index: 1-based position of the vector element that failed to
            parse, or None when the problem is not a single token.
        reason: Human-readable description without the line prefix.
    """

    def __init__(self, line_num: int, reason: str, token_index: Optional[int] = None):
        self.line_num = line_num
        self.token_index = token_index
        self.reason = reason
        super().__init__(f"Wrong format in line {line_num}, {reason}")


class DuplicateKeyWarning(UserWarning):
    """A key that appeared more than once. The first vector is kept.

    Never raised by the loader; instances are logged and collected in
    ``EmbeddingStore.duplicates``.
    """

    def __init__(self, key: str, line_num: int):
        self.key = key
        self.line_num = line_num
        super().__init__(f"Duplicate key: '{key}' line: {line_num}")
