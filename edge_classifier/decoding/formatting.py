"""Top-K extraction and rendering of ranked rows."""

from __future__ import annotations

from edge_classifier.decoding.ranking import RankedRow
from edge_classifier.errors import EmptyRowError

DEFAULT_TOP_K = 5
DEFAULT_DELIMITER = "\\"


def top_k(ranked_row: RankedRow, k: int) -> RankedRow:
    """Return the first ``min(k, len(ranked_row))`` entries."""
    if k <= 0:
        return ()
    return tuple(ranked_row[:k])


def top_label(ranked_row: RankedRow) -> str:
    """Return the best label of a ranked row."""
    if not ranked_row:
        raise EmptyRowError("cannot take the top label of an empty row")
    return ranked_row[0].label


def join_top(
    ranked_row: RankedRow, k: int = DEFAULT_TOP_K, delimiter: str = DEFAULT_DELIMITER
) -> str:
    """Join the available Top-K labels with ``delimiter``.

    Rows shorter than ``k`` contribute only the labels they have.
    """
    return delimiter.join(item.label for item in top_k(ranked_row, k))
