"""Single decode entry point: score buffer plus labels to Top-K result."""

from __future__ import annotations

from collections.abc import Sequence

from edge_classifier.data.schema import ClassificationResult, RowPrediction
from edge_classifier.decoding.formatting import (
    DEFAULT_DELIMITER,
    DEFAULT_TOP_K,
    join_top,
    top_k,
    top_label,
)
from edge_classifier.decoding.ranking import rank_all
from edge_classifier.decoding.scores import wrap


def decode(
    scores,
    batch: int,
    features_per_row: int,
    labels: Sequence[str],
    k: int = DEFAULT_TOP_K,
    delimiter: str = DEFAULT_DELIMITER,
) -> ClassificationResult:
    """Decode a flat ``batch x features_per_row`` score buffer."""
    buffer = wrap(scores, batch, features_per_row)
    ranked_rows = rank_all(buffer, labels)
    rows = tuple(
        RowPrediction(
            label=top_label(ranked),
            top_k=top_k(ranked, k),
            joined=join_top(ranked, k, delimiter),
        )
        for ranked in ranked_rows
    )
    return ClassificationResult(k=k, delimiter=delimiter, rows=rows)
