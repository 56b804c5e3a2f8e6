"""Rank the scores of one batch row against the label dictionary."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from edge_classifier.data.schema import ScoredFeature
from edge_classifier.decoding.scores import ScoreBuffer
from edge_classifier.errors import LabelOverrunError

RankedRow = tuple[ScoredFeature, ...]


def rank(row, labels: Sequence[str]) -> RankedRow:
    """Order a row by score descending, ties broken by ascending index.

    ``np.argsort(...)[::-1]`` would reverse the order of equal scores, so the
    row is negated and sorted with a stable sort instead.
    """
    scores = np.asarray(row, dtype=np.float64).reshape(-1)
    feature_count = scores.size
    if feature_count > len(labels):
        raise LabelOverrunError(index=len(labels), label_count=len(labels))
    if feature_count == 0:
        return ()

    order = np.argsort(-scores, kind="stable")
    return tuple(
        ScoredFeature(index=int(index), label=labels[int(index)], score=float(scores[index]))
        for index in order
    )


def rank_all(buffer: ScoreBuffer, labels: Sequence[str]) -> list[RankedRow]:
    """Rank every row of ``buffer``."""
    if buffer.features_per_row > len(labels):
        raise LabelOverrunError(index=len(labels), label_count=len(labels))
    return [rank(row, labels) for row in buffer.rows()]
