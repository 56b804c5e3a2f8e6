"""Pydantic schemas for decoded classification output."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict


class ScoredFeature(BaseModel):
    """One class score paired with its index and label."""

    model_config = ConfigDict(frozen=True)

    index: int
    label: str
    score: float


class RowPrediction(BaseModel):
    """Top-K decoding of one batch element."""

    model_config = ConfigDict(frozen=True)

    label: str
    top_k: tuple[ScoredFeature, ...]
    joined: str


class ClassificationResult(BaseModel):
    """Decoded output of one inference call, one prediction per batch row."""

    model_config = ConfigDict(frozen=True)

    k: int
    delimiter: str
    rows: tuple[RowPrediction, ...]

    @property
    def labels(self) -> list[str]:
        """Top-1 label of every row."""
        return [row.label for row in self.rows]

    @property
    def joined(self) -> list[str]:
        """Delimited Top-K labels of every row."""
        return [row.joined for row in self.rows]

    def records(self) -> list[dict]:
        """Flatten rows into table records."""
        return [
            {
                "pred_label": row.label,
                "pred_topk_json": json.dumps([item.model_dump() for item in row.top_k]),
                "pred_joined": row.joined,
            }
            for row in self.rows
        ]
