"""Input, score and output table I/O helpers."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

RAW_SUFFIXES = {".bin", ".raw"}
TABLE_SUFFIXES = {".csv", ".parquet", ".pq"}


def read_table(path: Path) -> pd.DataFrame:
    """Read CSV or Parquet file by suffix."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in {".parquet", ".pq"}:
        return pd.read_parquet(path)
    raise ValueError(f"Unsupported table format: {path}")


def write_table(dataframe: pd.DataFrame, path: Path) -> None:
    """Write prediction records to CSV or Parquet by suffix."""
    suffix = path.suffix.lower()
    if suffix not in TABLE_SUFFIXES:
        raise ValueError(f"Unsupported table format: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        dataframe.to_csv(path, index=False)
    else:
        dataframe.to_parquet(path, index=False)


def read_input(path: Path) -> np.ndarray | bytes:
    """Load a model input: a ``.npy`` array or raw bytes passed through untouched."""
    if not path.exists():
        raise FileNotFoundError(f"Input not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".npy":
        return np.load(path, allow_pickle=False)
    if suffix in RAW_SUFFIXES:
        return path.read_bytes()
    raise ValueError(f"Unsupported input format: {path}")


def read_scores(path: Path) -> np.ndarray:
    """Load a ``batch x features`` score matrix from ``.npy``, CSV or Parquet."""
    if not path.exists():
        raise FileNotFoundError(f"Scores not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".npy":
        scores = np.load(path, allow_pickle=False)
    elif suffix in TABLE_SUFFIXES:
        scores = read_table(path).to_numpy(dtype=np.float32)
    else:
        raise ValueError(f"Unsupported scores format: {path}")
    if scores.ndim == 1:
        scores = scores.reshape(1, -1)
    return scores.reshape(scores.shape[0], -1)
