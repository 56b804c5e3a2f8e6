"""Read-only batch x features view over a flat score buffer."""

from __future__ import annotations

import numpy as np

from edge_classifier.errors import EmptyInputError, ShapeMismatchError


def _as_flat_array(buffer) -> np.ndarray:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        size = memoryview(buffer).nbytes
        itemsize = np.dtype(np.float32).itemsize
        if size % itemsize:
            raise ShapeMismatchError(
                f"{size} bytes is not a multiple of float32",
                {"bytes": size, "itemsize": itemsize},
            )
        return np.frombuffer(buffer, dtype=np.float32)
    array = np.asarray(buffer)
    if array.dtype.kind != "f":
        array = array.astype(np.float64)
    return array.reshape(-1)


class ScoreBuffer:
    """Logical ``batch x features_per_row`` view of model scores.

    Nothing is copied when the buffer is already a contiguous numeric array
    or a bytes-like float32 buffer; rows are handed out as read-only views.
    """

    def __init__(self, matrix: np.ndarray) -> None:
        self._matrix = matrix

    @property
    def batch(self) -> int:
        return int(self._matrix.shape[0])

    @property
    def features_per_row(self) -> int:
        return int(self._matrix.shape[1])

    def __len__(self) -> int:
        return self._matrix.size

    def row(self, index: int) -> np.ndarray:
        """Return the scores of batch element ``index``."""
        if not isinstance(index, (int, np.integer)) or not 0 <= index < self.batch:
            raise IndexError(f"row {index} out of range for batch of {self.batch}")
        return self._matrix[index]

    def rows(self):
        for index in range(self.batch):
            yield self._matrix[index]


def wrap(buffer, batch: int, features_per_row: int) -> ScoreBuffer:
    """Validate ``buffer`` against the declared shape and wrap it."""
    flat = _as_flat_array(buffer)
    if flat.size == 0 or batch == 0:
        raise EmptyInputError(
            "score buffer is empty", {"length": int(flat.size), "batch": batch}
        )
    if batch < 0 or features_per_row <= 0:
        raise ShapeMismatchError(
            f"invalid shape batch={batch} features_per_row={features_per_row}",
            {"batch": batch, "features_per_row": features_per_row},
        )
    expected = batch * features_per_row
    if flat.size != expected:
        raise ShapeMismatchError(
            f"score buffer has {flat.size} values, expected {batch} x {features_per_row} = {expected}",
            {"length": int(flat.size), "expected": expected},
        )
    matrix = flat.reshape(batch, features_per_row)
    matrix.flags.writeable = False
    return ScoreBuffer(matrix)
