"""Exception hierarchy for prediction and output decoding.

Every error carries a short machine-readable ``code`` and a ``details``
mapping so callers can report failures without parsing messages. Errors
also inherit from the closest builtin exception, so ``except IndexError``
or ``except IOError`` keep working for callers that do not know this module.
"""

from __future__ import annotations


class PredictorError(Exception):
    """Base class for all predictor and decoding errors."""

    code = "PREDICTOR_ERROR"

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ---- decoding ----
class EmptyInputError(PredictorError, ValueError):
    """Raised when there is no data to process."""

    code = "EMPTY_INPUT"


class ShapeMismatchError(PredictorError, ValueError):
    """Raised when buffer length, batch and feature count disagree."""

    code = "SHAPE_MISMATCH"


class LabelOverrunError(PredictorError, IndexError):
    """Raised when the label dictionary is shorter than the feature count."""

    code = "LABEL_OVERRUN"

    def __init__(self, index: int, label_count: int) -> None:
        super().__init__(
            f"no label for feature index {index}: label dictionary has {label_count} entries",
            {"index": index, "label_count": label_count},
        )
        self.index = index
        self.label_count = label_count


class EmptyRowError(PredictorError, ValueError):
    """Raised when a top label is requested from an empty ranked row."""

    code = "EMPTY_ROW"


class LabelSourceError(PredictorError, OSError):
    """Raised when a label source cannot be opened, read or parsed."""

    code = "LABEL_SOURCE_ERROR"


# ---- predictor lifecycle ----
class EmptyOutputError(PredictorError, RuntimeError):
    """Raised when the engine produced no scores."""

    code = "EMPTY_OUTPUT"


class NullContextError(PredictorError, RuntimeError):
    """Raised when a destroyed or invalid engine handle is used."""

    code = "NULL_CONTEXT"


class ModelNotFoundError(PredictorError, FileNotFoundError):
    """Raised when a model or label artifact is missing."""

    code = "MODEL_NOT_FOUND"
