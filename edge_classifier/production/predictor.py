"""Predictor lifecycle: create an engine, run inference, read scores, destroy."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import onnxruntime as ort

from edge_classifier.data.schema import ClassificationResult
from edge_classifier.decoding.formatting import DEFAULT_DELIMITER, DEFAULT_TOP_K
from edge_classifier.decoding.pipeline import decode
from edge_classifier.errors import (
    EmptyInputError,
    EmptyOutputError,
    ModelNotFoundError,
    NullContextError,
    ShapeMismatchError,
)
from edge_classifier.production.engines import HardwareMode, TensorSpec, open_engine

log = logging.getLogger(__name__)

_ENGINE_LOCK = threading.Lock()
_ENGINE_READY = False


def init_engine() -> None:
    """Process-wide runtime setup; calls after the first one do nothing."""
    global _ENGINE_READY
    with _ENGINE_LOCK:
        if _ENGINE_READY:
            return
        # 3 = errors only; verbose tensor output goes through our own logger
        ort.set_default_logger_severity(3)
        _ENGINE_READY = True
        log.debug("inference runtime initialized (onnxruntime %s)", ort.__version__)


def _dequantize(output: np.ndarray, spec: TensorSpec) -> np.ndarray:
    if output.dtype.kind == "f":
        return output.astype(np.float32, copy=False)
    values = output.astype(np.float32)
    if spec.scale:
        values = (values - spec.zero_point) * spec.scale
    return values


class Predictor:
    """Owns one engine handle and serializes inference on it.

    Only one ``run`` is in flight per predictor; concurrent callers wait on
    an internal lock. Use ``Predictor.create`` to open a model file.
    """

    def __init__(self, engine, batch: int, verbose: bool = False) -> None:
        if batch <= 0:
            raise ShapeMismatchError(f"batch must be positive, got {batch}", {"batch": batch})
        self._engine = engine
        self._batch = int(batch)
        self._scores: np.ndarray | None = None
        self._lock = threading.Lock()
        if verbose:
            self._log_tensors()

    @classmethod
    def create(
        cls,
        model_path: str | Path,
        batch: int = 1,
        mode: HardwareMode | str | int = HardwareMode.CPU,
        num_threads: int = 4,
        verbose: bool = False,
        profiling: bool = False,
    ) -> Predictor:
        """Open ``model_path`` on the requested hardware mode."""
        path = Path(model_path)
        if not path.is_file():
            raise ModelNotFoundError(f"file {path} not found", {"path": str(path)})
        if batch <= 0:
            raise ShapeMismatchError(f"batch must be positive, got {batch}", {"batch": batch})
        hardware = HardwareMode.parse(mode)
        init_engine()
        engine = open_engine(path, hardware, num_threads, profiling)
        log.info("loaded %s (batch=%d, mode=%s)", path.name, batch, hardware.name)
        return cls(engine, batch, verbose=verbose)

    def __enter__(self) -> Predictor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    @property
    def batch_size(self) -> int:
        return self._batch

    @property
    def closed(self) -> bool:
        return self._engine is None

    @property
    def features_per_row(self) -> int:
        scores = self.score_buffer()
        return scores.size // self._batch

    def _require_engine(self):
        if self._engine is None:
            raise NullContextError("empty predictor context")
        return self._engine

    def _log_tensors(self) -> None:
        for spec in self._engine.tensors():
            log.info(
                "%s: shape=%s dtype=%s scale=%s zero_point=%s",
                spec.name,
                spec.shape,
                np.dtype(spec.dtype).name,
                spec.scale,
                spec.zero_point,
            )

    def _input_shape(self, spec: TensorSpec, size: int) -> tuple[int, ...]:
        dims = list(spec.shape) or [None]
        dims[0] = self._batch
        unknown = [position for position, dim in enumerate(dims) if not dim or dim < 0]
        known = int(np.prod([dim for dim in dims if dim and dim > 0]))
        if len(unknown) > 1:
            raise ShapeMismatchError(
                f"cannot infer input shape {spec.shape} from {size} values",
                {"shape": spec.shape, "size": size},
            )
        if unknown:
            if size % known:
                raise ShapeMismatchError(
                    f"{size} input values do not fit shape {spec.shape} with batch {self._batch}",
                    {"shape": spec.shape, "size": size},
                )
            dims[unknown[0]] = size // known
        elif known != size:
            raise ShapeMismatchError(
                f"expected {known} input values for shape {tuple(dims)}, got {size}",
                {"expected": known, "size": size},
            )
        return tuple(dims)

    def _prepare_input(self, spec: TensorSpec, input_buffer) -> np.ndarray:
        if isinstance(input_buffer, (bytes, bytearray, memoryview)):
            if len(input_buffer) == 0:
                raise EmptyInputError("input data is empty")
            itemsize = np.dtype(spec.dtype).itemsize
            if len(input_buffer) % itemsize:
                raise ShapeMismatchError(
                    f"{len(input_buffer)} bytes is not a multiple of {np.dtype(spec.dtype).name}",
                    {"bytes": len(input_buffer), "itemsize": itemsize},
                )
            flat = np.frombuffer(input_buffer, dtype=spec.dtype)
        else:
            array = np.asarray(input_buffer)
            if array.size == 0:
                raise EmptyInputError("input data is empty")
            flat = array.astype(spec.dtype, copy=False).reshape(-1)
        return flat.reshape(self._input_shape(spec, flat.size))

    def _run(self, input_buffer) -> None:
        engine = self._require_engine()
        array = self._prepare_input(engine.input_spec, input_buffer)
        output = engine.invoke(array)
        self._scores = _dequantize(np.asarray(output), engine.output_spec)

    def _read_scores(self) -> np.ndarray:
        self._require_engine()
        if self._scores is None or self._scores.size == 0:
            raise EmptyOutputError("null predictions")
        return self._scores.reshape(-1)

    def run(self, input_buffer) -> None:
        """Run one forward pass over ``input_buffer``."""
        with self._lock:
            self._run(input_buffer)

    def score_buffer(self) -> np.ndarray:
        """Flat float32 scores produced by the last ``run``."""
        with self._lock:
            return self._read_scores()

    def predict(
        self,
        input_buffer,
        labels: Sequence[str],
        k: int = DEFAULT_TOP_K,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> ClassificationResult:
        """Run inference and decode the scores into Top-K labels."""
        with self._lock:
            self._run(input_buffer)
            scores = self._read_scores()
        return decode(scores, self._batch, scores.size // self._batch, labels, k, delimiter)

    def destroy(self) -> None:
        """Release the engine; later calls raise ``NullContextError``."""
        with self._lock:
            if self._engine is None:
                return
            profile = self._engine.close()
            if profile:
                log.info("profile written to %s", profile)
            self._engine = None
            self._scores = None

    close = destroy
