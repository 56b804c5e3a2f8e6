"""Thin adapters over the native inference runtimes.

Both engines expose the same small surface used by the predictor:
``input_spec``, ``output_spec``, ``tensors()``, ``invoke(array)`` and
``close()``. ONNX Runtime is the default backend; LiteRT (the TensorFlow
Lite interpreter) is used for ``.tflite`` files and needs the ``tflite``
extra.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

import numpy as np
import onnxruntime as ort

log = logging.getLogger(__name__)

_ORT_DTYPES = {
    "tensor(float)": np.float32,
    "tensor(float16)": np.float16,
    "tensor(double)": np.float64,
    "tensor(uint8)": np.uint8,
    "tensor(int8)": np.int8,
    "tensor(int32)": np.int32,
    "tensor(int64)": np.int64,
}


class HardwareMode(IntEnum):
    """Device the engine should run on."""

    CPU = 0
    GPU = 1
    NNAPI = 2

    @classmethod
    def parse(cls, value) -> HardwareMode:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError as error:
                raise ValueError(f"Unknown hardware mode: {value}") from error
        return cls(int(value))

    @property
    def providers(self) -> list[str]:
        if self is HardwareMode.GPU:
            return ["CUDAExecutionProvider", "CPUExecutionProvider"]
        if self is HardwareMode.NNAPI:
            return ["NnapiExecutionProvider", "CPUExecutionProvider"]
        return ["CPUExecutionProvider"]


@dataclass(frozen=True)
class TensorSpec:
    """Name, shape, dtype and quantization parameters of one tensor."""

    name: str
    shape: tuple
    dtype: type
    scale: float = 0.0
    zero_point: int = 0


class OnnxRuntimeEngine:
    """ONNX Runtime session bound to a single model file."""

    def __init__(
        self,
        model_path: Path,
        mode: HardwareMode = HardwareMode.CPU,
        num_threads: int = 4,
        profiling: bool = False,
    ) -> None:
        options = ort.SessionOptions()
        options.intra_op_num_threads = num_threads
        options.enable_profiling = profiling
        self.profiling = profiling

        available = set(ort.get_available_providers())
        providers = [name for name in mode.providers if name in available]
        if mode.providers[0] not in available:
            log.info("%s acceleration is unsupported on this platform", mode.name)
        self.session = ort.InferenceSession(
            str(model_path),
            sess_options=options,
            providers=providers or ["CPUExecutionProvider"],
        )
        self.input_spec = self._spec(self.session.get_inputs()[0])
        self.output_spec = self._spec(self.session.get_outputs()[0])

    @staticmethod
    def _spec(node) -> TensorSpec:
        shape = tuple(dim if isinstance(dim, int) else None for dim in node.shape)
        return TensorSpec(
            name=node.name, shape=shape, dtype=_ORT_DTYPES.get(node.type, np.float32)
        )

    def tensors(self) -> list[TensorSpec]:
        nodes = list(self.session.get_inputs()) + list(self.session.get_outputs())
        return [self._spec(node) for node in nodes]

    def invoke(self, array: np.ndarray) -> np.ndarray:
        outputs = self.session.run([self.output_spec.name], {self.input_spec.name: array})
        return np.asarray(outputs[0])

    def close(self) -> str | None:
        if self.profiling:
            return self.session.end_profiling()
        return None


class LiteRTEngine:
    """LiteRT interpreter bound to a single ``.tflite`` model."""

    def __init__(
        self,
        model_path: Path,
        mode: HardwareMode = HardwareMode.CPU,
        num_threads: int = 4,
        profiling: bool = False,
    ) -> None:
        try:
            from ai_edge_litert.interpreter import Interpreter
        except ImportError as error:
            raise ModuleNotFoundError(
                "LiteRT is not installed; install the 'tflite' extra to run .tflite models"
            ) from error

        if mode is not HardwareMode.CPU:
            log.warning("%s acceleration is unsupported by LiteRT here, using CPU", mode.name)
        if profiling:
            log.warning("Profiling is only available with the ONNX Runtime backend")
        self.interpreter = Interpreter(model_path=str(model_path), num_threads=num_threads)
        self.interpreter.allocate_tensors()
        self._input = self.interpreter.get_input_details()[0]
        self._output = self.interpreter.get_output_details()[0]
        self.input_spec = self._spec(self._input)
        self.output_spec = self._spec(self._output)

    @staticmethod
    def _spec(details: dict) -> TensorSpec:
        scale, zero_point = details.get("quantization", (0.0, 0))
        return TensorSpec(
            name=details["name"],
            shape=tuple(int(dim) for dim in details["shape"]),
            dtype=details["dtype"],
            scale=float(scale),
            zero_point=int(zero_point),
        )

    def tensors(self) -> list[TensorSpec]:
        return [self._spec(details) for details in self.interpreter.get_tensor_details()]

    def invoke(self, array: np.ndarray) -> np.ndarray:
        if tuple(self._input["shape"]) != array.shape:
            self.interpreter.resize_tensor_input(self._input["index"], list(array.shape))
            self.interpreter.allocate_tensors()
            self._input = self.interpreter.get_input_details()[0]
            self._output = self.interpreter.get_output_details()[0]
        self.interpreter.set_tensor(self._input["index"], array)
        self.interpreter.invoke()
        return self.interpreter.get_tensor(self._output["index"])

    def close(self) -> str | None:
        return None


def open_engine(
    model_path: Path,
    mode: HardwareMode = HardwareMode.CPU,
    num_threads: int = 4,
    profiling: bool = False,
):
    """Open the engine matching the model file suffix."""
    suffix = model_path.suffix.lower()
    if suffix == ".onnx":
        return OnnxRuntimeEngine(model_path, mode, num_threads, profiling)
    if suffix == ".tflite":
        return LiteRTEngine(model_path, mode, num_threads, profiling)
    raise ValueError(f"Unsupported model format: {model_path}")
