from __future__ import annotations

import numpy as np
import pytest

from edge_classifier.production.engines import TensorSpec


class FakeEngine:
    """Engine double returning preset scores for every invocation."""

    def __init__(
        self,
        scores,
        input_shape=(1, 4),
        input_dtype=np.float32,
        output_dtype=np.float32,
        scale: float = 0.0,
        zero_point: int = 0,
    ) -> None:
        self.scores = np.asarray(scores, dtype=output_dtype)
        self.input_spec = TensorSpec(name="input", shape=tuple(input_shape), dtype=input_dtype)
        self.output_spec = TensorSpec(
            name="scores",
            shape=self.scores.shape,
            dtype=output_dtype,
            scale=scale,
            zero_point=zero_point,
        )
        self.inputs: list[np.ndarray] = []
        self.closed = False

    def tensors(self):
        return [self.input_spec, self.output_spec]

    def invoke(self, array):
        self.inputs.append(array)
        return self.scores

    def close(self):
        self.closed = True
        return None


@pytest.fixture
def fake_engine_factory():
    return FakeEngine


@pytest.fixture
def labels_file(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("cat\ndog\nbird\n\n", encoding="utf-8")
    return path
