import numpy as np
import pandas as pd
import pytest
from omegaconf import OmegaConf

from edge_classifier.production import infer
from edge_classifier.production.engines import TensorSpec
from edge_classifier.production.predictor import Predictor


class EchoEngine:
    """Returns its input as the class scores."""

    def __init__(self, batch: int) -> None:
        self.input_spec = TensorSpec(name="input", shape=(batch, 3), dtype=np.float32)
        self.output_spec = TensorSpec(name="scores", shape=(batch, 3), dtype=np.float32)

    def tensors(self):
        return [self.input_spec, self.output_spec]

    def invoke(self, array):
        return array.astype(np.float32)

    def close(self):
        return None


@pytest.fixture
def cfg(tmp_path, labels_file):
    model_path = tmp_path / "model.onnx"
    model_path.write_bytes(b"onnx")
    return OmegaConf.create(
        {
            "model": {
                "path": str(model_path),
                "labels_path": str(labels_file),
                "url": None,
                "labels_url": None,
                "batch": 2,
                "mode": "cpu",
                "num_threads": 1,
                "verbose": False,
                "profiling": False,
            },
            "infer": {"top_k": 2, "delimiter": "\\"},
            "logging": {"enable": False},
        }
    )


@pytest.fixture
def fake_predictor(monkeypatch):
    def build(cfg, model_path):
        return Predictor(EchoEngine(int(cfg.model.batch)), batch=int(cfg.model.batch))

    monkeypatch.setattr(infer, "build_predictor", build)


def test_predict_batch_writes_one_row_per_sample(cfg, tmp_path, fake_predictor):
    samples = np.array(
        [[0.9, 0.1, 0.0], [0.0, 0.2, 0.8], [0.1, 0.7, 0.2]], dtype=np.float32
    )
    input_path = tmp_path / "samples.npy"
    np.save(input_path, samples)
    output_path = tmp_path / "out" / "preds.csv"

    written = infer.predict_batch(cfg, str(input_path), str(output_path))

    table = pd.read_csv(written)
    assert table["pred_label"].tolist() == ["cat", "bird", "dog"]
    assert table["pred_joined"].tolist() == ["cat\\dog", "bird\\dog", "dog\\bird"]


def test_predict_file_returns_decoded_result(cfg, tmp_path, fake_predictor):
    input_path = tmp_path / "input.npy"
    np.save(input_path, np.array([[0.2, 0.5, 0.3], [0.6, 0.3, 0.1]], dtype=np.float32))

    result = infer.predict_file(cfg, str(input_path))

    assert [row["label"] for row in result["rows"]] == ["dog", "cat"]
    assert result["k"] == 2


def test_decode_file(cfg, tmp_path):
    scores_path = tmp_path / "scores.npy"
    np.save(scores_path, np.array([0.1, 0.9, 0.05], dtype=np.float32))

    result = infer.decode_file(cfg, str(scores_path))

    assert [item["label"] for item in result["rows"][0]["top_k"]] == ["dog", "cat"]


def test_iter_batches_pads_last_chunk():
    samples = np.arange(5 * 2).reshape(5, 2)

    chunks = list(infer._iter_batches(samples, 2))

    assert [valid for _, valid in chunks] == [2, 2, 1]
    assert chunks[-1][0].shape == (2, 2)
    assert chunks[-1][0][1].tolist() == [0, 0]
