import pytest
from omegaconf import OmegaConf

from edge_classifier.data import download
from edge_classifier.errors import ModelNotFoundError


class FakeResponse:
    def __init__(self, payload: bytes) -> None:
        self.payload = payload

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self) -> None:
        return None

    def iter_content(self, chunk_size):
        yield self.payload


def test_existing_artifact_is_not_downloaded(tmp_path, monkeypatch):
    path = tmp_path / "model.onnx"
    path.write_bytes(b"model")
    monkeypatch.setattr(download.requests, "get", pytest.fail)

    assert download.ensure_artifact(path, "http://example.invalid/model", "model") == path


def test_missing_artifact_without_url(tmp_path):
    with pytest.raises(ModelNotFoundError):
        download.ensure_artifact(tmp_path / "model.onnx", None, "model")


def test_ensure_model_downloads_missing_files(tmp_path, monkeypatch):
    requested = []

    def fake_get(url, timeout, stream):
        requested.append(url)
        return FakeResponse(b"cat\ndog\n" if url.endswith(".txt") else b"model")

    monkeypatch.setattr(download.requests, "get", fake_get)
    cfg = OmegaConf.create(
        {
            "model": {
                "path": str(tmp_path / "m" / "model.onnx"),
                "labels_path": str(tmp_path / "m" / "labels.txt"),
                "url": "http://example.invalid/model.onnx",
                "labels_url": "http://example.invalid/labels.txt",
            }
        }
    )

    model_path, labels_path = download.ensure_model(cfg)

    assert model_path.read_bytes() == b"model"
    assert labels_path.read_text(encoding="utf-8") == "cat\ndog\n"
    assert len(requested) == 2
    assert not (tmp_path / "m" / "model.onnx.part").exists()


class BrokenResponse(FakeResponse):
    def iter_content(self, chunk_size):
        yield self.payload
        raise download.requests.ConnectionError("connection reset")


def test_interrupted_download_leaves_no_partial_file(tmp_path, monkeypatch):
    destination = tmp_path / "m" / "model.onnx"
    monkeypatch.setattr(
        download.requests, "get", lambda url, timeout, stream: BrokenResponse(b"half")
    )

    with pytest.raises(download.requests.ConnectionError):
        download.download_file("http://example.invalid/model.onnx", destination)

    assert not destination.exists()
    assert not (tmp_path / "m" / "model.onnx.part").exists()
