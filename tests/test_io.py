import numpy as np
import pandas as pd
import pytest

from edge_classifier.data.io import read_input, read_scores, write_table


def test_read_input_npy(tmp_path):
    path = tmp_path / "input.npy"
    np.save(path, np.ones((2, 3), dtype=np.float32))

    data = read_input(path)

    assert data.shape == (2, 3)


def test_read_input_raw_bytes(tmp_path):
    path = tmp_path / "input.bin"
    path.write_bytes(b"\x01\x02")

    assert read_input(path) == b"\x01\x02"


def test_read_input_unknown_suffix(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("1", encoding="utf-8")

    with pytest.raises(ValueError):
        read_input(path)


def test_read_scores_from_csv(tmp_path):
    path = tmp_path / "scores.csv"
    pd.DataFrame({"a": [0.1, 0.4], "b": [0.9, 0.6]}).to_csv(path, index=False)

    scores = read_scores(path)

    assert scores.shape == (2, 2)
    assert scores.dtype == np.float32


def test_read_scores_vector_is_one_row(tmp_path):
    path = tmp_path / "scores.npy"
    np.save(path, np.array([0.1, 0.2, 0.7]))

    assert read_scores(path).shape == (1, 3)


def test_write_table_creates_parent(tmp_path):
    path = tmp_path / "out" / "preds.csv"

    write_table(pd.DataFrame({"pred_label": ["cat"]}), path)

    assert pd.read_csv(path)["pred_label"].tolist() == ["cat"]


def test_write_table_rejects_unknown_suffix(tmp_path):
    with pytest.raises(ValueError):
        write_table(pd.DataFrame(), tmp_path / "preds.json")
