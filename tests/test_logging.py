import pytest

from edge_classifier.utils.logging import flatten_config, latency_summary, save_latency_plot


def test_flatten_config_uses_dotted_keys():
    flat = flatten_config({"model": {"batch": 1, "mode": "cpu"}, "seed": 3})

    assert flat == {"model.batch": "1", "model.mode": "cpu", "seed": "3"}


def test_latency_summary():
    summary = latency_summary([10.0, 20.0, 30.0])

    assert summary["latency_mean_ms"] == pytest.approx(20.0)
    assert summary["latency_max_ms"] == pytest.approx(30.0)
    assert 20.0 <= summary["latency_p95_ms"] <= 30.0


def test_latency_summary_of_nothing_is_empty():
    assert latency_summary([]) == {}


def test_save_latency_plot(tmp_path):
    path = tmp_path / "plots" / "latency.png"

    save_latency_plot([1.0, 2.0, 2.5], path)

    assert path.exists()
