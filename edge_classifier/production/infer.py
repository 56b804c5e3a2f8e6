"""Single-input, batch and score-file inference built on the predictor."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import mlflow
import numpy as np
import pandas as pd
from omegaconf import OmegaConf

from edge_classifier.data.download import ensure_model
from edge_classifier.data.io import read_input, read_scores, write_table
from edge_classifier.decoding.labels import load_labels
from edge_classifier.decoding.pipeline import decode
from edge_classifier.production.predictor import Predictor
from edge_classifier.utils.logging import (
    flatten_config,
    init_mlflow,
    latency_summary,
    log_resolved_config,
    save_latency_plot,
)
from edge_classifier.utils.paths import plots_dir

log = logging.getLogger(__name__)


def build_predictor(cfg, model_path: Path) -> Predictor:
    """Create a predictor from the ``model`` config group."""
    return Predictor.create(
        model_path,
        batch=int(cfg.model.batch),
        mode=cfg.model.mode,
        num_threads=int(cfg.model.num_threads),
        verbose=bool(cfg.model.verbose),
        profiling=bool(cfg.model.profiling),
    )


def predict_file(cfg, input_path: str) -> dict:
    """Run the model on one input file and return the decoded result."""
    model_path, labels_path = ensure_model(cfg)
    labels = load_labels(labels_path)
    data = read_input(Path(input_path))
    with build_predictor(cfg, model_path) as predictor:
        result = predictor.predict(
            data, labels, k=int(cfg.infer.top_k), delimiter=str(cfg.infer.delimiter)
        )
    return result.model_dump()


def decode_file(cfg, scores_path: str) -> dict:
    """Decode a saved ``batch x features`` score matrix."""
    scores = read_scores(Path(scores_path))
    labels = load_labels(Path(cfg.model.labels_path))
    batch, features_per_row = scores.shape
    result = decode(
        scores,
        batch,
        features_per_row,
        labels,
        k=int(cfg.infer.top_k),
        delimiter=str(cfg.infer.delimiter),
    )
    return result.model_dump()


def _iter_batches(samples: np.ndarray, batch: int):
    """Yield ``(chunk, valid_rows)``; the last chunk is zero-padded to ``batch``."""
    for start in range(0, len(samples), batch):
        chunk = samples[start : start + batch]
        valid = len(chunk)
        if valid < batch:
            padding = np.zeros((batch - valid,) + chunk.shape[1:], dtype=chunk.dtype)
            chunk = np.concatenate([chunk, padding])
        yield chunk, valid


def _run_batches(
    predictor: Predictor, samples: np.ndarray, labels, top_k: int, delimiter: str
) -> tuple[list[dict], list[float]]:
    records: list[dict] = []
    latencies_ms: list[float] = []
    for chunk, valid in _iter_batches(samples, predictor.batch_size):
        started = time.perf_counter()
        result = predictor.predict(chunk, labels, k=top_k, delimiter=delimiter)
        latencies_ms.append((time.perf_counter() - started) * 1000.0)
        records.extend(result.records()[:valid])
    return records, latencies_ms


def _log_batch_artifacts(output_file: Path, latencies_ms: list[float]) -> None:
    summary = latency_summary(latencies_ms)
    log.info("batch inference latency: %s", summary)
    if not mlflow.active_run():
        return
    mlflow.log_metrics(summary)
    plot_path = plots_dir() / "latency_hist.png"
    save_latency_plot(latencies_ms, plot_path)
    mlflow.log_artifact(str(plot_path), "plots")
    mlflow.log_artifact(str(output_file), "predictions")


def predict_batch(cfg, input_path: str, output_path: str) -> str:
    """Classify every sample of a ``.npy`` array and write a CSV/Parquet table."""
    model_path, labels_path = ensure_model(cfg)
    labels = load_labels(labels_path)
    samples = read_input(Path(input_path))
    if not isinstance(samples, np.ndarray) or samples.ndim < 1:
        raise ValueError("Batch input must be a .npy array with samples on the first axis")
    output_file = Path(output_path)
    top_k = int(cfg.infer.top_k)
    delimiter = str(cfg.infer.delimiter)

    def _run() -> None:
        with build_predictor(cfg, model_path) as predictor:
            records, latencies_ms = _run_batches(predictor, samples, labels, top_k, delimiter)
        write_table(pd.DataFrame(records), output_file)
        _log_batch_artifacts(output_file, latencies_ms)

    if cfg.logging.enable:
        init_mlflow(cfg)
        with mlflow.start_run(run_name=cfg.logging.run_name):
            mlflow.log_params(flatten_config(OmegaConf.to_container(cfg, resolve=True)))
            log_resolved_config(cfg)
            _run()
    else:
        _run()
    return str(output_file)
