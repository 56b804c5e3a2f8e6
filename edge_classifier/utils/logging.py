"""MLflow tracking and latency plotting helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import mlflow
import numpy as np
import seaborn as sns
from mlflow.tracking import MlflowClient
from omegaconf import OmegaConf

log = logging.getLogger(__name__)


def init_mlflow(cfg: Any) -> None:
    """Point MLflow at the configured tracking server, or a local store."""
    if not cfg.logging.enable:
        return
    tracking_uri = cfg.logging.mlflow_uri
    mlflow.set_tracking_uri(tracking_uri)
    try:
        MlflowClient(tracking_uri=tracking_uri).search_experiments(max_results=1)
    except Exception as error:
        if not cfg.logging.allow_local_fallback:
            raise RuntimeError(
                f"MLflow server is unavailable at {tracking_uri}. "
                "Set logging.allow_local_fallback=true to use local mlruns."
            ) from error
        local_uri = f"file://{(Path.cwd() / 'mlruns').resolve()}"
        log.warning("MLflow unavailable at %s, falling back to %s", tracking_uri, local_uri)
        mlflow.set_tracking_uri(local_uri)
    mlflow.set_experiment(cfg.logging.experiment_name)


def flatten_config(values: dict, prefix: str = "") -> dict[str, str]:
    """Flatten a nested config into dotted MLflow params."""
    flattened: dict[str, str] = {}
    for key, value in values.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flattened.update(flatten_config(value, full_key))
        else:
            flattened[full_key] = str(value)
    return flattened


def log_resolved_config(cfg: Any, artifact_name: str = "resolved_config.yaml") -> str:
    """Log the resolved Hydra config as a text artifact."""
    resolved = OmegaConf.to_yaml(cfg, resolve=True)
    mlflow.log_text(resolved, artifact_name)
    return resolved


def latency_summary(latencies_ms: list[float]) -> dict[str, float]:
    """Mean, p95 and max of per-batch latencies."""
    if not latencies_ms:
        return {}
    values = np.asarray(latencies_ms, dtype=np.float64)
    return {
        "latency_mean_ms": float(values.mean()),
        "latency_p95_ms": float(np.percentile(values, 95)),
        "latency_max_ms": float(values.max()),
    }


def save_latency_plot(latencies_ms: list[float], output_path: Path) -> None:
    """Save a histogram of per-batch inference latency."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(10, 6))
    sns.histplot(latencies_ms, bins=min(30, max(1, len(latencies_ms))))
    plt.title("Inference latency per batch")
    plt.xlabel("Latency (ms)")
    plt.ylabel("Batches")
    plt.grid(alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
