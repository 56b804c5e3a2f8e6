"""Model and label artifact download."""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from edge_classifier.errors import ModelNotFoundError

log = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 20


def download_file(url: str, destination: Path) -> Path:
    """Stream ``url`` into ``destination``."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    try:
        with requests.get(url, timeout=120, stream=True) as response:
            response.raise_for_status()
            with partial.open("wb") as file_obj:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    file_obj.write(chunk)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(destination)
    return destination


def ensure_artifact(path: Path, url: str | None, what: str) -> Path:
    """Return ``path``, downloading it from ``url`` when it is missing."""
    if path.exists():
        return path
    if not url:
        raise ModelNotFoundError(f"{what} not found: {path}", {"path": str(path)})
    log.info("downloading %s from %s", what, url)
    return download_file(url, path)


def ensure_model(cfg) -> tuple[Path, Path]:
    """Ensure model and label files exist locally."""
    model_path = ensure_artifact(Path(cfg.model.path), cfg.model.get("url"), "model")
    labels_path = ensure_artifact(
        Path(cfg.model.labels_path), cfg.model.get("labels_url"), "labels"
    )
    return model_path, labels_path
