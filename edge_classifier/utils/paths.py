"""Repository path helpers."""

from pathlib import Path


def project_root() -> Path:
    """Repository root (parent of the package directory)."""
    return Path(__file__).resolve().parents[2]


def config_dir() -> Path:
    """Hydra config directory."""
    return project_root() / "configs"


def plots_dir() -> Path:
    return project_root() / "plots"
