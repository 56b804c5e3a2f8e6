"""Public Fire CLI entrypoint."""

from __future__ import annotations

import logging
from typing import Any

import fire
from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf

from edge_classifier.data.download import ensure_model
from edge_classifier.production.infer import decode_file, predict_batch, predict_file
from edge_classifier.utils.paths import config_dir


def compose_config(overrides: list[str] | None = None):
    """Compose hydra config using config directory."""
    config_directory = str(config_dir().resolve())
    with initialize_config_dir(config_dir=config_directory, version_base=None):
        return compose(config_name="config", overrides=overrides or [])


class EdgeClassifierCommands:
    """Command collection exposed through python-fire."""

    def print_config(self, *overrides: str) -> str:
        cfg = compose_config(list(overrides))
        rendered = OmegaConf.to_yaml(cfg, resolve=True)
        print(rendered)
        return rendered

    def fetch_model(self, *overrides: str) -> dict[str, str]:
        cfg = compose_config(list(overrides))
        model_path, labels_path = ensure_model(cfg)
        payload = {"model_path": str(model_path), "labels_path": str(labels_path)}
        print(payload)
        return payload

    def predict(self, input_path: str, *overrides: str) -> dict[str, Any]:
        cfg = compose_config(list(overrides))
        prediction = predict_file(cfg, input_path=input_path)
        print(prediction)
        return prediction

    def predict_batch(self, input_path: str, output_path: str, *overrides: str) -> str:
        cfg = compose_config(list(overrides))
        output = predict_batch(cfg, input_path=input_path, output_path=output_path)
        print(output)
        return output

    def decode(self, scores_path: str, *overrides: str) -> dict[str, Any]:
        cfg = compose_config(list(overrides))
        result = decode_file(cfg, scores_path=scores_path)
        print(result)
        return result


def main() -> None:
    """Main Fire entrypoint."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    fire.Fire(EdgeClassifierCommands)


if __name__ == "__main__":
    main()
