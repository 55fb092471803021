"""YAML configuration loading.

``configs/app.yaml`` is merged over :data:`DEFAULT_CONFIG` so that a partial
file (or no file at all) still yields a complete configuration.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "app.yaml"

DEFAULT_CONFIG: dict = {
    "llm": {
        "model_path": "models/report-writer.gguf",
        "n_ctx": 4096,
        "n_gpu_layers": 0,
        "chat_format": "chatml",
        "temperature": 0.2,
        "max_tokens": 1024,
        "timeout_seconds": 20,
    },
    "consult": {"default_severity": "moderate", "default_age": 30},
    "api": {"host": "0.0.0.0", "port": 8000, "reload": False},
    "logging": {"level": "INFO"},
}


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str | Path | None = None) -> dict:
    """Loads the YAML config and fills in defaults for anything it omits.

    Args:
        config_path: Path to a YAML file. ``None`` uses ``configs/app.yaml``
            at the repository root.

    Returns:
        The merged configuration dict.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.warning("Config file %s not found — using built-in defaults.", path)
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path) as fh:
        loaded = yaml.safe_load(fh) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
