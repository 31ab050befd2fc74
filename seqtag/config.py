"""Manages the loading and validation of application configuration.

This module defines the `Config` dataclass, which serves as a centralized,
type-safe container for the labeling settings, and the `load_config`
function, which reads them from a `config.yaml` file. Training settings live
under the `training` key and are passed through to
:class:`~seqtag.training.TrainingParameters` unchanged.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .model import BEAM_SIZE_PARAMETER, DEFAULT_BEAM_SIZE
from .training import TrainingParameters


@dataclass
class Config:
    """
    A typed configuration object for training and running a labeler.

    Attributes:
        language: Language code recorded in the model manifest.
        task: Which labeler to build, ``"pos"`` or ``"lemma"``.
        beam_size: Beam width used for training and written to the manifest.
        cache_size: Number of context distributions each decoder caches.
        training: Raw training settings (``Algorithm``, ``Iterations`` ...).
        paths: Paths to the model file and the optional tag dictionary,
               relative to the config file.
    """
    language: str = "en"
    task: str = "pos"
    beam_size: int = DEFAULT_BEAM_SIZE
    cache_size: int = 0
    training: Dict[str, Any] = field(default_factory=dict)
    paths: Dict[str, str] = field(default_factory=dict)
    base_dir: Path = field(default_factory=Path)

    def training_parameters(self) -> TrainingParameters:
        """Training settings with the configured beam size filled in."""
        settings = dict(self.training)
        settings.setdefault(BEAM_SIZE_PARAMETER, self.beam_size)
        return TrainingParameters(settings)

    def resolve_path(self, key: str) -> Optional[Path]:
        """Return ``paths[key]`` resolved against the config directory."""
        value = self.paths.get(key)
        if not value:
            return None
        return self.base_dir / value


def load_config(path: str = "config.yaml") -> Config:
    """
    Loads and validates a configuration file into a Config object.

    Args:
        path: The path to the `config.yaml` file.

    Returns:
        A fully populated `Config` object.

    Raises:
        FileNotFoundError: If the specified `config.yaml` file cannot be found.
        ValueError: If there is an error parsing the YAML file or a value has
            the wrong type.
        TypeError: If the root of the YAML file is not a dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    training = y.get("training") or {}
    if not isinstance(training, dict):
        raise TypeError(f"'training' in {path} must be a dictionary.")

    try:
        beam_size = int(y.get("beam_size", DEFAULT_BEAM_SIZE))
        cache_size = int(y.get("cache_size", 0))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid numeric setting in {path}: {e}")

    return Config(
        language=str(y.get("language", "en")),
        task=str(y.get("task", "pos")),
        beam_size=beam_size,
        cache_size=cache_size,
        training=dict(training),
        paths={str(k): str(v) for k, v in (y.get("paths") or {}).items()},
        base_dir=Path(path).parent,
    )
