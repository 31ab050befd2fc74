"""Reading and writing trained models.

A model is stored as a single JSON document::

    {
      "manifest": {"BeamSize": "3", "Language": "en", ...},
      "factory": {"name": "pos", "tag_dictionary": {...}},
      "kind": "event" | "sequence",
      "outcomes": ["DET", "NOUN", ...],
      "weights": {"w=dog": {"NOUN": 1.7, ...}, ...}
    }

Sequence models are rebuilt as :class:`~seqtag.trainers.PerceptronSequenceModel`
with the beam size recorded in the manifest.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Union

from .classifier import FeatureWeightsClassifier
from .errors import DataAccessError
from .factory import factory_from_dict
from .model import BEAM_SIZE_PARAMETER, LANGUAGE_PROPERTY, SequenceLabelingModel, parse_beam_size
from .trainers import PerceptronSequenceModel

EVENT_KIND = "event"
SEQUENCE_KIND = "sequence"


def save_model(model: SequenceLabelingModel, path: Union[str, Path]) -> None:
    """
    Write ``model`` to ``path`` as JSON, creating parent directories.

    Raises:
        DataAccessError: If the file cannot be written.
    """
    if model.sequence_model is not None:
        kind = SEQUENCE_KIND
        classifier = model.sequence_model.classifier
    else:
        kind = EVENT_KIND
        classifier = model.classifier

    data = {
        "manifest": dict(model.manifest),
        "factory": model.factory.to_dict(),
        "kind": kind,
        "outcomes": list(classifier.outcomes),
        "weights": classifier.to_dict(),
    }
    out_path = Path(path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
    except OSError as e:
        raise DataAccessError(f"Could not write model to {out_path}: {e}") from e


def load_model(path: Union[str, Path]) -> SequenceLabelingModel:
    """
    Load a model written by :func:`save_model`.

    Raises:
        DataAccessError: If the file is missing, unreadable, not JSON, or
            lacks a required section.
        ConfigurationError: If the manifest beam size or the factory name is
            invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise DataAccessError(f"Could not read model file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DataAccessError(f"Model file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DataAccessError(f"Model file {path} must contain a JSON object.")
    try:
        manifest = dict(data["manifest"])
        factory_data = data["factory"]
        kind = data["kind"]
        outcomes = list(data["outcomes"])
        weights = data["weights"]
    except (KeyError, TypeError, ValueError) as e:
        raise DataAccessError(f"Model file {path} is missing required section: {e}") from e

    factory = factory_from_dict(factory_data)
    classifier = FeatureWeightsClassifier(weights, outcomes)
    language = manifest.get(LANGUAGE_PROPERTY, "")

    if kind == EVENT_KIND:
        return SequenceLabelingModel(language, factory, manifest, classifier=classifier)
    if kind == SEQUENCE_KIND:
        beam_size = parse_beam_size(manifest.get(BEAM_SIZE_PARAMETER))
        return SequenceLabelingModel(
            language,
            factory,
            manifest,
            sequence_model=PerceptronSequenceModel(classifier, beam_size),
        )
    raise DataAccessError(f"Model file {path} has unknown model kind {kind!r}.")
