"""Training entry point: picks a trainer kind and bundles the result.

The trainer kind is resolved from the settings once, before the sample
stream is touched, so configuration mistakes fail fast. Each
:class:`TrainerType` member owns exactly one training routine.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .errors import ConfigurationError, DataAccessError
from .events import EventStream, SequenceStream
from .factory import SequenceLabelerFactory
from .model import (
    BEAM_SIZE_PARAMETER,
    DEFAULT_BEAM_SIZE,
    LANGUAGE_PROPERTY,
    MANIFEST_VERSION,
    SequenceLabelingModel,
    parse_beam_size,
)
from .trainers import CountTrainer, PerceptronSequenceTrainer, StructuredPerceptronTrainer
from .types import Sample

logger = logging.getLogger(__name__)


class TrainingParameters:
    """
    String-valued training settings with typed accessors.

    Values are stored as strings, the same way they are persisted in the
    model manifest. The typed getters raise :class:`ConfigurationError` for
    values that do not parse.
    """

    ALGORITHM = "Algorithm"
    TRAINER_TYPE = "TrainerType"
    ITERATIONS = "Iterations"
    CUTOFF = "Cutoff"
    SMOOTHING = "Smoothing"
    ERROR_BOOST = "ErrorBoost"
    BEAM_SIZE = BEAM_SIZE_PARAMETER

    def __init__(self, settings: Optional[Mapping[str, Any]] = None):
        self._settings: Dict[str, str] = {
            str(k): str(v) for k, v in (settings or {}).items() if v is not None
        }

    @property
    def settings(self) -> Dict[str, str]:
        return dict(self._settings)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._settings.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        raw = self._settings.get(key)
        if raw is None:
            return default
        try:
            return int(raw.strip(), 10)
        except ValueError:
            raise ConfigurationError(f"Training parameter {key} must be an integer, got {raw!r}") from None

    def get_float(self, key: str, default: float) -> float:
        raw = self._settings.get(key)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            raise ConfigurationError(f"Training parameter {key} must be a number, got {raw!r}") from None

    def beam_size(self) -> int:
        return parse_beam_size(self._settings.get(self.BEAM_SIZE), DEFAULT_BEAM_SIZE)


def _train_event_model(samples, params: TrainingParameters, factory: SequenceLabelerFactory, beam_size: int):
    trainer = CountTrainer(
        smoothing=params.get_float(TrainingParameters.SMOOTHING, 0.1),
        cutoff=params.get_int(TrainingParameters.CUTOFF, 0),
        iterations=params.get_int(TrainingParameters.ITERATIONS, 1),
        error_boost=params.get_float(TrainingParameters.ERROR_BOOST, 1.0),
    )
    return trainer.train(EventStream(samples, factory.context_generator))


def _train_event_model_sequence(samples, params: TrainingParameters, factory: SequenceLabelerFactory, beam_size: int):
    trainer = PerceptronSequenceTrainer(
        iterations=params.get_int(TrainingParameters.ITERATIONS, 10),
        beam_size=beam_size,
        cutoff=params.get_int(TrainingParameters.CUTOFF, 0),
        validator=factory.sequence_validator,
    )
    return trainer.train(SequenceStream(samples, factory.context_generator))


def _train_sequence_model(samples, params: TrainingParameters, factory: SequenceLabelerFactory, beam_size: int):
    trainer = StructuredPerceptronTrainer(
        iterations=params.get_int(TrainingParameters.ITERATIONS, 10),
        beam_size=beam_size,
        cutoff=params.get_int(TrainingParameters.CUTOFF, 0),
        validator=factory.sequence_validator,
    )
    return trainer.train(SequenceStream(samples, factory.context_generator))


class TrainerType(Enum):
    """The three supported trainer kinds."""

    EVENT = "Event"
    EVENT_MODEL_SEQUENCE = "EventModelSequence"
    SEQUENCE = "Sequence"

    @classmethod
    def parse(cls, value: str) -> "TrainerType":
        for member in cls:
            if value in (member.name, member.value):
                return member
        raise ConfigurationError(f"Trainer type is not supported: {value}")

    @property
    def routine(self) -> Callable:
        return _ROUTINES[self]

    def run(self, samples, params: TrainingParameters, factory: SequenceLabelerFactory, beam_size: int):
        return self.routine(samples, params, factory, beam_size)


_ROUTINES: Dict[TrainerType, Callable] = {
    TrainerType.EVENT: _train_event_model,
    TrainerType.EVENT_MODEL_SEQUENCE: _train_event_model_sequence,
    TrainerType.SEQUENCE: _train_sequence_model,
}

ALGORITHMS: Dict[str, TrainerType] = {
    "COUNTS": TrainerType.EVENT,
    "PERCEPTRON_SEQUENCE": TrainerType.EVENT_MODEL_SEQUENCE,
    "STRUCTURED_PERCEPTRON": TrainerType.SEQUENCE,
}
DEFAULT_ALGORITHM = "COUNTS"


def resolve_trainer_type(params: TrainingParameters) -> Tuple[str, TrainerType]:
    """
    Work out which algorithm and trainer kind ``params`` asks for.

    Raises:
        ConfigurationError: For an unknown algorithm or trainer type, or when
            an explicit trainer type contradicts the algorithm.
    """
    algorithm = params.get(TrainingParameters.ALGORITHM, DEFAULT_ALGORITHM).strip().upper()
    if algorithm not in ALGORITHMS:
        raise ConfigurationError(
            f"Unknown training algorithm '{algorithm}'. Expected one of: {', '.join(ALGORITHMS)}."
        )
    trainer_type = ALGORITHMS[algorithm]

    explicit = params.get(TrainingParameters.TRAINER_TYPE)
    if explicit is not None:
        requested = TrainerType.parse(explicit.strip())
        if requested is not trainer_type:
            raise ConfigurationError(
                f"Trainer type {requested.name} does not match algorithm {algorithm} ({trainer_type.name})."
            )
    return algorithm, trainer_type


def check_parameters(params: TrainingParameters) -> Tuple[str, TrainerType, int]:
    """
    Validate every training setting without reading any samples.

    Returns:
        The algorithm name, the trainer kind and the beam size.

    Raises:
        ConfigurationError: For the first setting that is unsupported or
            does not parse.
    """
    algorithm, trainer_type = resolve_trainer_type(params)
    beam_size = params.beam_size()
    params.get_int(TrainingParameters.ITERATIONS, 1)
    params.get_int(TrainingParameters.CUTOFF, 0)
    params.get_float(TrainingParameters.SMOOTHING, 0.1)
    params.get_float(TrainingParameters.ERROR_BOOST, 1.0)
    return algorithm, trainer_type, beam_size


def train(
    language: str,
    samples: Iterable[Optional[Sample]],
    params,
    factory: SequenceLabelerFactory,
) -> SequenceLabelingModel:
    """
    Train a labeling model.

    Args:
        language: Language code stored in the manifest.
        samples: Labeled samples. Must be re-iterable for the sequence
            trainers, which make several passes. ``None`` entries are skipped.
        params: A :class:`TrainingParameters` or a plain settings mapping.
        factory: Supplies the context generator and sequence validator.

    Returns:
        The trained, immutable :class:`~seqtag.model.SequenceLabelingModel`.

    Raises:
        ConfigurationError: For unsupported or unparsable settings. Raised
            before any sample is read.
        DataAccessError: If reading the samples fails.
    """
    if not isinstance(params, TrainingParameters):
        params = TrainingParameters(params)

    algorithm, trainer_type, beam_size = check_parameters(params)

    manifest = {
        "Manifest-Version": MANIFEST_VERSION,
        LANGUAGE_PROPERTY: language,
        BEAM_SIZE_PARAMETER: str(beam_size),
        TrainingParameters.ALGORITHM: algorithm,
        TrainingParameters.TRAINER_TYPE: trainer_type.value,
        "Factory": factory.name,
    }

    logger.info("Training %s model with %s (%s trainer).", factory.name, algorithm, trainer_type.name)
    try:
        result = trainer_type.run(samples, params, factory, beam_size)
    except DataAccessError:
        raise
    except OSError as e:
        raise DataAccessError(f"Could not read training samples: {e}") from e

    if trainer_type is TrainerType.SEQUENCE:
        return SequenceLabelingModel(language, factory, manifest, sequence_model=result)
    return SequenceLabelingModel(language, factory, manifest, classifier=result)
