"""The trained model bundle consumed by the decoders."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .beam_search import BeamSearch, SequenceClassificationModel
from .classifier import Classifier
from .errors import ConfigurationError
from .factory import SequenceLabelerFactory

logger = logging.getLogger(__name__)

DEFAULT_BEAM_SIZE = 3
BEAM_SIZE_PARAMETER = "BeamSize"
LANGUAGE_PROPERTY = "Language"
MANIFEST_VERSION = "1.0"


def parse_beam_size(value: Optional[str], default: int = DEFAULT_BEAM_SIZE) -> int:
    """
    Parse a beam size read from a manifest or from training settings.

    Args:
        value: The raw string, or ``None`` when the key is absent.
        default: Returned when the key is absent or the number is not
            positive.

    Returns:
        The beam size to use.

    Raises:
        ConfigurationError: If ``value`` is present but not a base-10 integer.
    """
    if value is None:
        return default
    try:
        size = int(str(value).strip(), 10)
    except ValueError:
        raise ConfigurationError(f"Beam size must be an integer, got {value!r}") from None
    if size < 1:
        logger.warning("Ignoring non-positive beam size %d; using %d.", size, default)
        return default
    return size


@dataclass(frozen=True)
class SequenceLabelingModel:
    """
    Immutable container for everything a decoder needs.

    Exactly one of ``classifier`` (a per-token event model, decoded with
    :class:`~seqtag.beam_search.BeamSearch`) or ``sequence_model`` (a model
    that decodes whole sentences itself) is set.

    Attributes:
        language: Language code recorded at training time.
        factory: Supplies the context generator and the sequence validator.
        manifest: Read-only ``str -> str`` properties persisted with the
            model. ``BeamSize`` overrides :data:`DEFAULT_BEAM_SIZE`.
        classifier: Event model, or ``None``.
        sequence_model: Sequence model, or ``None``.
        beam_size: Parsed from the manifest at construction time.
    """
    language: str
    factory: SequenceLabelerFactory
    manifest: Mapping[str, str]
    classifier: Optional[Classifier] = None
    sequence_model: Optional[SequenceClassificationModel] = None
    beam_size: int = field(init=False)

    def __post_init__(self) -> None:
        if (self.classifier is None) == (self.sequence_model is None):
            raise ValueError("Provide exactly one of 'classifier' or 'sequence_model'.")
        manifest = {str(k): str(v) for k, v in self.manifest.items()}
        manifest.setdefault(LANGUAGE_PROPERTY, self.language)
        object.__setattr__(self, "manifest", MappingProxyType(manifest))
        object.__setattr__(self, "beam_size", parse_beam_size(manifest.get(BEAM_SIZE_PARAMETER)))

    def get_manifest_property(self, key: str) -> Optional[str]:
        return self.manifest.get(key)

    @property
    def outcomes(self):
        clf = self.classifier if self.classifier is not None else getattr(self.sequence_model, "classifier", None)
        return tuple(clf.outcomes) if clf is not None else ()

    def sequence_model_for_decoding(self, cache_size: int = 0) -> SequenceClassificationModel:
        """
        Return the model to decode with.

        Event models get a fresh beam search. A sequence model is returned
        as is, or as a private copy with its own context cache when
        ``cache_size`` is positive and the model supports one.
        """
        if self.sequence_model is not None:
            with_cache = getattr(self.sequence_model, "with_cache", None)
            if cache_size > 0 and with_cache is not None:
                return with_cache(cache_size)
            return self.sequence_model
        return BeamSearch(self.beam_size, self.classifier, cache_size=cache_size)
