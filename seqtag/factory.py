"""Factories pairing a context generator with a sequence validator.

A factory describes one labeling task. It is stored inside the model so that
a loaded model decodes with the same features it was trained with. Only the
factory *name* and its task-specific resources (the POS tag dictionary) are
persisted; the generator and validator are rebuilt on load.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Optional

from .context import ContextGenerator, LemmatizerContextGenerator, POSContextGenerator
from .errors import ConfigurationError
from .validators import DefaultSequenceValidator, SequenceValidator, TagDictionaryValidator


class SequenceLabelerFactory:
    """Base factory; subclasses set :attr:`name` and build their parts."""

    name = "base"

    def __init__(self) -> None:
        self.context_generator: ContextGenerator = self._create_context_generator()
        self.sequence_validator: SequenceValidator = self._create_sequence_validator()

    def _create_context_generator(self) -> ContextGenerator:
        raise NotImplementedError

    def _create_sequence_validator(self) -> SequenceValidator:
        return DefaultSequenceValidator()

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


class POSTaggerFactory(SequenceLabelerFactory):
    """POS tagging; known words are restricted to their dictionary tags."""

    name = "pos"

    def __init__(self, tag_dictionary: Optional[Mapping[str, Iterable[str]]] = None):
        self.tag_dictionary = (
            {word: sorted(set(tags)) for word, tags in tag_dictionary.items()}
            if tag_dictionary
            else None
        )
        super().__init__()

    def _create_context_generator(self) -> ContextGenerator:
        return POSContextGenerator()

    def _create_sequence_validator(self) -> SequenceValidator:
        if self.tag_dictionary:
            return TagDictionaryValidator(self.tag_dictionary)
        return DefaultSequenceValidator()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.tag_dictionary:
            data["tag_dictionary"] = self.tag_dictionary
        return data


class LemmatizerFactory(SequenceLabelerFactory):
    """Lemma-code prediction with optional POS context."""

    name = "lemma"

    def _create_context_generator(self) -> ContextGenerator:
        return LemmatizerContextGenerator()


FACTORIES = {
    POSTaggerFactory.name: POSTaggerFactory,
    LemmatizerFactory.name: LemmatizerFactory,
}


def create_factory(task: str, tag_dictionary: Optional[Mapping[str, Iterable[str]]] = None) -> SequenceLabelerFactory:
    """Build the factory for ``task`` (``"pos"`` or ``"lemma"``)."""
    if task == POSTaggerFactory.name:
        return POSTaggerFactory(tag_dictionary=tag_dictionary)
    if task == LemmatizerFactory.name:
        return LemmatizerFactory()
    raise ConfigurationError(
        f"Unknown labeling task '{task}'. Expected one of: {', '.join(sorted(FACTORIES))}."
    )


def factory_from_dict(data: Mapping[str, Any]) -> SequenceLabelerFactory:
    """Rebuild a factory from :meth:`SequenceLabelerFactory.to_dict` output."""
    return create_factory(str(data.get("name")), tag_dictionary=data.get("tag_dictionary"))
