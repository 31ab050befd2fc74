from __future__ import annotations
from typing import List, Optional, Sequence as SequenceType

from .errors import DecoderStateError
from .lemma_codes import decode_lemmas
from .model import SequenceLabelingModel
from .types import Sequence


class SequenceLabeler:
    """
    Decodes sentences with a trained :class:`~seqtag.model.SequenceLabelingModel`.

    A labeler remembers the last sequence it decoded so callers can ask for
    its per-token probabilities afterwards. That state lives on the instance:
    threads decoding concurrently should each create their own labeler over
    the shared model.

    Attributes:
        model: The shared, immutable model.
        beam_size: Beam width, taken from the model manifest.
        context_generator: The factory's context generator.
        sequence_validator: The factory's validator.
    """

    def __init__(self, model: SequenceLabelingModel, cache_size: int = 0):
        self.model = model
        self.beam_size = model.beam_size
        self.context_generator = model.factory.context_generator
        self.sequence_validator = model.factory.sequence_validator
        self._decoder = model.sequence_model_for_decoding(cache_size=cache_size)
        self._best_sequence: Optional[Sequence] = None

    def best_sequence(self, tokens: SequenceType[str], tags: Optional[SequenceType[str]] = None) -> Sequence:
        """Decode ``tokens`` and remember the result for :meth:`probs`."""
        sequence = self._decoder.best_sequence(
            tokens, tags, self.context_generator, self.sequence_validator
        )
        self._best_sequence = sequence
        return sequence

    def label(self, tokens: SequenceType[str], tags: Optional[SequenceType[str]] = None) -> List[str]:
        """Return the best outcome for every token."""
        return list(self.best_sequence(tokens, tags).outcomes)

    def top_k_sequences(
        self,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]] = None,
        min_score: Optional[float] = None,
    ) -> List[Sequence]:
        """
        Return up to ``beam_size`` sequences, best first, optionally above ``min_score``.

        The first sequence becomes the one :meth:`probs` reports. When
        ``min_score`` filters out every sequence nothing is remembered, so a
        following :meth:`probs` raises instead of describing another sentence.
        """
        sequences = self._decoder.best_sequences(
            self.beam_size,
            tokens,
            tags,
            self.context_generator,
            self.sequence_validator,
            min_score=min_score,
        )
        self._best_sequence = sequences[0] if sequences else None
        return sequences

    def probs(self) -> List[float]:
        """
        Per-token probabilities of the last sequence decoded by :meth:`label`.

        Raises:
            DecoderStateError: If nothing has been decoded yet.
        """
        if self._best_sequence is None:
            raise DecoderStateError("probs() called before any sentence was labeled.")
        return list(self._best_sequence.probs)


class POSTagger(SequenceLabeler):
    """Part-of-speech tagger."""

    def tag(self, tokens: SequenceType[str]) -> List[str]:
        return self.label(tokens)


class Lemmatizer(SequenceLabeler):
    """Predicts lemma codes and turns them into lemmas."""

    def lemmatize(self, tokens: SequenceType[str], tags: Optional[SequenceType[str]] = None) -> List[str]:
        """Return the predicted lemma code of each token."""
        return self.label(tokens, tags)

    def lemmas(self, tokens: SequenceType[str], tags: Optional[SequenceType[str]] = None) -> List[str]:
        """Return the predicted lemma of each token."""
        return decode_lemmas(tokens, self.lemmatize(tokens, tags))
