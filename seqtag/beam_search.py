"""Beam search decoding over a per-token probabilistic classifier.

The decoder walks the sentence left to right. Every hypothesis in the beam is
an immutable :class:`~seqtag.types.Sequence` that owns its outcome history, so
the context generator always sees exactly the outcomes of the hypothesis it
is extending. Each hypothesis is expanded with every outcome the classifier
gives a non-zero probability and the validator accepts, scored in log space,
and the beam is pruned back to the ``beam_size`` best hypotheses.

Pruning uses :func:`heapq.nlargest`, which keeps the earlier-generated
candidate on ties, so decoding is fully deterministic.

When the validator rejects every extension at some position the search would
be left with an empty beam. In that case the step is repeated with the
validator bypassed (all positive-probability outcomes may extend every
hypothesis) and a warning is logged. The output for that position may then
violate the validator, but the search always returns a full-length result.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from heapq import nlargest
from typing import Dict, List, Optional, Protocol, Sequence as SequenceType

from .classifier import Classifier
from .context import ContextGenerator
from .types import Context, Sequence, as_tags
from .validators import SequenceValidator

logger = logging.getLogger(__name__)

# Outcomes at or below this probability never extend a hypothesis.
NEGLIGIBLE_PROBABILITY = 0.0


class SequenceClassificationModel(Protocol):
    """Anything that can decode a full outcome sequence for a sentence."""

    def best_sequence(
        self,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator],
    ) -> Sequence:
        ...

    def best_sequences(
        self,
        num_sequences: int,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator],
        min_score: Optional[float] = None,
    ) -> List[Sequence]:
        ...


class BeamSearch:
    """
    Top-K search over outcome sequences for one event classifier.

    A :class:`BeamSearch` holds a reference to a shared, read-only classifier
    plus its own context cache. Create one instance per thread; the
    classifier itself can be shared freely.

    Attributes
    ----------
    beam_size:
        Number of hypotheses kept after each position.
    classifier:
        The event model queried for ``{outcome: probability}`` distributions.
    cache_size:
        Number of context distributions remembered between queries. Zero
        disables the cache.
    """

    def __init__(self, beam_size: int, classifier: Classifier, cache_size: int = 0):
        if beam_size < 1:
            raise ValueError(f"beam_size must be a positive integer, got {beam_size}")
        self.beam_size = beam_size
        self.classifier = classifier
        self.cache_size = max(0, int(cache_size))
        self._cache: "OrderedDict[Context, Dict[str, float]]" = OrderedDict()

    def _distribution(self, context: Context) -> Dict[str, float]:
        if not self.cache_size:
            return self.classifier.score_distribution(context)
        cached = self._cache.get(context)
        if cached is not None:
            self._cache.move_to_end(context)
            return cached
        dist = self.classifier.score_distribution(context)
        self._cache[context] = dist
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return dist

    def _expand(
        self,
        beam: List[Sequence],
        position: int,
        tokens: SequenceType[str],
        tags: SequenceType[str],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator],
    ) -> List[Sequence]:
        candidates: List[Sequence] = []
        for hypothesis in beam:
            context = context_generator.get_context(position, tokens, tags, hypothesis.outcomes)
            for outcome, prob in self._distribution(context).items():
                if prob <= NEGLIGIBLE_PROBABILITY:
                    continue
                if validator is not None and not validator.is_valid(
                    position, tokens, hypothesis.outcomes, outcome
                ):
                    continue
                candidates.append(hypothesis.extend(outcome, prob))
        return candidates

    def _search(
        self,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator],
    ) -> List[Sequence]:
        tags = as_tags(tags)
        beam: List[Sequence] = [Sequence()]

        for i in range(len(tokens)):
            candidates = self._expand(beam, i, tokens, tags, context_generator, validator)

            if not candidates and validator is not None:
                # Dead end: no hypothesis can be extended legally. Relax the
                # validator for this position only.
                logger.warning(
                    "No valid outcome for token %d (%r); bypassing the sequence validator for this position.",
                    i,
                    tokens[i],
                )
                candidates = self._expand(beam, i, tokens, tags, context_generator, None)

            if not candidates:
                raise ValueError(
                    f"Classifier assigned zero probability to every outcome at token {i} ({tokens[i]!r})."
                )

            beam = nlargest(self.beam_size, candidates, key=lambda s: s.score)

        return beam

    def best_sequences(
        self,
        num_sequences: int,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator] = None,
        min_score: Optional[float] = None,
    ) -> List[Sequence]:
        """
        Return up to ``num_sequences`` complete hypotheses, best first.

        Hypotheses whose cumulative log score is below ``min_score`` are
        dropped even if they made it into the final beam, so the result may be
        empty.
        """
        beam = self._search(tokens, tags, context_generator, validator)
        ranked = nlargest(num_sequences, beam, key=lambda s: s.score)
        if min_score is not None:
            ranked = [seq for seq in ranked if seq.score >= min_score]
        return ranked

    def best_sequence(
        self,
        tokens: SequenceType[str],
        tags: Optional[SequenceType[str]],
        context_generator: ContextGenerator,
        validator: Optional[SequenceValidator] = None,
    ) -> Sequence:
        """Return the highest scoring complete hypothesis."""
        beam = self._search(tokens, tags, context_generator, validator)
        return beam[0]
