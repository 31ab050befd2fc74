"""Turns annotated samples into classifier training events.

Training contexts are built over the *gold* outcome history of each sample,
whereas the decoder builds them over its own predicted history. The
mismatch is deliberate: it keeps event construction independent of any
model. The sequence trainers reduce it with :meth:`SequenceStream.update_context`.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .context import ContextGenerator
from .types import Event, Sample
from .validators import SequenceValidator


def create_events(sample: Optional[Sample], context_generator: ContextGenerator) -> Iterator[Event]:
    """
    Lazily yield one :class:`Event` per token of ``sample``.

    A ``None`` sample yields nothing.

    Raises:
        ValueError: If the sample has tokens but no gold outcomes.
    """
    if sample is None:
        return iter(())
    if not sample.is_labeled:
        raise ValueError(f"Cannot build training events from an unlabeled sample: {sample.tokens!r}")
    return _iter_events(sample.tokens, sample.tags, sample.outcomes, context_generator)


def _iter_events(tokens, tags, outcomes, context_generator: ContextGenerator) -> Iterator[Event]:
    for i in range(len(tokens)):
        context = context_generator.get_context(i, tokens, tags, tuple(outcomes[:i]))
        yield Event(outcomes[i], context)


class EventStream:
    """
    Iterable of events over a stream of samples.

    Iterating twice re-reads ``samples`` and yields the same events again, as
    long as ``samples`` itself can be iterated more than once (a list, or one
    of the readers in :mod:`seqtag.io_utils`).
    """

    def __init__(self, samples: Iterable[Optional[Sample]], context_generator: ContextGenerator):
        self.samples = samples
        self.context_generator = context_generator

    def __iter__(self) -> Iterator[Event]:
        for sample in self.samples:
            yield from create_events(sample, self.context_generator)


@dataclass(frozen=True)
class SampleSequence:
    """A sample together with its gold-history events."""
    sample: Sample
    events: Tuple[Event, ...]


class SequenceStream:
    """
    Iterable of whole-sentence event sequences for the sequence trainers.

    ``None`` samples are skipped.
    """

    def __init__(self, samples: Iterable[Optional[Sample]], context_generator: ContextGenerator):
        self.samples = samples
        self.context_generator = context_generator

    def __iter__(self) -> Iterator[SampleSequence]:
        for sample in self.samples:
            if sample is None:
                continue
            yield SampleSequence(sample, tuple(create_events(sample, self.context_generator)))

    def update_context(
        self,
        sample: Sample,
        sequence_model,
        validator: Optional[SequenceValidator] = None,
    ) -> List[Event]:
        """
        Decode ``sample`` with ``sequence_model`` and return the events the
        model itself would produce: predicted outcomes paired with contexts
        built over the predicted history.
        """
        predicted = sequence_model.best_sequence(
            sample.tokens, sample.tags, self.context_generator, validator
        ).outcomes
        return list(_iter_events(sample.tokens, sample.tags, predicted, self.context_generator))
