from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional, Sequence as SequenceType, Tuple

__all__ = ["Context", "Event", "Sample", "LemmaSample", "Sequence"]

# A context is a flat, ordered collection of feature identifiers.
Context = Tuple[str, ...]


@dataclass(frozen=True)
class Sample:
    """
    One sentence worth of labeling data.

    ``tokens`` is always present. ``tags`` carries auxiliary labels (POS tags
    for the lemmatizer) and may be empty. ``outcomes`` holds the gold labels
    and is empty at inference time. Whatever is present must be index
    aligned with the tokens.

    Attributes:
        tokens: The words of the sentence.
        tags: Auxiliary per-token tags, or an empty tuple.
        outcomes: Gold outcome labels, or an empty tuple.
    """
    tokens: Tuple[str, ...]
    tags: Tuple[str, ...] = ()
    outcomes: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples.
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "outcomes", tuple(self.outcomes))
        n = len(self.tokens)
        if self.tags and len(self.tags) != n:
            raise ValueError(
                f"Sample has {n} tokens but {len(self.tags)} tags: {self.tokens!r}"
            )
        if self.outcomes and len(self.outcomes) != n:
            raise ValueError(
                f"Sample has {n} tokens but {len(self.outcomes)} outcomes: {self.tokens!r}"
            )

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def is_labeled(self) -> bool:
        return bool(self.outcomes) or not self.tokens


@dataclass(frozen=True)
class LemmaSample:
    """A sentence annotated with POS tags and gold lemmas."""
    tokens: Tuple[str, ...]
    tags: Tuple[str, ...]
    lemmas: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "lemmas", tuple(self.lemmas))
        if not (len(self.tokens) == len(self.tags) == len(self.lemmas)):
            raise ValueError(
                "LemmaSample requires tokens, tags and lemmas of equal length"
            )

    def to_sample(self) -> Sample:
        """Return a :class:`Sample` whose outcomes are lemma codes."""
        from .lemma_codes import encode_lemma

        codes = tuple(encode_lemma(tok, lem) for tok, lem in zip(self.tokens, self.lemmas))
        return Sample(tokens=self.tokens, tags=self.tags, outcomes=codes)


@dataclass(frozen=True)
class Event:
    """One training example: a gold outcome and the context it was seen in."""
    outcome: str
    context: Context


@dataclass(frozen=True)
class Sequence:
    """
    A (partial or complete) outcome sequence produced by the beam search.

    ``log_probs`` holds the incremental log-probability of each step and
    ``score`` their running sum. Callers normally read :attr:`probs`, which
    converts the per-step values back into linear probability space.
    """
    outcomes: Tuple[str, ...] = ()
    log_probs: Tuple[float, ...] = ()
    score: float = 0.0

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def probs(self) -> Tuple[float, ...]:
        return tuple(math.exp(lp) for lp in self.log_probs)

    def extend(self, outcome: str, prob: float) -> "Sequence":
        """Return a new sequence with ``outcome`` appended at probability ``prob``."""
        step = math.log(prob)
        return Sequence(
            outcomes=self.outcomes + (outcome,),
            log_probs=self.log_probs + (step,),
            score=self.score + step,
        )


def as_tags(tags: Optional[SequenceType[str]]) -> Tuple[str, ...]:
    """Normalise an optional tag sequence into a tuple."""
    if tags is None:
        return ()
    return tuple(tags)
