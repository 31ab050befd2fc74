"""Sequence validators used to prune structurally invalid beam extensions.

A validator answers one question: may ``candidate`` be appended to the
history ``outcomes_so_far`` at ``position``? It never looks at probabilities.
The beam search hands it the sentence tokens too, because tag dictionaries
restrict candidates per word form.
"""
from __future__ import annotations
from typing import Dict, Iterable, Mapping, Protocol, Sequence, Tuple


class SequenceValidator(Protocol):
    def is_valid(
        self,
        position: int,
        tokens: Sequence[str],
        outcomes_so_far: Tuple[str, ...],
        candidate: str,
    ) -> bool:
        ...


class DefaultSequenceValidator:
    """Accepts every extension."""

    def is_valid(self, position, tokens, outcomes_so_far, candidate) -> bool:
        return True


class TagDictionaryValidator:
    """
    Restricts known words to the tags they were seen with.

    Words missing from the dictionary may take any tag. Lookups fall back to
    the lower-cased form so sentence-initial capitals still hit the entry.

    Attributes:
        tag_dictionary: Mapping of word form to the set of admissible tags.
    """

    def __init__(self, tag_dictionary: Mapping[str, Iterable[str]]):
        self.tag_dictionary: Dict[str, frozenset] = {
            word: frozenset(tags) for word, tags in tag_dictionary.items()
        }

    def _allowed(self, word: str):
        allowed = self.tag_dictionary.get(word)
        if allowed is None:
            allowed = self.tag_dictionary.get(word.lower())
        return allowed

    def is_valid(self, position, tokens, outcomes_so_far, candidate) -> bool:
        allowed = self._allowed(tokens[position])
        return allowed is None or candidate in allowed


class TransitionValidator:
    """Forbids specific ``(previous outcome, next outcome)`` pairs."""

    def __init__(self, forbidden: Iterable[Tuple[str, str]]):
        self.forbidden = frozenset(tuple(pair) for pair in forbidden)

    def is_valid(self, position, tokens, outcomes_so_far, candidate) -> bool:
        if not outcomes_so_far:
            return True
        return (outcomes_so_far[-1], candidate) not in self.forbidden


def build_tag_dictionary(samples) -> Dict[str, list]:
    """Collect the tags seen for each word form in labeled ``samples``."""
    seen: Dict[str, set] = {}
    for sample in samples:
        if sample is None:
            continue
        for token, outcome in zip(sample.tokens, sample.outcomes):
            seen.setdefault(token, set()).add(outcome)
    return {word: sorted(tags) for word, tags in sorted(seen.items())}
