"""Feature-context generation for the sequence labelers.

A context generator turns one token position into a tuple of string features
for the classifier. Generators only ever see the outcomes of earlier
positions: the caller hands them an immutable tuple holding exactly
``position`` outcomes, whether that history is gold (training) or predicted
(decoding).

The feature names use short prefixes (``w=``, ``p=``, ``suf=`` ...) in the
same spirit as the binned keys used for the weights tables.
"""
from __future__ import annotations
from typing import Protocol, Sequence, Tuple

from .types import Context

BOS = "*BOS*"
EOS = "*EOS*"
NO_TAG = "*NT*"


class ContextGenerator(Protocol):
    """Produces the classifier context for one token position."""

    def get_context(
        self,
        position: int,
        tokens: Sequence[str],
        tags: Sequence[str],
        outcomes_so_far: Tuple[str, ...],
    ) -> Context:
        ...


def word_shape(word: str) -> str:
    """Coarse orthographic class of ``word``."""
    if not word:
        return "sh:empty"
    if word.isdigit():
        return "sh:num"
    if any(ch.isdigit() for ch in word):
        return "sh:alnum" if any(ch.isalpha() for ch in word) else "sh:numpunct"
    if word.isupper():
        return "sh:allcap"
    if word[0].isupper():
        return "sh:initcap"
    if word.islower():
        return "sh:lower"
    if not any(ch.isalnum() for ch in word):
        return "sh:punct"
    return "sh:mixed"


def _token_at(tokens: Sequence[str], idx: int) -> str:
    if idx < 0:
        return BOS
    if idx >= len(tokens):
        return EOS
    return tokens[idx]


def _tag_at(tags: Sequence[str], idx: int) -> str:
    if not tags:
        return NO_TAG
    if idx < 0:
        return BOS
    if idx >= len(tags):
        return EOS
    return tags[idx]


def _outcome_at(outcomes_so_far: Tuple[str, ...], idx: int) -> str:
    return outcomes_so_far[idx] if 0 <= idx < len(outcomes_so_far) else BOS


class POSContextGenerator:
    """Context generator for part-of-speech tagging."""

    def __init__(self, affix_length: int = 4, window: int = 2):
        self.affix_length = affix_length
        self.window = window

    def get_context(
        self,
        position: int,
        tokens: Sequence[str],
        tags: Sequence[str],
        outcomes_so_far: Tuple[str, ...],
    ) -> Context:
        word = tokens[position]
        lower = word.lower()
        feats = ["bias", f"w={word}", f"lw={lower}", word_shape(word)]

        for n in range(1, min(self.affix_length, len(word)) + 1):
            feats.append(f"suf={lower[-n:]}")
            feats.append(f"pre={lower[:n]}")
        if "-" in word:
            feats.append("h")
        if any(ch.isdigit() for ch in word):
            feats.append("d")

        for offset in range(1, self.window + 1):
            feats.append(f"w-{offset}={_token_at(tokens, position - offset).lower()}")
            feats.append(f"w+{offset}={_token_at(tokens, position + offset).lower()}")

        prev = _outcome_at(outcomes_so_far, position - 1)
        prev2 = _outcome_at(outcomes_so_far, position - 2)
        feats.append(f"p={prev}")
        feats.append(f"pp={prev2},{prev}")
        feats.append(f"p,w={prev},{lower}")
        return tuple(feats)


class LemmatizerContextGenerator:
    """Context generator predicting lemma codes; POS tags are optional."""

    def __init__(self, suffix_length: int = 5, prefix_length: int = 3):
        self.suffix_length = suffix_length
        self.prefix_length = prefix_length

    def get_context(
        self,
        position: int,
        tokens: Sequence[str],
        tags: Sequence[str],
        outcomes_so_far: Tuple[str, ...],
    ) -> Context:
        word = tokens[position]
        lower = word.lower()
        tag = _tag_at(tags, position)
        feats = ["bias", f"w={word}", f"lw={lower}", word_shape(word), f"len={min(len(word), 10)}"]

        for n in range(1, min(self.suffix_length, len(word)) + 1):
            feats.append(f"suf={lower[-n:]}")
            feats.append(f"t,suf={tag},{lower[-n:]}")
        for n in range(1, min(self.prefix_length, len(word)) + 1):
            feats.append(f"pre={lower[:n]}")

        if tags:
            feats.append(f"t={tag}")
            feats.append(f"t-1={_tag_at(tags, position - 1)}")
            feats.append(f"t+1={_tag_at(tags, position + 1)}")
            feats.append(f"t,w={tag},{lower}")

        prev = _outcome_at(outcomes_so_far, position - 1)
        feats.append(f"p={prev}")
        feats.append(f"p,t={prev},{tag}")
        return tuple(feats)
