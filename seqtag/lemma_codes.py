"""Induced lemma permutation classes.

The lemmatizer never predicts a lemma directly. Instead each (word form,
lemma) pair is reduced to a short transformation code that many words share,
e.g. ``runs -> run`` and ``dogs -> dog`` both map to ``1|`` ("strip one
trailing character, append nothing"). The classifier learns to predict these
codes and :func:`decode_lemma` applies them back to the word form.

Code layout::

    [L]<strip>|<append>

``L`` marks that the word form is lower-cased before the edit is applied.
"""
from __future__ import annotations
import os
import re
from typing import Iterable, List

IDENTITY_CODE = "0|"

_CODE_RE = re.compile(r"^(L?)(\d+)\|(.*)$", re.DOTALL)


def encode_lemma(word: str, lemma: str) -> str:
    """Return the shortest suffix-edit code turning ``word`` into ``lemma``."""
    lower_case = word != word.lower() and lemma == lemma.lower()
    base = word.lower() if lower_case else word
    keep = len(os.path.commonprefix([base, lemma]))
    strip = len(base) - keep
    append = lemma[keep:]
    return f"{'L' if lower_case else ''}{strip}|{append}"


def decode_lemma(word: str, code: str) -> str:
    """
    Apply a code produced by :func:`encode_lemma` to ``word``.

    Codes that do not parse, or that would strip more characters than the word
    has, leave the word form unchanged. The classifier can predict codes that
    were learnt on longer words, so this case is expected at inference time.
    """
    match = _CODE_RE.match(code or "")
    if not match:
        return word
    lower_flag, strip_str, append = match.groups()
    strip = int(strip_str)
    base = word.lower() if lower_flag else word
    if strip > len(base):
        return word
    return base[: len(base) - strip] + append


def decode_lemmas(tokens: Iterable[str], codes: Iterable[str]) -> List[str]:
    """Decode a full sentence of lemma codes."""
    return [decode_lemma(tok, code) for tok, code in zip(tokens, codes)]
