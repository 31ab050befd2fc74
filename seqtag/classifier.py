from __future__ import annotations
from types import MappingProxyType
from typing import Dict, Mapping, Protocol, Sequence, Tuple

import numpy as np

from .types import Context


class Classifier(Protocol):
    """
    The probabilistic model consumed by the beam search.

    Implementations must be read-only once trained so that one instance can
    serve many decoders at the same time.
    """

    @property
    def outcomes(self) -> Tuple[str, ...]:
        ...

    def score_distribution(self, context: Context) -> Dict[str, float]:
        ...


class FeatureWeightsClassifier:
    """
    Log-linear classifier over string features.

    Every feature in a context contributes one weight per outcome. The summed
    weights are turned into a probability distribution with a softmax. The
    weights come from one of the trainers in :mod:`seqtag.trainers`.

    Attributes:
        outcomes: The outcome alphabet, in the order distributions are
            reported. The beam search visits candidates in this order, so it
            also decides tie-breaking.
        weights: Mapping of feature to ``{outcome: weight}``. Unknown
            features are ignored at scoring time.
    """

    def __init__(self, weights: Mapping[str, Mapping[str, float]], outcomes: Sequence[str]):
        if not outcomes:
            raise ValueError("A classifier needs at least one outcome.")
        self._outcomes: Tuple[str, ...] = tuple(outcomes)
        self._index = {outcome: i for i, outcome in enumerate(self._outcomes)}
        # Dense rows keep scoring to one numpy add per feature.
        rows: Dict[str, np.ndarray] = {}
        for feature, per_outcome in weights.items():
            row = np.zeros(len(self._outcomes), dtype=float)
            for outcome, value in per_outcome.items():
                idx = self._index.get(outcome)
                if idx is not None:
                    row[idx] = float(value)
            row.setflags(write=False)
            rows[feature] = row
        self._rows = MappingProxyType(rows)

    @property
    def outcomes(self) -> Tuple[str, ...]:
        return self._outcomes

    def raw_scores(self, context: Context) -> np.ndarray:
        total = np.zeros(len(self._outcomes), dtype=float)
        for feature in context:
            row = self._rows.get(feature)
            if row is not None:
                total += row
        return total

    def score_distribution(self, context: Context) -> Dict[str, float]:
        """Return ``{outcome: probability}`` for ``context``; values sum to 1."""
        probs = softmax(self.raw_scores(context))
        return {outcome: float(p) for outcome, p in zip(self._outcomes, probs)}

    def best_outcome(self, context: Context) -> str:
        scores = self.raw_scores(context)
        # argmax returns the first maximum, matching the outcome-order tie rule.
        return self._outcomes[int(np.argmax(scores))]

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        """Sparse ``{feature: {outcome: weight}}`` view, used for persistence."""
        out: Dict[str, Dict[str, float]] = {}
        for feature, row in self._rows.items():
            entries = {
                self._outcomes[i]: float(value)
                for i, value in enumerate(row)
                if value != 0.0
            }
            if entries:
                out[feature] = entries
        return out


def softmax(scores: np.ndarray) -> np.ndarray:
    """Numerically stable softmax."""
    if scores.size == 0:
        return scores
    shifted = scores - np.max(scores)
    exp = np.exp(shifted)
    return exp / exp.sum()
