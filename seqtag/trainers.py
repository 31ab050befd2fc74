"""Trainers producing the classifiers used by the beam search.

Three trainers are provided, one per trainer kind understood by
:func:`seqtag.training.train`:

1.  **CountTrainer** (event trainer): treats every token as an isolated
    event. A pandas table of weighted ``(feature, outcome)`` counts is
    smoothed, normalised per feature and turned into log-odds weights. The
    optional re-weighting rounds score the training events with the current
    weights and boost the sample weight of every misclassified event before
    rebuilding the table.
2.  **PerceptronSequenceTrainer** (event-model-sequence trainer): an averaged
    perceptron that decodes each training sentence with beam search and
    updates towards the gold events and away from the predicted ones. The
    result is still a per-token event model.
3.  **StructuredPerceptronTrainer** (sequence trainer): the same sentence
    level training, returned as a :class:`PerceptronSequenceModel` that owns
    its decoding.
"""
from __future__ import annotations
import logging
import math
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Sequence as SequenceType, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .beam_search import BeamSearch
from .classifier import FeatureWeightsClassifier, softmax
from .events import SequenceStream
from .types import Context, Event, Sequence
from .validators import SequenceValidator

logger = logging.getLogger(__name__)


def log_odds(p: float, eps: float = 1e-6) -> float:
    """
    Converts a probability to log-odds.

    Args:
        p: The probability (0.0 to 1.0).
        eps: A small epsilon value to prevent division by zero or log(0).

    Returns:
        The log-odds representation of the probability.
    """
    p = min(1 - eps, max(eps, p))
    return math.log(p / (1 - p))


def events_to_frame(events: SequenceType[Event]) -> pd.DataFrame:
    """One row per ``(event, feature)`` pair, with the event's gold outcome."""
    rows = [
        (idx, feature, event.outcome)
        for idx, event in enumerate(events)
        for feature in dict.fromkeys(event.context)
    ]
    return pd.DataFrame(rows, columns=["event", "feature", "outcome"])


def build_weights(
    df: pd.DataFrame,
    outcomes: SequenceType[str],
    smoothing: float = 0.1,
    cutoff: int = 0,
    sample_weights: Optional[pd.Series] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Builds per-feature log-odds weights from an event frame.

    For every feature, the (sample-weighted) count of each outcome is
    smoothed with ``smoothing``, normalised into ``P(outcome | feature)`` and
    converted to log-odds.

    Args:
        df: Frame produced by :func:`events_to_frame`.
        outcomes: The outcome alphabet.
        smoothing: Additive smoothing applied to every count.
        cutoff: Features seen in fewer than ``cutoff`` events are dropped.
        sample_weights: Optional per-event weights indexed by event id.

    Returns:
        ``{feature: {outcome: weight}}``.

    Raises:
        ValueError: If the frame is empty.
    """
    if df.empty:
        raise ValueError("Input DataFrame is empty. Cannot build weights.")

    if sample_weights is not None:
        df = df.assign(sample_weight=df["event"].map(sample_weights).fillna(1.0))
    else:
        df = df.assign(sample_weight=1.0)

    if cutoff > 0:
        support = df.groupby("feature")["event"].nunique()
        df = df[df["feature"].isin(support[support >= cutoff].index)]
        if df.empty:
            raise ValueError(f"No feature reaches the cutoff of {cutoff} events.")

    counts = df.groupby(["feature", "outcome"])["sample_weight"].sum().unstack(fill_value=0.0)
    counts = counts.reindex(columns=list(outcomes), fill_value=0.0) + smoothing
    probs = counts.div(counts.sum(axis=1), axis=0)

    weights: Dict[str, Dict[str, float]] = {}
    for feature, row in probs.iterrows():
        weights[str(feature)] = {outcome: log_odds(float(row[outcome])) for outcome in outcomes}
    return weights


class CountTrainer:
    """Event trainer based on smoothed, optionally re-weighted feature counts."""

    def __init__(self, smoothing: float = 0.1, cutoff: int = 0, iterations: int = 1, error_boost: float = 1.0):
        self.smoothing = smoothing
        self.cutoff = cutoff
        self.iterations = max(1, iterations)
        self.error_boost = error_boost

    def train(self, events: Iterable[Event]) -> FeatureWeightsClassifier:
        event_list = list(tqdm(events, desc="Collecting events", unit="event"))
        if not event_list:
            raise ValueError("No training events were produced from the samples.")

        outcomes = sorted({event.outcome for event in event_list})
        df = events_to_frame(event_list)
        gold = pd.Series([event.outcome for event in event_list])
        sample_weights = pd.Series(1.0, index=gold.index)
        logger.info(
            "Training on %d events, %d outcomes, %d distinct features.",
            len(event_list),
            len(outcomes),
            df["feature"].nunique(),
        )

        classifier: Optional[FeatureWeightsClassifier] = None
        for i in range(self.iterations):
            weights = build_weights(df, outcomes, self.smoothing, self.cutoff, sample_weights)
            classifier = FeatureWeightsClassifier(weights, outcomes)

            if i == self.iterations - 1:
                break

            predictions = pd.Series(
                [classifier.best_outcome(event.context) for event in tqdm(event_list, desc=f"Predicting (Iter {i + 1})")]
            )
            errors = predictions != gold
            logger.info("Iteration %d accuracy on training events: %.2f%%", i + 1, 100.0 * (1 - errors.mean()))
            if not errors.any():
                logger.info("All training events classified correctly; stopping early.")
                break
            sample_weights[errors] += self.error_boost

        return classifier


class _AveragedPerceptron:
    """
    Sparse multi-class perceptron weights with lazy averaging.

    ``score_distribution`` reads the live (non-averaged) weights so the
    object can be decoded with while training is in progress.
    """

    def __init__(self, outcomes: SequenceType[str], features: Optional[set] = None):
        self._outcomes: Tuple[str, ...] = tuple(outcomes)
        self._features = features
        self.weights: Dict[str, Dict[str, float]] = defaultdict(dict)
        self._totals: Dict[Tuple[str, str], float] = defaultdict(float)
        self._stamps: Dict[Tuple[str, str], int] = defaultdict(int)
        self.step = 0

    @property
    def outcomes(self) -> Tuple[str, ...]:
        return self._outcomes

    def score_distribution(self, context: Context) -> Dict[str, float]:
        scores = np.zeros(len(self._outcomes), dtype=float)
        for feature in context:
            row = self.weights.get(feature)
            if not row:
                continue
            for j, outcome in enumerate(self._outcomes):
                scores[j] += row.get(outcome, 0.0)
        probs = softmax(scores)
        return {outcome: float(p) for outcome, p in zip(self._outcomes, probs)}

    def _update(self, feature: str, outcome: str, delta: float) -> None:
        if self._features is not None and feature not in self._features:
            return
        key = (feature, outcome)
        current = self.weights[feature].get(outcome, 0.0)
        self._totals[key] += (self.step - self._stamps[key]) * current
        self._stamps[key] = self.step
        self.weights[feature][outcome] = current + delta

    def update(self, gold: SequenceType[Event], predicted: SequenceType[Event]) -> int:
        """Apply one sentence-level update; returns the number of wrong tokens."""
        mistakes = 0
        for g, p in zip(gold, predicted):
            if g == p:
                continue
            if g.outcome != p.outcome:
                mistakes += 1
            for feature in g.context:
                self._update(feature, g.outcome, 1.0)
            for feature in p.context:
                self._update(feature, p.outcome, -1.0)
        return mistakes

    def averaged(self) -> Dict[str, Dict[str, float]]:
        step = max(1, self.step)
        out: Dict[str, Dict[str, float]] = {}
        for feature, row in self.weights.items():
            averaged_row = {}
            for outcome, value in row.items():
                key = (feature, outcome)
                total = self._totals[key] + (self.step - self._stamps[key]) * value
                averaged_row[outcome] = total / step
            out[feature] = averaged_row
        return out


def _collect_alphabet(stream: SequenceStream, cutoff: int) -> Tuple[List[str], Optional[set]]:
    outcomes = set()
    feature_counts: Counter = Counter()
    for seq in stream:
        for event in seq.events:
            outcomes.add(event.outcome)
            if cutoff > 0:
                feature_counts.update(set(event.context))
    if not outcomes:
        raise ValueError("No training sequences were produced from the samples.")
    features = None
    if cutoff > 0:
        features = {feature for feature, count in feature_counts.items() if count >= cutoff}
    return sorted(outcomes), features


def train_perceptron(
    stream: SequenceStream,
    iterations: int,
    beam_size: int,
    cutoff: int = 0,
    validator: Optional[SequenceValidator] = None,
) -> FeatureWeightsClassifier:
    """
    Averaged perceptron over whole sentences.

    Every sentence is decoded with the current weights; when the prediction
    differs from the gold labels, gold events are reinforced and predicted
    events penalised.
    """
    outcomes, features = _collect_alphabet(stream, cutoff)
    perceptron = _AveragedPerceptron(outcomes, features)
    decoder = BeamSearch(beam_size, perceptron)

    for i in range(max(1, iterations)):
        mistakes = 0
        tokens_seen = 0
        for seq in tqdm(stream, desc=f"Perceptron (Iter {i + 1})", unit="sent"):
            perceptron.step += 1
            predicted = stream.update_context(seq.sample, decoder, validator)
            mistakes += perceptron.update(seq.events, predicted)
            tokens_seen += len(seq.events)
        accuracy = 1.0 - mistakes / max(1, tokens_seen)
        logger.info("Iteration %d training accuracy: %.2f%%", i + 1, 100.0 * accuracy)
        if mistakes == 0:
            logger.info("No training mistakes; stopping early.")
            break

    return FeatureWeightsClassifier(perceptron.averaged(), outcomes)


class PerceptronSequenceTrainer:
    """Event-model-sequence trainer: sentence-level perceptron, per-token model."""

    def __init__(self, iterations: int = 10, beam_size: int = 3, cutoff: int = 0,
                 validator: Optional[SequenceValidator] = None):
        self.iterations = iterations
        self.beam_size = beam_size
        self.cutoff = cutoff
        self.validator = validator

    def train(self, stream: SequenceStream) -> FeatureWeightsClassifier:
        return train_perceptron(stream, self.iterations, self.beam_size, self.cutoff, self.validator)


class PerceptronSequenceModel:
    """
    Sequence model produced by :class:`StructuredPerceptronTrainer`.

    It keeps the trained weights and its own beam width and decodes whole
    sentences itself. With ``cache_size`` zero the model holds no mutable
    state and can be shared; use :meth:`with_cache` to get a private copy
    that caches context distributions.
    """

    def __init__(self, classifier: FeatureWeightsClassifier, beam_size: int, cache_size: int = 0):
        self.classifier = classifier
        self.beam_size = beam_size
        self._search = BeamSearch(beam_size, classifier, cache_size=cache_size)

    @property
    def outcomes(self) -> Tuple[str, ...]:
        return self.classifier.outcomes

    @property
    def cache_size(self) -> int:
        return self._search.cache_size

    def with_cache(self, cache_size: int) -> "PerceptronSequenceModel":
        return PerceptronSequenceModel(self.classifier, self.beam_size, cache_size=cache_size)

    def best_sequence(self, tokens, tags, context_generator, validator=None) -> Sequence:
        return self._search.best_sequence(tokens, tags, context_generator, validator)

    def best_sequences(self, num_sequences, tokens, tags, context_generator, validator=None,
                       min_score=None) -> List[Sequence]:
        return self._search.best_sequences(
            num_sequences, tokens, tags, context_generator, validator, min_score=min_score
        )


class StructuredPerceptronTrainer:
    """Sequence trainer: returns a model that decodes sentences on its own."""

    def __init__(self, iterations: int = 10, beam_size: int = 3, cutoff: int = 0,
                 validator: Optional[SequenceValidator] = None):
        self.iterations = iterations
        self.beam_size = beam_size
        self.cutoff = cutoff
        self.validator = validator

    def train(self, stream: SequenceStream) -> PerceptronSequenceModel:
        classifier = train_perceptron(stream, self.iterations, self.beam_size, self.cutoff, self.validator)
        return PerceptronSequenceModel(classifier, self.beam_size)
