"""Word-level evaluation of a labeler against gold samples.

:class:`SequenceEvaluator` labels every reference sentence, compares the
predicted outcome of each token with the gold outcome and collects:

-   **Word accuracy**: the share of tokens labeled correctly.
-   **Errors**: one record per mislabeled token, for error analysis.
-   **Fine-grained report**: per-label precision, recall and F1 built with a
    pandas cross tabulation.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd
from tqdm import tqdm

from .labeler import SequenceLabeler
from .types import Sample


@dataclass
class EvaluationReport:
    """Results of one evaluation run."""
    token_count: int = 0
    correct_count: int = 0
    sentence_count: int = 0
    errors: List[Dict[str, object]] = field(default_factory=list)
    gold: List[str] = field(default_factory=list)
    predicted: List[str] = field(default_factory=list)

    @property
    def word_accuracy(self) -> float:
        return self.correct_count / self.token_count if self.token_count else 0.0

    def fine_grained_report(self) -> pd.DataFrame:
        """
        Per-label precision, recall, F1 and support.

        Returns:
            A DataFrame indexed by label with ``precision``, ``recall``, ``f1``
            and ``support`` columns, sorted by label.
        """
        columns = ["precision", "recall", "f1", "support"]
        if not self.gold:
            return pd.DataFrame(columns=columns)

        frame = pd.DataFrame({"gold": self.gold, "predicted": self.predicted})
        labels = sorted(set(self.gold) | set(self.predicted))
        confusion = pd.crosstab(frame["gold"], frame["predicted"]).reindex(
            index=labels, columns=labels, fill_value=0
        )
        true_pos = pd.Series({label: confusion.at[label, label] for label in labels}, dtype=float)
        support = confusion.sum(axis=1).astype(float)
        predicted_totals = confusion.sum(axis=0).astype(float)

        precision = (true_pos / predicted_totals.where(predicted_totals > 0)).fillna(0.0)
        recall = (true_pos / support.where(support > 0)).fillna(0.0)
        denom = precision + recall
        f1 = (2 * precision * recall / denom.where(denom > 0)).fillna(0.0)

        report = pd.DataFrame(
            {"precision": precision, "recall": recall, "f1": f1, "support": support.astype(int)}
        )
        return report[columns]

    def to_dict(self) -> Dict[str, object]:
        return {
            "sentences": self.sentence_count,
            "tokens": self.token_count,
            "correct": self.correct_count,
            "word_accuracy": self.word_accuracy,
        }


class SequenceEvaluator:
    """Evaluates a :class:`~seqtag.labeler.SequenceLabeler` on gold samples."""

    def __init__(self, labeler: SequenceLabeler):
        self.labeler = labeler

    def evaluate_sample(self, sample: Sample, report: EvaluationReport) -> None:
        predicted = self.labeler.label(sample.tokens, sample.tags)
        report.sentence_count += 1
        for idx, (token, gold, pred) in enumerate(zip(sample.tokens, sample.outcomes, predicted)):
            report.token_count += 1
            report.gold.append(gold)
            report.predicted.append(pred)
            if gold == pred:
                report.correct_count += 1
            else:
                report.errors.append(
                    {
                        "sentence": report.sentence_count - 1,
                        "index": idx,
                        "token": token,
                        "gold": gold,
                        "predicted": pred,
                    }
                )

    def evaluate(self, samples: Iterable[Optional[Sample]], show_progress: bool = True) -> EvaluationReport:
        """
        Label every sample and compare with its gold outcomes.

        ``None`` samples and samples without gold outcomes are skipped.
        """
        report = EvaluationReport()
        for sample in tqdm(samples, desc="Evaluating", unit="sent", disable=not show_progress):
            if sample is None or not sample.outcomes:
                continue
            self.evaluate_sample(sample, report)
        return report
