"""Command-line script for evaluating a trained model against gold data.

The script labels every sentence of a reference corpus with the model and
reports word accuracy. Optionally it prints a per-label precision / recall /
F1 table and writes every mislabeled token to a CSV file for error analysis.
"""
import argparse
import csv
import json
import sys
from pathlib import Path

# Add project root to path to allow for package imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from seqtag.errors import ConfigurationError, DataAccessError
from seqtag.evaluation import SequenceEvaluator
from seqtag.io_utils import open_samples
from seqtag.labeler import SequenceLabeler
from seqtag.model_io import load_model


def write_errors_csv(path: str, errors) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["sentence", "index", "token", "gold", "predicted"])
        writer.writeheader()
        writer.writerows(errors)


def main():
    """
    Main entry point for the command-line model evaluation script.

    1.  Loads the model and the reference corpus.
    2.  Labels every reference sentence and prints the word accuracy.
    3.  With ``--report``, prints the per-label precision/recall/F1 table.
    4.  With ``--errors-out``, writes every mislabeled token to a CSV file.
    """
    parser = argparse.ArgumentParser(
        description="Evaluate a sequence labeling model against a reference corpus.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--test", required=True, help="Path to the gold reference corpus.")
    parser.add_argument("--model", required=True, help="Path to the trained model JSON file.")
    parser.add_argument("--format", choices=["json", "conll"], default="conll", help="Corpus format.")
    parser.add_argument("--report", action="store_true", help="Print the per-label precision/recall/F1 report.")
    parser.add_argument("--errors-out", help="Optional: Path to write a CSV file of every mislabeled token.")
    args = parser.parse_args()

    try:
        print("Loading model...")
        model = load_model(args.model)
        task = model.factory.name
        samples = open_samples(args.test, args.format, task=task)

        evaluator = SequenceEvaluator(SequenceLabeler(model))
        report = evaluator.evaluate(samples)

        print("\n--- Evaluation ---")
        print(json.dumps(report.to_dict(), indent=2))
        print(f"Word accuracy: {report.word_accuracy:.2%}")

        if args.report:
            print("\n--- Fine-grained report ---")
            print(report.fine_grained_report().to_string(float_format=lambda v: f"{v:.3f}"))

        if args.errors_out:
            print(f"\nWriting {len(report.errors)} errors to {args.errors_out}...")
            write_errors_csv(args.errors_out, report.errors)

    except (ConfigurationError, DataAccessError, FileNotFoundError, ValueError, KeyError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
