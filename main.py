import argparse
import json
import sys
from pathlib import Path

# Add project root to path for robust execution
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from seqtag.config import load_config
from seqtag.errors import ConfigurationError, DataAccessError
from seqtag.io_utils import load_samples
from seqtag.labeler import Lemmatizer, POSTagger
from seqtag.lemma_codes import decode_lemmas
from seqtag.model_io import load_model


def label_samples(model, samples, with_probs: bool = False, cache_size: int = 0):
    """Label every sample and return JSON-ready sentence records."""
    is_lemma = model.factory.name == "lemma"
    labeler = Lemmatizer(model, cache_size=cache_size) if is_lemma else POSTagger(model, cache_size=cache_size)
    records = []
    for sample in samples:
        if sample is None:
            continue
        if is_lemma:
            outcomes = labeler.lemmatize(sample.tokens, sample.tags)
        else:
            outcomes = labeler.tag(sample.tokens)
        record = {"tokens": list(sample.tokens), "tags": list(sample.tags), "outcomes": outcomes}
        if is_lemma:
            # Reuse the predicted codes rather than labeling the sentence twice.
            record["lemmas"] = decode_lemmas(sample.tokens, outcomes)
        if with_probs:
            record["probs"] = labeler.probs()
        records.append(record)
    return records


def main():
    """
    Main command-line interface for labeling sentences with a trained model.

    1.  Loads the model JSON file.
    2.  Loads the input sentences (JSON, outcomes not required).
    3.  Labels every sentence with beam search; lemmatizer models also get
        their codes decoded into lemmas.
    4.  Writes the labeled sentences as JSON.
    """
    parser = argparse.ArgumentParser(
        description="Label sentences with a trained POS tagger or lemmatizer.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--input", required=True, help="Path to the input sentences JSON file.")
    parser.add_argument("--output", required=True, help="Path to write the labeled JSON file.")
    parser.add_argument("--model", required=True, help="Path to the trained model JSON file.")
    parser.add_argument("--probs", action="store_true", help="Include per-token probabilities in the output.")
    parser.add_argument("--config", help="Optional configuration YAML; only cache_size is read.")
    args = parser.parse_args()

    try:
        print(f"Loading model from {args.model}...")
        model = load_model(args.model)

        print(f"Loading sentences from {args.input}...")
        samples = load_samples(args.input)

        print("Labeling sentences...")
        cache_size = load_config(args.config).cache_size if args.config else 0
        records = label_samples(model, samples, with_probs=args.probs, cache_size=cache_size)

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump({"sentences": records}, f, ensure_ascii=False, indent=2)

        print(f"\nSuccessfully wrote {len(records)} labeled sentences to {args.output}")

    except (ConfigurationError, DataAccessError, FileNotFoundError, ValueError, TypeError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
