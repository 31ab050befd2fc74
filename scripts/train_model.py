"""Command-line script for training a POS tagger or lemmatizer model."""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from seqtag.config import Config, load_config
from seqtag.errors import ConfigurationError, DataAccessError
from seqtag.factory import create_factory
from seqtag.io_utils import load_tag_dictionary, open_samples
from seqtag.model_io import save_model
from seqtag.training import check_parameters, train
from seqtag.validators import build_tag_dictionary


def resolve_tag_dictionary(cfg: Config, samples, explicit_path: Optional[str], build: bool):
    """
    Pick the tag dictionary for a POS model.

    An explicit ``--tag-dictionary`` path wins over ``paths.tag_dictionary``
    in the config. With ``--build-tag-dictionary`` the dictionary is
    collected from the training samples instead.
    """
    if cfg.task != "pos":
        return None
    if explicit_path:
        return load_tag_dictionary(explicit_path)
    configured = cfg.resolve_path("tag_dictionary")
    if configured is not None and configured.exists():
        return load_tag_dictionary(configured)
    if build:
        return build_tag_dictionary(samples)
    return None


def main():
    """
    Main entry point for the command-line model training script.

    Steps:
    1.  Load the configuration and check the training settings.
    2.  Open the training corpus (JSON or tab-separated).
    3.  Build the task factory, with a tag dictionary for POS tagging.
    4.  Train with the configured algorithm and save the model as JSON.
    """
    parser = argparse.ArgumentParser(
        description="Train a beam-search sequence labeling model.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--train", type=str, required=True, help="Path to the training corpus.")
    parser.add_argument("--model", type=str, help="Output path for the model JSON. Defaults to paths.model from the config.")
    parser.add_argument("--config", default="config.yaml", help="Path to the configuration YAML file.")
    parser.add_argument("--format", choices=["json", "conll"], default="conll", help="Corpus format.")
    parser.add_argument("--task", choices=["pos", "lemma"], help="Override the task set in the config.")
    parser.add_argument("--tag-dictionary", help="Optional JSON tag dictionary for POS tagging.")
    parser.add_argument("--build-tag-dictionary", action="store_true", help="Collect a tag dictionary from the training corpus.")
    parser.add_argument("--params", help="Optional JSON file with training settings overriding the config.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show training progress logs.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        print(f"Loading configuration from {args.config}...")
        cfg = load_config(args.config)
        if args.task:
            cfg.task = args.task
        if args.params:
            with open(args.params, "r", encoding="utf-8") as f:
                cfg.training.update(json.load(f))

        model_path = Path(args.model) if args.model else cfg.resolve_path("model")
        if model_path is None:
            raise ValueError("No output model path given; pass --model or set paths.model in the config.")

        # Settings are checked before the corpus is opened or scanned.
        params = cfg.training_parameters()
        check_parameters(params)
        create_factory(cfg.task)

        print(f"Opening training corpus {args.train} ({args.format})...")
        samples = open_samples(args.train, args.format, task=cfg.task)

        tag_dictionary = resolve_tag_dictionary(cfg, samples, args.tag_dictionary, args.build_tag_dictionary)
        if tag_dictionary:
            print(f"Using a tag dictionary with {len(tag_dictionary)} entries.")
        factory = create_factory(cfg.task, tag_dictionary=tag_dictionary)

        print(f"Training {cfg.task} model with settings {params.settings}...")
        model = train(cfg.language, samples, params, factory)

        save_model(model, model_path)
        print(f"\nSuccessfully saved model to {model_path}")

    except (ConfigurationError, DataAccessError, FileNotFoundError, ValueError, TypeError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
