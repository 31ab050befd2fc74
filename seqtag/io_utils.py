"""Provides utility functions for loading and saving labeled samples.

Two corpus formats are supported:

*   JSON files with a ``"sentences"`` key holding a list of objects with
    ``tokens``, optional ``tags`` and optional ``outcomes`` lists
    (:func:`load_samples` / :func:`save_samples`).
*   Tab-separated CoNLL-style files, one token per line
    (``word<TAB>tag[<TAB>lemma]``) with blank lines between sentences, read
    lazily by :class:`ConllSampleStream`.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .errors import DataAccessError
from .types import LemmaSample, Sample


def load_samples(path: Union[str, Path]) -> List[Sample]:
    """
    Loads a list of Sample objects from a JSON file.

    Args:
        path: The path to the input JSON file.

    Returns:
        A list of `Sample` instances.

    Raises:
        FileNotFoundError: If the file at the specified path does not exist.
        ValueError: If the file is not valid JSON or a sentence has
                    misaligned fields.
        TypeError: If the JSON structure is incorrect (e.g., "sentences" key
                   is missing or not a list, or an item is not a dictionary).
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Sample file not found at: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from {path}: {e}")

    items = data.get("sentences") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise TypeError(f"Expected a 'sentences' key with a list of objects in {path}")

    out = []
    for i, item in enumerate(items):
        if item is None:
            out.append(None)
            continue
        if not isinstance(item, dict):
            raise TypeError(f"Sentence at index {i} in {path} is not a dictionary.")
        try:
            out.append(
                Sample(
                    tokens=item.get("tokens", []),
                    tags=item.get("tags") or [],
                    outcomes=item.get("outcomes") or [],
                )
            )
        except ValueError as e:
            raise ValueError(f"Sentence at index {i} in {path}: {e}")
    return out


def save_samples(path: Union[str, Path], samples: Iterable[Sample]) -> None:
    """Saves samples to a JSON file in the layout read by :func:`load_samples`."""
    sentences = [
        {"tokens": list(s.tokens), "tags": list(s.tags), "outcomes": list(s.outcomes)}
        for s in samples
        if s is not None
    ]
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"sentences": sentences}, f, ensure_ascii=False, indent=2)


class ConllSampleStream:
    """
    Restartable, lazy reader for tab-separated corpora.

    Every iteration reopens the file. For ``task="pos"`` the second column is
    the outcome; for ``task="lemma"`` the second column is the auxiliary POS
    tag and the third column the lemma, which is converted into a lemma code.
    Columns beyond those are ignored.

    Raises (during iteration):
        DataAccessError: If the file cannot be read or a line is malformed.
    """

    def __init__(self, path: Union[str, Path], task: str = "pos"):
        if task not in ("pos", "lemma"):
            raise ValueError(f"Unknown task '{task}' for CoNLL reader.")
        self.path = Path(path)
        self.task = task

    def _to_sample(self, rows: List[List[str]], line_no: int) -> Sample:
        needed = 3 if self.task == "lemma" else 2
        for row in rows:
            if len(row) < needed:
                raise DataAccessError(
                    f"{self.path}: sentence ending at line {line_no} needs {needed} columns, got {row!r}"
                )
        tokens = [row[0] for row in rows]
        if self.task == "lemma":
            return LemmaSample(tokens, [row[1] for row in rows], [row[2] for row in rows]).to_sample()
        return Sample(tokens=tokens, outcomes=[row[1] for row in rows])

    def __iter__(self) -> Iterator[Sample]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                rows: List[List[str]] = []
                line_no = 0
                for line_no, line in enumerate(f, start=1):
                    line = line.rstrip("\n")
                    if not line.strip():
                        if rows:
                            yield self._to_sample(rows, line_no)
                            rows = []
                        continue
                    rows.append(line.split("\t"))
                if rows:
                    yield self._to_sample(rows, line_no)
        except UnicodeDecodeError as e:
            raise DataAccessError(f"Could not decode {self.path}: {e}") from e
        except DataAccessError:
            raise
        except OSError as e:
            raise DataAccessError(f"Could not read corpus {self.path}: {e}") from e


def open_samples(path: Union[str, Path], fmt: str, task: str = "pos") -> Iterable[Optional[Sample]]:
    """Open a corpus in ``fmt`` (``"json"`` or ``"conll"``)."""
    if fmt == "json":
        return load_samples(path)
    if fmt == "conll":
        return ConllSampleStream(path, task=task)
    raise ValueError(f"Unknown corpus format '{fmt}'. Expected 'json' or 'conll'.")


def load_tag_dictionary(path: Union[str, Path]) -> Dict[str, List[str]]:
    """Load a ``{word: [tags]}`` JSON tag dictionary."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Tag dictionary not found at: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from {path}: {e}")
    if not isinstance(data, dict):
        raise TypeError(f"Tag dictionary {path} must be a JSON object.")
    return {str(word): [str(tag) for tag in tags] for word, tags in data.items()}
