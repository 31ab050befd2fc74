"""Smoke tests for the labeling CLI in ``main.py``."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

import main
from seqtag.factory import LemmatizerFactory, POSTaggerFactory
from seqtag.model_io import save_model
from seqtag.training import train
from seqtag.types import Sample


@pytest.fixture(autouse=True)
def restore_argv():
    original = sys.argv[:]
    try:
        yield
    finally:
        sys.argv = original


def test_main_requires_input_arguments():
    """Invoking ``main.main`` without the mandatory flags exits gracefully."""
    sys.argv = ["main"]
    with pytest.raises(SystemExit):
        main.main()


def test_main_labels_sentences(tmp_path: Path):
    samples = [
        Sample(tokens=["the", "dog", "runs"], outcomes=["DET", "NOUN", "VERB"]),
        Sample(tokens=["a", "cat", "sleeps"], outcomes=["DET", "NOUN", "VERB"]),
    ]
    model_path = tmp_path / "pos.json"
    save_model(train("en", samples, {}, POSTaggerFactory()), model_path)

    input_path = tmp_path / "input.json"
    input_path.write_text(json.dumps({"sentences": [{"tokens": ["the", "cat", "sleeps"]}, None]}), encoding="utf-8")
    output_path = tmp_path / "out" / "labeled.json"

    sys.argv = ["main", "--input", str(input_path), "--output", str(output_path), "--model", str(model_path), "--probs"]
    main.main()

    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(data["sentences"]) == 1
    record = data["sentences"][0]
    assert record["outcomes"] == ["DET", "NOUN", "VERB"]
    assert len(record["probs"]) == 3
    assert all(0.0 < p <= 1.0 for p in record["probs"])


def test_label_samples_decodes_lemmas():
    samples = [
        Sample(tokens=["dogs", "bark"], tags=["NOUN", "VERB"], outcomes=["1|", "0|"]),
        Sample(tokens=["cats", "sleep"], tags=["NOUN", "VERB"], outcomes=["1|", "0|"]),
    ]
    model = train("en", samples, {}, LemmatizerFactory())

    records = main.label_samples(model, [Sample(tokens=["cats", "bark"], tags=["NOUN", "VERB"])])

    assert records[0]["outcomes"] == ["1|", "0|"]
    assert records[0]["lemmas"] == ["cat", "bark"]


def test_main_reports_missing_model(tmp_path: Path, capsys):
    input_path = tmp_path / "input.json"
    input_path.write_text(json.dumps({"sentences": []}), encoding="utf-8")

    sys.argv = ["main", "--input", str(input_path), "--output", str(tmp_path / "o.json"), "--model", str(tmp_path / "none.json")]
    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
    assert "Error:" in capsys.readouterr().err
