import json
from pathlib import Path

import pytest

from seqtag.errors import DataAccessError
from seqtag.io_utils import (
    ConllSampleStream,
    load_samples,
    load_tag_dictionary,
    open_samples,
    save_samples,
)
from seqtag.types import Sample


def test_load_samples_keeps_null_entries(tmp_path: Path) -> None:
    path = tmp_path / "samples.json"
    path.write_text(
        json.dumps(
            {
                "sentences": [
                    {"tokens": ["the", "dog"], "outcomes": ["DET", "NOUN"]},
                    None,
                    {"tokens": ["runs"]},
                ]
            }
        ),
        encoding="utf-8",
    )

    samples = load_samples(str(path))

    assert len(samples) == 3
    assert samples[0].outcomes == ("DET", "NOUN")
    assert samples[1] is None
    assert samples[2].outcomes == ()


def test_load_samples_reports_structure_errors(tmp_path: Path) -> None:
    bad_path = tmp_path / "bad.json"
    bad_path.write_text(json.dumps({"not_sentences": []}), encoding="utf-8")

    with pytest.raises(TypeError):
        load_samples(str(bad_path))


def test_load_samples_rejects_misaligned_sentence(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"sentences": [{"tokens": ["a", "b"], "outcomes": ["X"]}]}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_samples(str(path))


def test_load_samples_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_samples(str(tmp_path / "nope.json"))


def test_save_and_load_samples(tmp_path: Path) -> None:
    path = tmp_path / "out.json"
    samples = [Sample(tokens=["a"], tags=["DET"], outcomes=["0|"]), None]

    save_samples(path, samples)

    assert load_samples(path) == [samples[0]]


def test_conll_stream_pos(tmp_path: Path) -> None:
    path = tmp_path / "train.tsv"
    path.write_text("The\tDET\ndog\tNOUN\n\n\nruns\tVERB\n", encoding="utf-8")

    stream = ConllSampleStream(path)
    samples = list(stream)

    assert samples == [
        Sample(tokens=["The", "dog"], outcomes=["DET", "NOUN"]),
        Sample(tokens=["runs"], outcomes=["VERB"]),
    ]
    assert list(stream) == samples


def test_conll_stream_lemma(tmp_path: Path) -> None:
    path = tmp_path / "train.tsv"
    path.write_text("Dogs\tNOUN\tdog\nbark\tVERB\tbark\n", encoding="utf-8")

    samples = list(open_samples(path, "conll", task="lemma"))

    assert samples == [Sample(tokens=["Dogs", "bark"], tags=["NOUN", "VERB"], outcomes=["L1|", "0|"])]


def test_conll_stream_reports_missing_columns(tmp_path: Path) -> None:
    path = tmp_path / "train.tsv"
    path.write_text("dog\n", encoding="utf-8")

    with pytest.raises(DataAccessError):
        list(ConllSampleStream(path))


def test_conll_stream_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DataAccessError):
        list(ConllSampleStream(tmp_path / "missing.tsv"))


def test_open_samples_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        open_samples(tmp_path / "x", "xml")


def test_load_tag_dictionary(tmp_path: Path) -> None:
    path = tmp_path / "dict.json"
    path.write_text(json.dumps({"run": ["VERB", "NOUN"]}), encoding="utf-8")

    assert load_tag_dictionary(path) == {"run": ["VERB", "NOUN"]}

    path.write_text(json.dumps(["run"]), encoding="utf-8")
    with pytest.raises(TypeError):
        load_tag_dictionary(path)
