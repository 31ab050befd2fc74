import dataclasses
import json
import logging
from pathlib import Path

import pytest

from seqtag.classifier import FeatureWeightsClassifier
from seqtag.errors import ConfigurationError, DataAccessError
from seqtag.factory import LemmatizerFactory, POSTaggerFactory
from seqtag.labeler import POSTagger
from seqtag.model import DEFAULT_BEAM_SIZE, SequenceLabelingModel, parse_beam_size
from seqtag.model_io import load_model, save_model
from seqtag.trainers import PerceptronSequenceModel
from seqtag.training import train
from seqtag.types import Sample
from seqtag.validators import TagDictionaryValidator


SAMPLES = [
    Sample(tokens=["the", "dog", "runs"], outcomes=["DET", "NOUN", "VERB"]),
    Sample(tokens=["a", "cat", "sleeps"], outcomes=["DET", "NOUN", "VERB"]),
]


def _classifier() -> FeatureWeightsClassifier:
    return FeatureWeightsClassifier({"w=the": {"DET": 2.0}}, ["DET", "NOUN"])


def test_parse_beam_size():
    assert parse_beam_size(None) == DEFAULT_BEAM_SIZE
    assert parse_beam_size("7") == 7
    assert parse_beam_size(" 2 ") == 2
    with pytest.raises(ConfigurationError):
        parse_beam_size("three")
    with pytest.raises(ConfigurationError):
        parse_beam_size("2.5")


def test_non_positive_beam_size_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="seqtag.model"):
        assert parse_beam_size("0") == DEFAULT_BEAM_SIZE
    assert "non-positive" in caplog.text


def test_model_defaults_beam_size_and_language():
    model = SequenceLabelingModel("de", POSTaggerFactory(), {}, classifier=_classifier())

    assert model.beam_size == 3
    assert model.get_manifest_property("Language") == "de"
    assert model.get_manifest_property("BeamSize") is None


def test_non_numeric_manifest_beam_size_is_fatal():
    with pytest.raises(ConfigurationError):
        SequenceLabelingModel("en", POSTaggerFactory(), {"BeamSize": "big"}, classifier=_classifier())


def test_model_is_immutable():
    manifest = {"BeamSize": "4"}
    model = SequenceLabelingModel("en", POSTaggerFactory(), manifest, classifier=_classifier())

    manifest["BeamSize"] = "9"
    assert model.beam_size == 4
    assert model.manifest["BeamSize"] == "4"
    with pytest.raises(TypeError):
        model.manifest["BeamSize"] = "9"
    with pytest.raises(dataclasses.FrozenInstanceError):
        model.beam_size = 9


def test_model_requires_exactly_one_classifier():
    with pytest.raises(ValueError):
        SequenceLabelingModel("en", POSTaggerFactory(), {})
    with pytest.raises(ValueError):
        SequenceLabelingModel(
            "en",
            POSTaggerFactory(),
            {},
            classifier=_classifier(),
            sequence_model=PerceptronSequenceModel(_classifier(), 3),
        )


def test_event_model_round_trip(tmp_path: Path):
    factory = POSTaggerFactory(tag_dictionary={"dog": ["NOUN"]})
    model = train("en", SAMPLES, {"BeamSize": 2}, factory)
    path = tmp_path / "models" / "pos.json"

    save_model(model, path)
    loaded = load_model(path)

    assert dict(loaded.manifest) == dict(model.manifest)
    assert loaded.beam_size == 2
    assert loaded.factory.name == "pos"
    assert isinstance(loaded.factory.sequence_validator, TagDictionaryValidator)
    assert loaded.classifier.outcomes == model.classifier.outcomes
    for sample in SAMPLES:
        assert POSTagger(loaded).tag(sample.tokens) == POSTagger(model).tag(sample.tokens)


def test_sequence_model_round_trip(tmp_path: Path):
    params = {"Algorithm": "STRUCTURED_PERCEPTRON", "Iterations": 3, "BeamSize": 4}
    model = train("en", SAMPLES, params, LemmatizerFactory())
    path = tmp_path / "lemma.json"

    save_model(model, path)
    loaded = load_model(path)

    assert isinstance(loaded.sequence_model, PerceptronSequenceModel)
    assert loaded.sequence_model.beam_size == 4
    assert loaded.factory.name == "lemma"
    assert loaded.manifest["TrainerType"] == "Sequence"


def test_load_missing_model_raises(tmp_path: Path):
    with pytest.raises(DataAccessError):
        load_model(tmp_path / "missing.json")


def test_load_invalid_json_raises(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataAccessError):
        load_model(path)


def test_load_model_missing_section_raises(tmp_path: Path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"manifest": {}, "factory": {"name": "pos"}}), encoding="utf-8")
    with pytest.raises(DataAccessError):
        load_model(path)


def test_load_model_unknown_kind_raises(tmp_path: Path):
    path = tmp_path / "odd.json"
    path.write_text(
        json.dumps(
            {
                "manifest": {"BeamSize": "3"},
                "factory": {"name": "pos"},
                "kind": "neural",
                "outcomes": ["A"],
                "weights": {},
            }
        ),
        encoding="utf-8",
    )
    with pytest.raises(DataAccessError):
        load_model(path)


def test_load_model_with_bad_beam_size_is_fatal(tmp_path: Path):
    path = tmp_path / "bad_beam.json"
    path.write_text(
        json.dumps(
            {
                "manifest": {"BeamSize": "x"},
                "factory": {"name": "pos"},
                "kind": "event",
                "outcomes": ["A"],
                "weights": {},
            }
        ),
        encoding="utf-8",
    )
    with pytest.raises(ConfigurationError):
        load_model(path)


def test_sequence_model_decoding_honours_cache_size():
    shared = PerceptronSequenceModel(_classifier(), 3)
    model = SequenceLabelingModel("en", POSTaggerFactory(), {}, sequence_model=shared)

    assert model.sequence_model_for_decoding() is shared
    cached = model.sequence_model_for_decoding(cache_size=8)

    assert cached is not shared
    assert cached.cache_size == 8
    assert shared.cache_size == 0
    cg = model.factory.context_generator
    assert cached.best_sequence(["the"], None, cg).outcomes == shared.best_sequence(["the"], None, cg).outcomes
