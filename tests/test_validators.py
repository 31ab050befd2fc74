from seqtag.types import Sample
from seqtag.validators import (
    DefaultSequenceValidator,
    TagDictionaryValidator,
    TransitionValidator,
    build_tag_dictionary,
)


def test_default_validator_accepts_everything():
    assert DefaultSequenceValidator().is_valid(0, ["x"], (), "ANY")


def test_tag_dictionary_restricts_known_words():
    validator = TagDictionaryValidator({"the": ["DET"], "run": ["NOUN", "VERB"]})
    tokens = ["The", "run", "zebra"]

    assert validator.is_valid(0, tokens, (), "DET")
    assert not validator.is_valid(0, tokens, (), "NOUN")
    assert validator.is_valid(1, tokens, ("DET",), "VERB")
    assert not validator.is_valid(1, tokens, ("DET",), "ADJ")
    # Unknown words are unrestricted.
    assert validator.is_valid(2, tokens, ("DET", "NOUN"), "ADJ")


def test_transition_validator():
    validator = TransitionValidator([("DET", "VERB")])

    assert validator.is_valid(0, ["a"], (), "VERB")
    assert not validator.is_valid(1, ["a", "b"], ("DET",), "VERB")
    assert validator.is_valid(1, ["a", "b"], ("DET",), "NOUN")


def test_build_tag_dictionary_collects_outcomes():
    samples = [
        Sample(tokens=["run", "fast"], outcomes=["VERB", "ADV"]),
        None,
        Sample(tokens=["the", "run"], outcomes=["DET", "NOUN"]),
    ]

    assert build_tag_dictionary(samples) == {
        "fast": ["ADV"],
        "run": ["NOUN", "VERB"],
        "the": ["DET"],
    }
