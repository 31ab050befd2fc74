import pytest

from seqtag.lemma_codes import IDENTITY_CODE, decode_lemma, decode_lemmas, encode_lemma
from seqtag.types import LemmaSample


@pytest.mark.parametrize(
    "word, lemma, code",
    [
        ("runs", "run", "1|"),
        ("dog", "dog", IDENTITY_CODE),
        ("Dogs", "dog", "L1|"),
        ("went", "go", "4|go"),
        ("studies", "study", "3|y"),
        ("Paris", "Paris", "0|"),
    ],
)
def test_encode_and_apply(word, lemma, code):
    assert encode_lemma(word, lemma) == code
    assert decode_lemma(word, code) == lemma


def test_codes_generalise_across_words():
    assert decode_lemma("cats", encode_lemma("dogs", "dog")) == "cat"


def test_unusable_codes_leave_word_unchanged():
    assert decode_lemma("a", "5|x") == "a"
    assert decode_lemma("word", "garbage") == "word"
    assert decode_lemma("word", "") == "word"


def test_decode_sentence():
    assert decode_lemmas(["Dogs", "ran"], ["L1|", "2|un"]) == ["dog", "run"]


def test_lemma_sample_converts_to_codes():
    sample = LemmaSample(["Dogs", "bark"], ["NOUN", "VERB"], ["dog", "bark"]).to_sample()

    assert sample.tags == ("NOUN", "VERB")
    assert sample.outcomes == ("L1|", "0|")


def test_lemma_sample_requires_aligned_columns():
    with pytest.raises(ValueError):
        LemmaSample(["a"], ["DET"], [])
