import pytest

from seqtag.context import POSContextGenerator
from seqtag.events import EventStream, SequenceStream, create_events
from seqtag.types import Event, Sample, Sequence


class RecordingContext:
    """Records the outcome history it is asked about."""

    def __init__(self):
        self.histories = []

    def get_context(self, position, tokens, tags, outcomes_so_far):
        self.histories.append(outcomes_so_far)
        return (f"w={tokens[position]}", f"h={','.join(outcomes_so_far)}")


class ConstantModel:
    def __init__(self, outcome):
        self.outcome = outcome

    def best_sequence(self, tokens, tags, context_generator, validator=None):
        seq = Sequence()
        for _ in tokens:
            seq = seq.extend(self.outcome, 1.0)
        return seq


def test_null_sample_produces_no_events():
    cg = POSContextGenerator()
    assert list(create_events(None, cg)) == []
    assert list(EventStream([None], cg)) == []


def test_empty_sample_produces_no_events():
    assert list(create_events(Sample(tokens=[]), POSContextGenerator())) == []


def test_one_event_per_token_with_gold_history():
    cg = RecordingContext()
    sample = Sample(tokens=["the", "dog", "runs"], outcomes=["DET", "NOUN", "VERB"])

    events = list(create_events(sample, cg))

    assert [e.outcome for e in events] == ["DET", "NOUN", "VERB"]
    assert cg.histories == [(), ("DET",), ("DET", "NOUN")]
    assert events[2].context == ("w=runs", "h=DET,NOUN")


def test_unlabeled_sample_is_rejected():
    with pytest.raises(ValueError):
        create_events(Sample(tokens=["dog"]), POSContextGenerator())


def test_event_stream_is_restartable_and_stable():
    samples = [
        Sample(tokens=["the", "dog"], outcomes=["DET", "NOUN"]),
        None,
        Sample(tokens=["cats", "sleep"], outcomes=["NOUN", "VERB"]),
    ]
    stream = EventStream(samples, POSContextGenerator())

    first = list(stream)
    second = list(stream)

    assert len(first) == 4
    assert first == second
    assert all(isinstance(e, Event) for e in first)


def test_sequence_stream_skips_null_samples():
    samples = [None, Sample(tokens=["a", "b"], outcomes=["X", "Y"])]
    sequences = list(SequenceStream(samples, RecordingContext()))

    assert len(sequences) == 1
    assert sequences[0].sample is samples[1]
    assert [e.outcome for e in sequences[0].events] == ["X", "Y"]


def test_update_context_uses_predicted_history():
    cg = RecordingContext()
    stream = SequenceStream([], cg)
    sample = Sample(tokens=["a", "b"], outcomes=["X", "Y"])

    events = stream.update_context(sample, ConstantModel("Z"))

    assert [e.outcome for e in events] == ["Z", "Z"]
    assert events[1].context == ("w=b", "h=Z")
