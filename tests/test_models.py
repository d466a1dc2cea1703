import pytest
from pydantic import ValidationError

from conftest import make_transcript
from salescoach.models import Analysis, Highlight, Metric, Transcript, Utterance

TEXT = "Agent: Hello there.\n\nCustomer: Hi!"


def _transcript(utterances, highlights=()):
    return Transcript(id="t", recording_id="r", text=TEXT, utterances=utterances, highlights=list(highlights))


def test_valid_transcript_round_trips_camel_case():
    tr = make_transcript()
    data = tr.to_json()
    assert data["recordingId"] == "rec1"
    assert data["utterances"][0]["startIndex"] == 7
    assert Transcript.model_validate(data) == tr


def test_utterance_text_must_match_offsets():
    with pytest.raises(ValidationError):
        _transcript([Utterance(speaker="Agent", text="Hello there!", start_index=7, end_index=19)])


def test_utterance_out_of_range_rejected():
    with pytest.raises(ValidationError):
        _transcript([Utterance(speaker="Agent", text="Hi!", start_index=31, end_index=40)])


def test_utterances_must_be_sorted_and_disjoint():
    first = Utterance(speaker="Agent", text="Hello there.", start_index=7, end_index=19)
    second = Utterance(speaker="Customer", text="Hi!", start_index=31, end_index=34)
    with pytest.raises(ValidationError):
        _transcript([second, first])
    overlapping = Utterance(speaker="Agent", text="there.", start_index=13, end_index=19)
    with pytest.raises(ValidationError):
        _transcript([first, overlapping])


def test_highlight_must_fit_text():
    with pytest.raises(ValidationError):
        _transcript([], [Highlight(start_index=30, end_index=35, type="closing")])
    with pytest.raises(ValidationError):
        Highlight(start_index=0, end_index=5, type="great")


def test_scores_are_bounded():
    with pytest.raises(ValidationError):
        Metric(name="Closing Techniques", value=101)
    with pytest.raises(ValidationError):
        Analysis(id="a", recording_id="r", transcript_id="t", overall_score=-1)
