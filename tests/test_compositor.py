from salescoach.models import Highlight, Utterance
from salescoach.services.compositor import (
    AnnotatedTranscript, compose_utterance, overlapping_highlights, speaker_role,
)
from salescoach.services.sample_data import SAMPLE_TRANSCRIPT, sample_highlights
from salescoach.services.transcription import assemble_turns, split_labelled_text

TEXT = "I love this kitchen!"


def _utt(start=0, end=20, text=TEXT):
    return Utterance(speaker="Agent", text=text[start:end], start_index=start, end_index=end)


def _hl(start, end, kind="positive", comment=""):
    return Highlight(start_index=start, end_index=end, type=kind, comment=comment)


def _spans(segments):
    return [(s.start, s.end, s.highlight.type if s.highlight else None) for s in segments]


def test_single_highlight_splits_into_three_segments():
    segs = list(compose_utterance(TEXT, _utt(), [_hl(5, 10)]))
    assert _spans(segs) == [(0, 5, None), (5, 10, "positive"), (10, 20, None)]
    assert [s.text for s in segs] == ["I lov", "e thi", "s kitchen!"]


def test_no_highlights_gives_one_plain_segment():
    segs = list(compose_utterance(TEXT, _utt(), [_hl(25, 30)]))
    assert len(segs) == 1
    assert segs[0].text == TEXT
    assert not segs[0].tagged


def test_first_sorted_highlight_wins_contested_region():
    segs = list(compose_utterance(TEXT, _utt(), [_hl(5, 15, "negative"), _hl(2, 10, "positive")]))
    assert _spans(segs) == [(0, 2, None), (2, 10, "positive"), (10, 15, "negative"), (15, 20, None)]


def test_equal_starts_keep_input_order():
    segs = list(compose_utterance(TEXT, _utt(), [_hl(5, 10, "question"), _hl(5, 12, "closing")]))
    assert _spans(segs) == [(0, 5, None), (5, 10, "question"), (10, 12, "closing"), (12, 20, None)]


def test_highlight_swallowed_by_earlier_one_is_skipped():
    segs = list(compose_utterance(TEXT, _utt(), [_hl(0, 15), _hl(3, 8, "objection")]))
    assert _spans(segs) == [(0, 15, "positive"), (15, 20, None)]


def test_highlight_is_clamped_to_utterance():
    text = "Agent: Hello there."
    utt = Utterance(speaker="Agent", text="Hello there.", start_index=7, end_index=19)
    segs = list(compose_utterance(text, utt, [_hl(0, 12, "closing")]))
    assert _spans(segs) == [(7, 12, "closing"), (12, 19, None)]
    assert "".join(s.text for s in segs) == "Hello there."


def test_spanning_highlight_tags_whole_utterance():
    segs = list(compose_utterance(TEXT, _utt(5, 10), [_hl(0, 20)]))
    assert _spans(segs) == [(5, 10, "positive")]


def test_touching_highlight_does_not_overlap():
    utt = _utt(5, 10)
    assert overlapping_highlights(utt, [_hl(0, 5), _hl(10, 15)]) == []
    assert len(overlapping_highlights(utt, [_hl(0, 6), _hl(9, 15)])) == 2


def test_sample_call_reconstructs_every_utterance():
    text, utterances = assemble_turns(split_labelled_text(SAMPLE_TRANSCRIPT))
    highlights = sample_highlights(len(text)) + [_hl(100, 400, "question"), _hl(1700, 1720, "negative")]
    view = AnnotatedTranscript(text, utterances, highlights)
    assert len(view) == len(utterances)
    tagged_any = False
    for u, rendered in zip(utterances, view):
        assert rendered.text == text[u.start_index:u.end_index]
        tagged = [s for s in rendered.segments if s.tagged]
        tagged_any = tagged_any or bool(tagged)
        for a, b in zip(tagged, tagged[1:]):
            assert a.end <= b.start
    assert tagged_any


def test_view_is_restartable():
    view = AnnotatedTranscript(TEXT, [_utt()], [_hl(5, 10)])
    first = [(u.speaker, _spans(u.segments)) for u in view]
    second = [(u.speaker, _spans(u.segments)) for u in view]
    assert first == second


def test_speaker_role():
    assert speaker_role("Agent") == "agent"
    assert speaker_role("Speaker 1") == "customer"
