"""Merge a transcript's utterances with its analysis highlights for display.

For each utterance the text is cut into consecutive segments, each either
plain or tagged with one highlight. Joining an utterance's segments gives back
exactly ``text[start_index:end_index]``.

Highlights are applied in start order (stable for ties) and clamped to the
utterance. Where two highlights overlap, the one that sorts first keeps the
contested characters and the later one only covers what is left after it.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import Highlight, Utterance

HIGHLIGHT_CLASSES = {
    "positive": "hl-positive",
    "negative": "hl-negative",
    "question": "hl-question",
    "objection": "hl-objection",
    "closing": "hl-closing",
}


@dataclass
class Segment:
    text: str
    start: int
    end: int
    highlight: Optional[Highlight] = None

    @property
    def tagged(self):
        return self.highlight is not None

    @property
    def css_class(self):
        if self.highlight is None:
            return ""
        return HIGHLIGHT_CLASSES.get(self.highlight.type, "hl-other")


@dataclass
class UtteranceView:
    speaker: str
    segments: List[Segment] = field(default_factory=list)

    @property
    def role(self):
        return speaker_role(self.speaker)

    @property
    def text(self):
        return "".join(s.text for s in self.segments)


def speaker_role(speaker):
    return "agent" if "agent" in (speaker or "").lower() else "customer"


def overlaps(utterance: Utterance, highlight: Highlight) -> bool:
    us, ue = utterance.start_index, utterance.end_index
    hs, he = highlight.start_index, highlight.end_index
    return (
        (us <= hs < ue)
        or (us < he <= ue)
        or (hs <= us and he >= ue)
    )


def overlapping_highlights(utterance, highlights):
    """Highlights touching ``utterance``, ordered by start (stable)."""
    hits = [h for h in highlights if overlaps(utterance, h)]
    return sorted(hits, key=lambda h: h.start_index)


def compose_utterance(text, utterance, highlights):
    """Yield the segments of one utterance."""
    hits = overlapping_highlights(utterance, highlights)
    if not hits:
        yield Segment(utterance.text, utterance.start_index, utterance.end_index)
        return

    cursor = utterance.start_index
    for h in hits:
        start = max(h.start_index, utterance.start_index, cursor)
        end = min(h.end_index, utterance.end_index)
        if end <= start:
            continue
        if start > cursor:
            yield Segment(text[cursor:start], cursor, start)
        yield Segment(text[start:end], start, end, h)
        cursor = end
    if cursor < utterance.end_index:
        yield Segment(text[cursor:utterance.end_index], cursor, utterance.end_index)


class AnnotatedTranscript:
    """Iterable view of a transcript, one ``UtteranceView`` per utterance.

    Nothing is cached; every iteration recomputes from the inputs.
    """

    def __init__(self, text, utterances, highlights=None):
        self.text = text
        self.utterances = list(utterances or [])
        self.highlights = list(highlights or [])

    @classmethod
    def from_transcript(cls, transcript):
        return cls(transcript.text, transcript.utterances, transcript.highlights)

    def __iter__(self):
        for u in self.utterances:
            yield UtteranceView(u.speaker, list(compose_utterance(self.text, u, self.highlights)))

    def __len__(self):
        return len(self.utterances)
