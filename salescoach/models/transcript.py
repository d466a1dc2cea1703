from datetime import datetime
from typing import List, Literal

from pydantic import Field, model_validator

from .base import RecordModel, utcnow

HIGHLIGHT_TYPES = ("positive", "negative", "question", "objection", "closing")


class Utterance(RecordModel):
    speaker: str
    text: str
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)


class Highlight(RecordModel):
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    type: Literal["positive", "negative", "question", "objection", "closing"]
    comment: str = ""


class Transcript(RecordModel):
    """A speaker-segmented transcript.

    Utterance and highlight offsets index into ``text``. They are checked
    when the record is built, so a transcript that exists is renderable:

    - every range lies within ``[0, len(text)]`` and starts before it ends,
    - utterances are ordered by ``start_index`` and do not overlap,
    - ``text[u.start_index:u.end_index] == u.text`` for each utterance.
    """

    id: str
    recording_id: str
    text: str
    utterances: List[Utterance] = Field(default_factory=list)
    highlights: List[Highlight] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_offsets(self):
        size = len(self.text)
        prev_end = 0
        for i, u in enumerate(self.utterances):
            if u.start_index > u.end_index or u.end_index > size:
                raise ValueError(
                    f"utterance {i} range [{u.start_index}, {u.end_index}) is outside the text (length {size})"
                )
            if u.start_index < prev_end:
                raise ValueError(f"utterance {i} starts at {u.start_index}, before the previous one ends at {prev_end}")
            if self.text[u.start_index:u.end_index] != u.text:
                raise ValueError(f"utterance {i} text does not match text[{u.start_index}:{u.end_index}]")
            prev_end = u.end_index
        for i, h in enumerate(self.highlights):
            if h.start_index > h.end_index or h.end_index > size:
                raise ValueError(
                    f"highlight {i} range [{h.start_index}, {h.end_index}) is outside the text (length {size})"
                )
        return self
