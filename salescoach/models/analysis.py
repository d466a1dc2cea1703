from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .base import RecordModel, utcnow

REAL_ESTATE_METRICS = [
    "Information Gathering",
    "Property Presentation",
    "Amenities Coverage",
    "Neighborhood Benefits",
    "Objection Handling",
    "Closing Techniques",
]

PRIORITIES = ("high", "medium", "low")


class Metric(RecordModel):
    name: str
    value: int = Field(ge=0, le=100)
    description: str = ""


class Suggestion(RecordModel):
    title: str
    description: str = ""
    priority: Optional[Literal["high", "medium", "low"]] = None


class Analysis(RecordModel):
    id: str
    recording_id: str
    transcript_id: str
    overall_score: int = Field(ge=0, le=100)
    metrics: List[Metric] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
