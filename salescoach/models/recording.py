from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import RecordModel, utcnow


class Recording(RecordModel):
    id: str
    file_name: str
    file_url: str
    duration: float = 0
    created_at: datetime = Field(default_factory=utcnow)
    # back-references, each set once when the child record is first saved
    transcript_id: Optional[str] = None
    analysis_id: Optional[str] = None
