from typing import Optional

from pydantic import BaseModel

from fakefinder.schemas.detection import ContentType


class HistoryEntry(BaseModel):
    """The fields the engine writes for one completed submission."""
    type: ContentType
    filename: Optional[str] = None
    text_snippet: Optional[str] = None
    result: bool            # True means manipulated / AI-generated
    confidence_score: float


class SearchHistoryItem(HistoryEntry):
    id: str
    date: str               # ISO-8601, UTC
