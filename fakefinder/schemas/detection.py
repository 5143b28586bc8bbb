from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"
    AUDIO = "audio"


class DetectionMethod(BaseModel):
    name: str
    weight: float = Field(gt=0.0, le=1.0)
    description: str = ""
    category: Optional[str] = None    # e.g. "metadata", "neural", "spectral"
    duration_ms: int = Field(2000, gt=0, description="Simulated run time")


class MethodRunState(BaseModel):
    progress: float = 0.0
    complete: bool = False
    manipulation_score: Optional[float] = None
    issues: List[str] = Field(default_factory=list)


class ContentDescriptor(BaseModel):
    """Superficial facts about one submission. Nothing here is decoded content."""
    content_type: ContentType
    filename: Optional[str] = None
    file_size: int = 0
    mime_type: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    text: Optional[str] = None

    @property
    def is_portrait(self) -> bool:
        return bool(self.width and self.height and self.height > self.width)


class ContentSignal(BaseModel):
    name: str       # e.g. "ai_filename", "small_file", "perfect_dimensions"
    issue: str      # Corroborating issue string appended on a boost


class MethodOutcome(BaseModel):
    manipulation_score: Optional[float] = None
    issues: List[str] = Field(default_factory=list)


class DetectionResult(BaseModel):
    is_manipulated: bool
    confidence_score: float                 # 0-100 manipulation score
    details_text: str
    issues: Optional[List[str]] = None
    human_score: Optional[float] = None     # text only: 100 - confidence_score
    decision_basis: str = "score"           # "score" | "strong_evidence" | "issue_count"
    threshold: float
    feature_scores: Optional[Dict[str, int]] = None


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SubmissionView(BaseModel):
    submission_id: str
    content_type: ContentType
    status: SubmissionStatus
    progress: int
    active_method: Optional[str] = None
    methods: Dict[str, MethodRunState]
    result: Optional[DetectionResult] = None
    created_at: datetime


class TextSubmission(BaseModel):
    text: str


class DetectionResponse(BaseModel):
    submission_id: str
    content_type: ContentType
    result: DetectionResult
    history_recorded: bool = False
