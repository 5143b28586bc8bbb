from fakefinder.schemas.detection import (
    ContentDescriptor,
    ContentSignal,
    ContentType,
    DetectionMethod,
    DetectionResponse,
    DetectionResult,
    MethodOutcome,
    MethodRunState,
    SubmissionStatus,
    SubmissionView,
    TextSubmission,
)
from fakefinder.schemas.history import HistoryEntry, SearchHistoryItem
from fakefinder.schemas.models import (
    DEFAULT_MODEL_VERSION,
    ConfusionMatrix,
    ModelState,
    ModelTestReport,
    ModelTestRequest,
    TrainingReport,
    TrainRequest,
)

__all__ = [
    "ContentDescriptor",
    "ContentSignal",
    "ContentType",
    "DetectionMethod",
    "DetectionResponse",
    "DetectionResult",
    "MethodOutcome",
    "MethodRunState",
    "SubmissionStatus",
    "SubmissionView",
    "TextSubmission",
    "HistoryEntry",
    "SearchHistoryItem",
    "DEFAULT_MODEL_VERSION",
    "ConfusionMatrix",
    "ModelState",
    "ModelTestReport",
    "ModelTestRequest",
    "TrainingReport",
    "TrainRequest",
]
