from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

DEFAULT_MODEL_VERSION = "default-v1"


class ModelState(BaseModel):
    is_custom_trained: bool = False
    accuracy: float = Field(0.8, ge=0.0, le=1.0)
    model_version: str = DEFAULT_MODEL_VERSION
    is_training: bool = False
    datasets: List[str] = Field(default_factory=list)
    last_trained_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _default_model_has_no_provenance(self):
        if not self.is_custom_trained:
            if self.datasets:
                raise ValueError("A default model cannot list training datasets")
            if self.model_version != DEFAULT_MODEL_VERSION:
                raise ValueError(f"A default model must be versioned '{DEFAULT_MODEL_VERSION}'")
        return self


class TrainRequest(BaseModel):
    dataset: str = Field(min_length=1)    # Catalog dataset id or a custom dataset URL
    epochs: int = 10


class ModelTestRequest(BaseModel):
    dataset: str = Field(min_length=1)
    samples: Optional[int] = Field(None, gt=0)


class TrainingReport(BaseModel):
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    epochs: int
    model_version: str


class ConfusionMatrix(BaseModel):
    true_positives: int
    true_negatives: int
    false_positives: int
    false_negatives: int


class ModelTestReport(BaseModel):
    accuracy: float
    samples: int
    confusion_matrix: ConfusionMatrix
