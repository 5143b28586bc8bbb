"""
Per-content-type scoring profiles for the generic aggregator.

A profile holds the constants that differ between content types: decision
thresholds, the accuracy-band boost rules, the filename bonus and the text
feature blend. Everything else about aggregation is shared.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from fakefinder.config import settings
from fakefinder.schemas.detection import ContentType

ADDITIVE = "additive"
MULTIPLICATIVE = "multiplicative"


@dataclass(frozen=True)
class ScoringProfile:
    content_type: ContentType
    noun: str                           # Used in details_text ("image", "audio", ...)
    default_threshold: float
    tuned_threshold: float              # Custom-trained and accuracy > tuned_accuracy_bar
    boost_mode: str                     # ADDITIVE or MULTIPLICATIVE
    high_band_cutoff: float
    high_band_boost: float              # Points (additive) or fraction (multiplicative) at factor 1
    mid_band_accuracy_bar: float
    mid_band_boost: float               # Points (additive) or fraction (multiplicative)
    tuned_accuracy_bar: float = 0.9
    mid_band_floor: float = 45.0
    low_band_ceiling: Optional[float] = None
    low_band_penalty: float = 0.0
    specialized_family: Optional[str] = None
    specialized_boost: float = 0.0
    filename_bonus: float = 0.0
    feature_blend: float = 0.0          # Text only: share of the feature average in the base


PROFILES: Dict[ContentType, ScoringProfile] = {
    ContentType.IMAGE: ScoringProfile(
        content_type=ContentType.IMAGE,
        noun="image",
        default_threshold=48,
        tuned_threshold=45,
        boost_mode=ADDITIVE,
        high_band_cutoff=65,
        high_band_boost=12,
        mid_band_accuracy_bar=0.85,
        mid_band_boost=8,
        low_band_ceiling=35,
        low_band_penalty=5,
        filename_bonus=10,
    ),
    ContentType.VIDEO: ScoringProfile(
        content_type=ContentType.VIDEO,
        noun="video",
        default_threshold=60,
        tuned_threshold=57,
        boost_mode=MULTIPLICATIVE,
        high_band_cutoff=70,
        high_band_boost=0.15,
        mid_band_accuracy_bar=0.8,
        mid_band_boost=0.1,
        filename_bonus=8,
    ),
    ContentType.AUDIO: ScoringProfile(
        content_type=ContentType.AUDIO,
        noun="audio",
        default_threshold=58,
        tuned_threshold=55,
        boost_mode=ADDITIVE,
        high_band_cutoff=65,
        high_band_boost=10,
        mid_band_accuracy_bar=0.8,
        mid_band_boost=6,
        specialized_family="wavlm-",
        specialized_boost=5,
        filename_bonus=8,
    ),
    ContentType.TEXT: ScoringProfile(
        content_type=ContentType.TEXT,
        noun="text",
        default_threshold=55,
        tuned_threshold=52,
        boost_mode=ADDITIVE,
        high_band_cutoff=70,
        high_band_boost=10,
        mid_band_accuracy_bar=0.85,
        mid_band_boost=6,
        feature_blend=settings.text_feature_blend,
    ),
}


def get_profile(content_type: ContentType) -> ScoringProfile:
    return PROFILES[ContentType(content_type)]
