"""
Linguistic feature scores for text submissions.

Each feature has a typical human range and a typical AI range. A text with
assistant-style phrasing always draws from the AI ranges; otherwise each
feature independently leans AI with `AI_LEAN_PROBABILITY`.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from fakefinder.detection.scoring import ScoreProvider
from fakefinder.detection.signals import has_ai_phrases

AI_LEAN_PROBABILITY = 0.6


@dataclass(frozen=True)
class TextFeature:
    name: str
    human_range: Tuple[int, int]
    ai_range: Tuple[int, int]


TEXT_FEATURES = [
    TextFeature("Repetitive Patterns", (0, 30), (20, 75)),
    TextFeature("Sentence Complexity Variance", (40, 90), (30, 60)),
    TextFeature("Linguistic Diversity", (50, 95), (20, 65)),
    TextFeature("Contextual Depth", (60, 95), (30, 70)),
    TextFeature("Factual Specificity", (70, 95), (30, 75)),
]


def score_text_features(text: str, provider: ScoreProvider) -> Dict[str, int]:
    ai_phrased = has_ai_phrases(text)
    scores = {}
    for feature in TEXT_FEATURES:
        lean_ai = ai_phrased or provider.chance(AI_LEAN_PROBABILITY)
        low, high = feature.ai_range if lean_ai else feature.human_range
        scores[feature.name] = provider.randint(low, high)
    return scores


def feature_average(feature_scores: Dict[str, int]) -> float:
    if not feature_scores:
        return 0.0
    return sum(feature_scores.values()) / len(feature_scores)
