"""
Score Aggregator — turns per-method outcomes into one DetectionResult.

Pipeline (shared by all content types, constants from a ScoringProfile):
  1. Weighted mean over the whole catalog; missing or unscored methods
     count as the neutral score with their full weight.
  2. Strong evidence: any single method above `strong_evidence_score`.
  3. Text only: blend with the linguistic feature average.
  4. Accuracy adjustment by score band (custom-trained models only).
  5. Flat bonus for AI terms in the filename.
  6. Clamp to [0, 100] and round to one decimal.
  7. Decide: score above threshold, strong evidence, or enough unhedged issues.

The rounded score is the one compared against the threshold and the one
rendered into details_text, so the text never disagrees with the numbers.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from fakefinder.config import settings
from fakefinder.detection.profiles import MULTIPLICATIVE, ScoringProfile, get_profile
from fakefinder.detection.signals import filename_has_ai_terms
from fakefinder.detection.text_features import feature_average
from fakefinder.schemas.detection import (
    ContentDescriptor,
    DetectionMethod,
    DetectionResult,
    MethodRunState,
)
from fakefinder.schemas.models import ModelState

logger = logging.getLogger(__name__)

HEDGE_WORDS = ("might", "possible", "could be")

BASIS_SCORE = "score"
BASIS_STRONG_EVIDENCE = "strong_evidence"
BASIS_ISSUE_COUNT = "issue_count"


def _method_score(state: Optional[MethodRunState]) -> float:
    if state is None or not state.complete or state.manipulation_score is None:
        return settings.neutral_score
    return state.manipulation_score


def weighted_base_score(
    method_results: Mapping[str, MethodRunState],
    catalog: Sequence[DetectionMethod],
) -> float:
    """Σ(score·weight) / Σ(weight) over the catalog. Order-independent."""
    total_weight = sum(method.weight for method in catalog)
    if total_weight <= 0:
        return settings.neutral_score
    weighted = sum(_method_score(method_results.get(m.name)) * m.weight for m in catalog)
    return weighted / total_weight


def has_strong_evidence(
    method_results: Mapping[str, MethodRunState],
    catalog: Sequence[DetectionMethod],
) -> bool:
    """True when any catalog method finished above `strong_evidence_score`."""
    return any(
        _method_score(method_results.get(method.name)) > settings.strong_evidence_score
        for method in catalog
    )


def is_tuned_model(model_state: ModelState, profile: ScoringProfile) -> bool:
    return model_state.is_custom_trained and model_state.accuracy > profile.tuned_accuracy_bar


def detection_threshold(model_state: ModelState, profile: ScoringProfile) -> float:
    if is_tuned_model(model_state, profile):
        return profile.tuned_threshold
    return profile.default_threshold


def _mid_band_score(base: float, model_state: ModelState, profile: ScoringProfile) -> float:
    if model_state.accuracy <= profile.mid_band_accuracy_bar:
        return base
    if profile.boost_mode == MULTIPLICATIVE:
        return base * (1 + profile.mid_band_boost)
    return base + profile.mid_band_boost


def adjust_for_accuracy(base: float, model_state: ModelState, profile: ScoringProfile) -> float:
    """
    Band-wise adjustment for custom-trained models.

    The high-band value never falls below what the borderline rule would give
    for the same base, so the adjusted score is monotone in the base score.
    """
    if not model_state.is_custom_trained:
        return base

    factor = max(0.0, (model_state.accuracy - 0.5) * 2)
    score = base

    if base > profile.high_band_cutoff:
        if profile.boost_mode == MULTIPLICATIVE:
            boosted = base * (1 + profile.high_band_boost * factor)
        else:
            boosted = base + profile.high_band_boost * factor
        score = max(min(100.0, boosted), _mid_band_score(base, model_state, profile))
    elif base > profile.mid_band_floor:
        score = _mid_band_score(base, model_state, profile)
    elif (
        profile.low_band_ceiling is not None
        and base < profile.low_band_ceiling
        and model_state.accuracy > profile.mid_band_accuracy_bar
    ):
        score = base - profile.low_band_penalty

    if (
        profile.specialized_family
        and model_state.model_version.startswith(profile.specialized_family)
        and base > profile.mid_band_floor
    ):
        score += profile.specialized_boost

    return score


def is_hedged(issue: str) -> bool:
    lower = issue.lower()
    return any(word in lower for word in HEDGE_WORDS)


def count_significant_issues(issues: List[str]) -> int:
    return sum(1 for issue in issues if not is_hedged(issue))


def dedupe_issues(issues: List[str]) -> List[str]:
    return list(dict.fromkeys(issues))


def decide(
    final_score: float,
    threshold: float,
    strong_evidence: bool,
    significant_issue_count: int,
) -> Tuple[bool, str]:
    """Returns (is_manipulated, decision_basis). The score takes precedence as the basis."""
    if final_score > threshold:
        return True, BASIS_SCORE
    if strong_evidence:
        return True, BASIS_STRONG_EVIDENCE
    if significant_issue_count >= settings.significant_issue_override:
        return True, BASIS_ISSUE_COUNT
    return False, BASIS_SCORE


def _accuracy_description(model_state: ModelState) -> str:
    if not model_state.is_custom_trained:
        return ""
    if model_state.accuracy > 0.9:
        return " with high accuracy"
    return " with improved accuracy"


def render_details(
    is_manipulated: bool,
    basis: str,
    score: float,
    threshold: float,
    model_state: ModelState,
    profile: ScoringProfile,
) -> str:
    accuracy = _accuracy_description(model_state)
    complement = round(100 - score, 1)
    is_text = profile.noun == "text"

    if not is_manipulated:
        if is_text:
            return (
                f"Our analysis{accuracy} indicates this text appears to be human-written "
                f"with {complement:g}% confidence. The content shows natural language "
                f"patterns consistent with human writing."
            )
        return (
            f"Our analysis{accuracy} indicates this {profile.noun} appears to be authentic "
            f"with {complement:g}% confidence. No clear signs of manipulation were detected."
        )

    verdict = "AI-generated content" if is_text else "artificial generation or manipulation"
    if basis == BASIS_STRONG_EVIDENCE:
        return (
            f"Our analysis{accuracy} flagged this {profile.noun} as likely {verdict}: at least "
            f"one detection method found strong evidence, although the overall manipulation "
            f"score is {score:g}% (threshold {threshold:g}%)."
        )
    if basis == BASIS_ISSUE_COUNT:
        return (
            f"Our analysis{accuracy} flagged this {profile.noun} as likely {verdict}: several "
            f"independent issues were found, although the overall manipulation score is "
            f"{score:g}% (threshold {threshold:g}%)."
        )
    return (
        f"Our analysis{accuracy} detected signs of {verdict} in this {profile.noun} "
        f"with {score:g}% confidence."
    )


def aggregate(
    method_results: Mapping[str, MethodRunState],
    catalog: Sequence[DetectionMethod],
    model_state: ModelState,
    descriptor: Optional[ContentDescriptor] = None,
    profile: Optional[ScoringProfile] = None,
    feature_scores: Optional[Dict[str, int]] = None,
) -> DetectionResult:
    if profile is None:
        if descriptor is None:
            raise ValueError("aggregate needs a profile or a descriptor to pick one")
        profile = get_profile(descriptor.content_type)

    base = weighted_base_score(method_results, catalog)
    strong_evidence = has_strong_evidence(method_results, catalog)

    if profile.feature_blend and feature_scores:
        base = base * (1 - profile.feature_blend) + feature_average(feature_scores) * profile.feature_blend

    score = adjust_for_accuracy(base, model_state, profile)

    if profile.filename_bonus and descriptor and filename_has_ai_terms(descriptor.filename or ""):
        score += profile.filename_bonus

    final_score = round(max(0.0, min(100.0, score)), 1)

    issues: List[str] = []
    for method in catalog:
        state = method_results.get(method.name)
        if state is not None:
            issues.extend(state.issues)
    issues = dedupe_issues(issues)
    significant = count_significant_issues(issues)

    threshold = detection_threshold(model_state, profile)
    is_manipulated, basis = decide(final_score, threshold, strong_evidence, significant)

    logger.info(
        f"[AGGREGATE] {profile.noun}: base={base:.1f}, final={final_score:g}, "
        f"threshold={threshold:g}, strong={strong_evidence}, significant_issues={significant} "
        f"→ manipulated={is_manipulated} ({basis})"
    )

    return DetectionResult(
        is_manipulated=is_manipulated,
        confidence_score=final_score,
        details_text=render_details(is_manipulated, basis, final_score, threshold, model_state, profile),
        issues=issues or None,
        human_score=round(100 - final_score, 1) if profile.noun == "text" else None,
        decision_basis=basis,
        threshold=threshold,
        feature_scores=feature_scores if profile.noun == "text" else None,
    )
