"""
Method Runner — drives one detection method's simulated analysis.

`MethodRunner.run` advances the method's progress every tick until it reaches
100, then draws a manipulation score, generates issue strings, and applies
the content-signal boost. Score and issues are written to the method's
`MethodRunState` together with `complete=True`.

The runner never fails a submission: a fault while scoring leaves the method
complete with no score, and the aggregator substitutes the neutral score.
Only cancellation propagates.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from fakefinder.config import settings
from fakefinder.detection.catalog import (
    CATEGORY_BIAS,
    SPECIALIZED_MODEL_VERSIONS,
    get_method_rule,
)
from fakefinder.detection.errors import AnalysisCancelled
from fakefinder.detection.scoring import ScoreProvider
from fakefinder.detection.signals import is_content_biased
from fakefinder.schemas.detection import (
    ContentDescriptor,
    ContentSignal,
    DetectionMethod,
    MethodOutcome,
    MethodRunState,
)
from fakefinder.schemas.models import ModelState

logger = logging.getLogger(__name__)

# Base draw bands: {content_biased: (low, high)}. Biased and plain bands never overlap.
# The default biased floor sits under every type threshold, so the draw still decides.
DEFAULT_BANDS = {True: (42.0, 85.0), False: (15.0, 40.0)}
TUNED_BANDS = {True: (65.0, 85.0), False: (25.0, 45.0)}

HIGH_ACCURACY = 0.9
BONUS_ISSUE_ACCURACY = 0.95
BONUS_ISSUE_CHANCE = 0.5

SPECIALIZED_MODEL_BONUS = 8.0
TUNED_MODEL_BONUS = 5.0
CUSTOM_MODEL_BONUS = 2.0

TUNED_ISSUE_SENSITIVITY = 10.0


def is_tuned(model_state: ModelState) -> bool:
    return model_state.is_custom_trained and model_state.accuracy > HIGH_ACCURACY


def model_state_bonus(model_state: ModelState) -> float:
    if not model_state.is_custom_trained:
        return 0.0
    if model_state.accuracy > HIGH_ACCURACY:
        if model_state.model_version in SPECIALIZED_MODEL_VERSIONS:
            return SPECIALIZED_MODEL_BONUS
        return TUNED_MODEL_BONUS
    return CUSTOM_MODEL_BONUS


def issue_threshold(method: DetectionMethod, model_state: ModelState) -> float:
    threshold = get_method_rule(method.name).issue_threshold
    if is_tuned(model_state):
        threshold -= TUNED_ISSUE_SENSITIVITY
    return threshold


def _clamp(score: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, score))


class MethodRunner:
    def __init__(self, provider: ScoreProvider, tick_ms: Optional[int] = None):
        self.provider = provider
        self.tick_ms = tick_ms or settings.progress_tick_ms

    async def run(
        self,
        method: DetectionMethod,
        duration_ms: int,
        model_state: ModelState,
        descriptor: Optional[ContentDescriptor] = None,
        state: Optional[MethodRunState] = None,
        signals: Optional[List[ContentSignal]] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> MethodOutcome:
        if state is None:
            state = MethodRunState()
        signals = signals or []

        await self._advance_progress(method, duration_ms, state, cancel)

        try:
            biased = is_content_biased(descriptor, signals) if descriptor else False
            score = self.draw_score(method, model_state, biased)
            issues = self.collect_issues(method, score, model_state)
            score, issues = self.apply_signal_boost(method, score, issues, signals)
        except Exception as e:
            logger.error(f"[RUNNER] {method.name} failed to score, leaving it neutral: {e}")
            score, issues = None, []

        state.manipulation_score = score
        state.issues = issues
        state.complete = True

        if score is not None:
            logger.info(f"[RUNNER] {method.name}: score={score:.1f}, issues={len(issues)}")
        return MethodOutcome(manipulation_score=score, issues=issues)

    async def _advance_progress(
        self,
        method: DetectionMethod,
        duration_ms: int,
        state: MethodRunState,
        cancel: Optional[asyncio.Event],
    ) -> None:
        """Linear progress: 100 / (duration / tick) per tick, stopping at 100."""
        step = 100.0 / max(1.0, duration_ms / self.tick_ms)
        while state.progress < 100.0:
            await asyncio.sleep(self.tick_ms / 1000)
            if cancel is not None and cancel.is_set():
                raise AnalysisCancelled(method.name)
            state.progress = min(100.0, state.progress + step)

    def draw_score(self, method: DetectionMethod, model_state: ModelState, biased: bool) -> float:
        bands = TUNED_BANDS if is_tuned(model_state) else DEFAULT_BANDS
        low, high = bands[biased]
        base = self.provider.uniform(low, high)
        category_bias = CATEGORY_BIAS.get(method.category or "", 0.0)
        return _clamp(base + category_bias + model_state_bonus(model_state))

    def collect_issues(self, method: DetectionMethod, score: float, model_state: ModelState) -> List[str]:
        rule = get_method_rule(method.name)
        if score <= issue_threshold(method, model_state):
            return []

        issues = list(rule.issues)
        if model_state.is_custom_trained and model_state.accuracy > BONUS_ISSUE_ACCURACY:
            for issue in rule.bonus_issues:
                if self.provider.chance(BONUS_ISSUE_CHANCE):
                    issues.append(issue)
        return issues

    def apply_signal_boost(
        self,
        method: DetectionMethod,
        score: float,
        issues: List[str],
        signals: List[ContentSignal],
    ) -> Tuple[float, List[str]]:
        """Raise signal-sensitive methods when enough weak signals coincide."""
        ceiling = get_method_rule(method.name).signal_ceiling
        if ceiling is None or len(signals) < settings.min_corroborating_signals:
            return score, issues

        boosted = min(score + settings.signal_boost, ceiling)
        logger.info(
            f"[RUNNER] {method.name}: {len(signals)} corroborating signals, "
            f"score {score:.1f} -> {max(score, boosted):.1f}"
        )
        return max(score, boosted), issues + [s.issue for s in signals]
