"""
Progress Coordinator — runs one submission's methods and owns its state.

Each submission gets an id and its own slot (method states, status, overall
progress, active method, result, cancellation event), so several submissions
can be in flight on the same event loop without sharing mutable state.

State machine per submission:
    idle → running → aggregating → done
              ├───────────────────→ cancelled
              └───────────────────→ failed

A method that fails is logged and counted as neutral; the run still reaches
aggregation. Only cancellation stops it early, and a cancelled submission is
never recorded to history. Any other error ends the submission as failed and
propagates to the caller.
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from fakefinder.config import settings
from fakefinder.detection.aggregator import aggregate
from fakefinder.detection.catalog import get_catalog
from fakefinder.detection.errors import (
    AnalysisCancelled,
    SubmissionNotFound,
    SubmissionStateError,
)
from fakefinder.detection.profiles import get_profile
from fakefinder.detection.runner import MethodRunner
from fakefinder.detection.signals import detect_signals
from fakefinder.detection.text_features import score_text_features
from fakefinder.schemas.detection import (
    ContentDescriptor,
    ContentType,
    DetectionMethod,
    DetectionResult,
    MethodRunState,
    SubmissionStatus,
    SubmissionView,
)
from fakefinder.schemas.history import HistoryEntry
from fakefinder.schemas.models import ModelState
from fakefinder.services.history_service import build_history_entry

logger = logging.getLogger(__name__)

Recorder = Callable[[Optional[str], HistoryEntry], bool]

FINISHED = (SubmissionStatus.DONE, SubmissionStatus.CANCELLED, SubmissionStatus.FAILED)


class Submission:
    def __init__(self, descriptor: ContentDescriptor, user_id: Optional[str] = None):
        self.id = uuid.uuid4().hex
        self.descriptor = descriptor
        self.user_id = user_id
        self.catalog: List[DetectionMethod] = get_catalog(descriptor.content_type)
        self.states: Dict[str, MethodRunState] = {}
        self.status = SubmissionStatus.IDLE
        self.progress = 0
        self.active_method: Optional[str] = None
        self.result: Optional[DetectionResult] = None
        self.history_recorded = False
        self.cancel_event = asyncio.Event()
        self.created_at = datetime.now(timezone.utc)
        self.finished_at: Optional[float] = None
        self.task: Optional[asyncio.Task] = None
        self.reset()

    @property
    def content_type(self) -> ContentType:
        return self.descriptor.content_type

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED

    def reset(self) -> None:
        self.states = {method.name: MethodRunState() for method in self.catalog}
        self.progress = 0

    def sample_progress(self) -> int:
        """Mean per-method progress, held at 99 until the result is in."""
        if not self.states:
            return self.progress
        mean = sum(state.progress for state in self.states.values()) / len(self.states)
        self.progress = min(99, int(mean))
        return self.progress

    def finish(self, status: SubmissionStatus) -> None:
        self.status = status
        self.active_method = None
        self.finished_at = time.time()

    def view(self) -> SubmissionView:
        return SubmissionView(
            submission_id=self.id,
            content_type=self.content_type,
            status=self.status,
            progress=self.progress,
            active_method=self.active_method,
            methods={name: state.model_copy() for name, state in self.states.items()},
            result=self.result,
            created_at=self.created_at,
        )


class ProgressCoordinator:
    def __init__(
        self,
        runner: MethodRunner,
        recorder: Optional[Recorder] = None,
        sample_ms: Optional[int] = None,
    ):
        self.runner = runner
        self.recorder = recorder
        self.sample_ms = sample_ms or settings.progress_sample_ms
        self.submissions: Dict[str, Submission] = {}

    def create(self, descriptor: ContentDescriptor, user_id: Optional[str] = None) -> Submission:
        submission = Submission(descriptor, user_id=user_id)
        self.submissions[submission.id] = submission
        logger.info(
            f"[SUBMISSION] {submission.id} created ({descriptor.content_type.value}, "
            f"{len(submission.catalog)} methods)"
        )
        return submission

    def get(self, submission_id: str) -> Submission:
        submission = self.submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        return submission

    async def run(self, submission: Submission, model_state: ModelState) -> Optional[DetectionResult]:
        """
        Drive the submission to a result. Returns None if it was cancelled.

        Raises SubmissionStateError when the submission already left `idle`.
        Any unexpected error marks the submission failed and is re-raised.
        """
        if submission.status != SubmissionStatus.IDLE:
            raise SubmissionStateError(
                f"Submission {submission.id} is {submission.status.value}, cannot run again"
            )

        submission.reset()
        submission.status = SubmissionStatus.RUNNING
        descriptor = submission.descriptor

        sampler = asyncio.create_task(self._sample(submission))
        try:
            signals = detect_signals(descriptor)
            feature_scores = None
            if descriptor.content_type == ContentType.TEXT:
                feature_scores = score_text_features(descriptor.text or "", self.runner.provider)

            for method in submission.catalog:
                submission.active_method = method.name
                state = submission.states[method.name]
                duration_ms = max(1, int(method.duration_ms * settings.method_duration_scale))
                try:
                    await self.runner.run(
                        method,
                        duration_ms,
                        model_state,
                        descriptor=descriptor,
                        state=state,
                        signals=signals,
                        cancel=submission.cancel_event,
                    )
                except AnalysisCancelled:
                    raise
                except Exception as e:
                    logger.error(f"[SUBMISSION] {submission.id}: {method.name} failed: {e}")
                    state.progress = 100.0
                    state.complete = True

            submission.status = SubmissionStatus.AGGREGATING
            submission.active_method = None
            result = aggregate(
                submission.states,
                submission.catalog,
                model_state,
                descriptor,
                profile=get_profile(descriptor.content_type),
                feature_scores=feature_scores,
            )
        except AnalysisCancelled as e:
            submission.finish(SubmissionStatus.CANCELLED)
            logger.info(f"[SUBMISSION] {submission.id} cancelled during {e.method_name}")
            return None
        except Exception as e:
            submission.finish(SubmissionStatus.FAILED)
            logger.error(f"[SUBMISSION] {submission.id} failed: {e}")
            raise
        finally:
            sampler.cancel()

        submission.result = result
        submission.progress = 100
        submission.finish(SubmissionStatus.DONE)
        await self._record(submission, result)
        return result

    async def _sample(self, submission: Submission) -> None:
        while True:
            await asyncio.sleep(self.sample_ms / 1000)
            submission.sample_progress()

    async def _record(self, submission: Submission, result: DetectionResult) -> None:
        if self.recorder is None:
            return
        entry = build_history_entry(submission.descriptor, result)
        try:
            submission.history_recorded = await asyncio.to_thread(
                self.recorder, submission.user_id, entry
            )
        except Exception as e:
            logger.error(f"[SUBMISSION] {submission.id}: history recorder failed: {e}")
            submission.history_recorded = False

    def start(self, submission: Submission, model_state: ModelState) -> asyncio.Task:
        """Run the submission in the background; poll it with `get(...).view()`."""
        submission.task = asyncio.create_task(self.run(submission, model_state))
        submission.task.add_done_callback(self._log_task_failure)
        return submission.task

    @staticmethod
    def _log_task_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[SUBMISSION] Background analysis failed: {exc}")

    def cancel(self, submission_id: str) -> Submission:
        """
        Request cancellation. A running submission stops at its next tick;
        an idle one is cancelled immediately. Finished submissions are left as is.
        """
        submission = self.get(submission_id)
        if submission.is_finished:
            return submission
        submission.cancel_event.set()
        if submission.status == SubmissionStatus.IDLE:
            submission.finish(SubmissionStatus.CANCELLED)
        logger.info(f"[SUBMISSION] {submission_id} cancellation requested")
        return submission

    def cleanup_finished(self, now: Optional[float] = None) -> int:
        """Drop finished submissions older than `submission_ttl_sec`."""
        now = now if now is not None else time.time()
        stale = [
            sid for sid, s in self.submissions.items()
            if s.is_finished and s.finished_at is not None
            and now - s.finished_at > settings.submission_ttl_sec
        ]
        for sid in stale:
            self.submissions.pop(sid, None)
        if stale:
            logger.info(f"[CLEANUP] Removed {len(stale)} finished submissions")
        return len(stale)
