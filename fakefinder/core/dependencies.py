"""
Process-wide singletons shared by the route handlers.

  - score_provider → the engine's only randomness source (seeded via SCORE_SEED)
  - coordinator    → owns every in-flight submission, records to history
"""

from fakefinder.config import settings
from fakefinder.detection.coordinator import ProgressCoordinator
from fakefinder.detection.runner import MethodRunner
from fakefinder.detection.scoring import RandomScoreProvider
from fakefinder.services.history_service import record_detection

score_provider = RandomScoreProvider(settings.score_seed)

coordinator = ProgressCoordinator(MethodRunner(score_provider), recorder=record_detection)
