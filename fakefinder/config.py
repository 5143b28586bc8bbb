"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    METHOD_DURATION_SCALE=0.1 uvicorn fakefinder.main:app   # fast demo runs
    export SCORE_SEED=42                                     # reproducible scores

A `.env` file at the project root is loaded automatically.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # SCORE_SEED == score_seed
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Engine timing                                                       #
    # ------------------------------------------------------------------ #
    progress_tick_ms: int = Field(
        100, description="Per-method progress ticker interval (ms)"
    )
    progress_sample_ms: int = Field(
        150, description="Overall progress sampler interval (ms)"
    )
    method_duration_scale: float = Field(
        1.0, description="Multiplier applied to every catalog duration_ms"
    )

    # ------------------------------------------------------------------ #
    # Scoring                                                             #
    # ------------------------------------------------------------------ #
    neutral_score: float = Field(
        50.0, description="Score used for a method that produced no score"
    )
    strong_evidence_score: float = Field(
        80.0, description="Single-method score above this forces a manipulated verdict"
    )
    significant_issue_override: int = Field(
        2, description="Unhedged issues needed to force a manipulated verdict"
    )
    signal_boost: float = Field(
        25.0, description="Score added to signal-sensitive methods on corroborated signals"
    )
    min_corroborating_signals: int = Field(
        2, description="Weak content signals required before the biased band or a signal boost applies"
    )
    text_feature_blend: float = Field(
        0.3, description="Share of the text feature average in the text base score"
    )
    text_min_length: int = Field(
        100, description="Minimum characters for a text submission"
    )

    # ------------------------------------------------------------------ #
    # Randomness                                                          #
    # ------------------------------------------------------------------ #
    score_seed: Optional[int] = Field(
        None, description="Seed for the default score provider (None → unseeded)"
    )

    # ------------------------------------------------------------------ #
    # Submissions                                                         #
    # ------------------------------------------------------------------ #
    submission_ttl_sec: int = Field(
        600, description="10 min — finished submissions kept for polling"
    )
    cleanup_interval_sec: int = Field(
        30, description="How often the periodic submission cleanup runs (seconds)"
    )

    # ------------------------------------------------------------------ #
    # Model training                                                      #
    # ------------------------------------------------------------------ #
    training_duration_sec: float = Field(
        3.0, description="Simulated training / download time (seconds)"
    )
    testing_duration_sec: float = Field(
        1.5, description="Simulated model test run time (seconds)"
    )
    min_training_epochs: int = Field(1, description="Lowest accepted epoch count")
    max_training_epochs: int = Field(100, description="Highest accepted epoch count")
    default_test_samples: int = Field(
        20, description="Samples assumed when a test dataset size is not given"
    )

    # ------------------------------------------------------------------ #
    # History                                                             #
    # ------------------------------------------------------------------ #
    history_max_items: int = Field(
        200, description="Newest N history items kept per user"
    )
    text_snippet_length: int = Field(
        50, description="Characters of a text submission stored in history"
    )

    # ------------------------------------------------------------------ #
    # Uploads                                                             #
    # ------------------------------------------------------------------ #
    max_upload_mb: int = Field(
        200, description="Max MB for a multipart upload"
    )
    pil_max_image_pixels: int = Field(
        20_000_000, description="PIL decompression-bomb guard (pixels)"
    )

    # ------------------------------------------------------------------ #
    # Rate limiting                                                       #
    # ------------------------------------------------------------------ #
    rate_limit_request_window_sec: int = Field(
        60, description="Per-user request rate-limit window (seconds)"
    )
    rate_limit_max_requests: int = Field(
        10, description="Max submissions per user (or IP) per window"
    )
    rate_limit_memory_limit: int = Field(
        10_000, description="In-memory rate-limit map size before cleanup"
    )

    # ------------------------------------------------------------------ #
    # Admin                                                               #
    # ------------------------------------------------------------------ #
    admin_api_key: str = Field(
        "", description="Shared secret for model training routes (empty → disabled)"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


# Single shared instance — import this everywhere.
settings = Settings()
