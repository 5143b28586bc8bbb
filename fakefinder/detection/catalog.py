"""
Static method catalogs, one ordered list per content type.

Catalog order is the coordinator's iteration order. It drives the progress
animation only; aggregation is order-independent.

`METHOD_RULES` holds what the runner needs beyond the public catalog record:
the issue threshold, the fixed issue strings, the conditional (bonus) issue
strings, and the ceiling for content-signal boosts (None → method ignores
content signals).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fakefinder.schemas.detection import ContentType, DetectionMethod


@dataclass(frozen=True)
class MethodRule:
    issue_threshold: float
    issues: Tuple[str, ...]
    bonus_issues: Tuple[str, ...] = ()
    signal_ceiling: Optional[float] = None


IMAGE_METHODS = [
    DetectionMethod(
        name="Metadata Analysis",
        weight=0.25,
        description="Examines image EXIF data for AI generation fingerprints and tampering signs.",
        category="metadata",
        duration_ms=1500,
    ),
    DetectionMethod(
        name="Error Level Analysis",
        weight=0.25,
        description="Detects inconsistencies in compression patterns typical in AI-generated images.",
        category="compression",
        duration_ms=2500,
    ),
    DetectionMethod(
        name="Face Detection & Analysis",
        weight=0.2,
        description="Identifies unnatural symmetry, perfect features, and unrealistic details in faces.",
        category="biometric",
        duration_ms=3000,
    ),
    DetectionMethod(
        name="Neural Network Pattern Recognition",
        weight=0.3,
        description="Uses deep learning to detect AI model-specific generation patterns.",
        category="neural",
        duration_ms=3500,
    ),
]

VIDEO_METHODS = [
    DetectionMethod(
        name="Facial Consistency Analysis",
        weight=0.3,
        description="Detects unnatural facial movements, blinking patterns, and micro-expressions.",
        category="biometric",
        duration_ms=3000,
    ),
    DetectionMethod(
        name="Audio-Visual Sync Detection",
        weight=0.25,
        description="Identifies mismatches between lip movements and speech audio.",
        category="sync",
        duration_ms=3000,
    ),
    DetectionMethod(
        name="Temporal Consistency Check",
        weight=0.2,
        description="Analyzes frame-to-frame consistency in lighting, shadows, and physical objects.",
        category="temporal",
        duration_ms=3000,
    ),
    DetectionMethod(
        name="DeepFake Signature Detection",
        weight=0.25,
        description="Identifies telltale artifacts and patterns left by deepfake generation models.",
        category="signature",
        duration_ms=3000,
    ),
]

AUDIO_METHODS = [
    DetectionMethod(
        name="Spectral Analysis",
        weight=0.25,
        description="Examines audio frequencies for unnatural patterns.",
        category="spectral",
        duration_ms=2000,
    ),
    DetectionMethod(
        name="Voice Pattern Recognition",
        weight=0.3,
        description="Analyzes voice characteristics for consistency.",
        category="voice",
        duration_ms=2500,
    ),
    DetectionMethod(
        name="Acoustic Inconsistency Detection",
        weight=0.2,
        description="Identifies unnatural background noise and transitions.",
        category="acoustic",
        duration_ms=1800,
    ),
    DetectionMethod(
        name="Neural Audio Analysis",
        weight=0.25,
        description="Uses deep learning to detect AI synthesis artifacts.",
        category="neural",
        duration_ms=3000,
    ),
]

TEXT_METHODS = [
    DetectionMethod(
        name="Pattern Recognition",
        weight=0.25,
        description="Analyzes text for statistical patterns common in AI-generated content.",
        category="statistical",
        duration_ms=1200,
    ),
    DetectionMethod(
        name="Perplexity & Burstiness",
        weight=0.25,
        description="Measures text predictability and variation patterns typical of AI models.",
        category="statistical",
        duration_ms=1000,
    ),
    DetectionMethod(
        name="Stylometric Fingerprinting",
        weight=0.25,
        description="Examines writing style, word choice, and sentence structures.",
        category="linguistic",
        duration_ms=1500,
    ),
    DetectionMethod(
        name="Semantic Coherence Analysis",
        weight=0.25,
        description="Evaluates logical flow, factual grounding, and narrative consistency.",
        category="semantic",
        duration_ms=1300,
    ),
]

CATALOGS: Dict[ContentType, List[DetectionMethod]] = {
    ContentType.IMAGE: IMAGE_METHODS,
    ContentType.VIDEO: VIDEO_METHODS,
    ContentType.AUDIO: AUDIO_METHODS,
    ContentType.TEXT: TEXT_METHODS,
}

# Added to every draw of a method in this category
CATEGORY_BIAS: Dict[str, float] = {
    "metadata": 0.0,
    "compression": 2.0,
    "biometric": 4.0,
    "neural": 6.0,
    "sync": 3.0,
    "temporal": 3.0,
    "signature": 5.0,
    "spectral": 3.0,
    "voice": 4.0,
    "acoustic": 2.0,
    "statistical": 3.0,
    "linguistic": 4.0,
    "semantic": 2.0,
}

METHOD_RULES: Dict[str, MethodRule] = {
    # --- image ---
    "Metadata Analysis": MethodRule(
        issue_threshold=65,
        issues=(
            "Missing camera hardware provenance in metadata",
            "Metadata timestamps inconsistent with file creation",
        ),
        bonus_issues=("Editing software trail could be present in metadata",),
        signal_ceiling=98,
    ),
    "Error Level Analysis": MethodRule(
        issue_threshold=65,
        issues=(
            "Unusual compression patterns detected in image data",
            "Inconsistent quality-to-size ratio (suspicious)",
        ),
        bonus_issues=("Possible local recompression around edited regions",),
        signal_ceiling=95,
    ),
    "Face Detection & Analysis": MethodRule(
        issue_threshold=70,
        issues=(
            "Uncanny symmetry in facial features",
            "Irregularities in eye/pupil rendering",
        ),
        bonus_issues=("Unnatural hair patterns or texture",),
    ),
    "Neural Network Pattern Recognition": MethodRule(
        issue_threshold=60,
        issues=("Generator-specific frequency artifacts detected",),
        bonus_issues=("Texture statistics might match a diffusion model",),
    ),
    # --- video ---
    "Facial Consistency Analysis": MethodRule(
        issue_threshold=65,
        issues=(
            "Unnatural blinking pattern across frames",
            "Facial micro-expressions inconsistent with speech",
        ),
        bonus_issues=("Face boundary blending could be present",),
    ),
    "Audio-Visual Sync Detection": MethodRule(
        issue_threshold=65,
        issues=("Lip movements out of sync with speech audio",),
        bonus_issues=("Possible audio track replacement",),
    ),
    "Temporal Consistency Check": MethodRule(
        issue_threshold=65,
        issues=("Lighting and shadows inconsistent between frames",),
        bonus_issues=("Object persistence might break across cuts",),
    ),
    "DeepFake Signature Detection": MethodRule(
        issue_threshold=60,
        issues=("Known deepfake generation artifacts detected",),
        bonus_issues=("Face-swap blending seams detected",),
        signal_ceiling=95,
    ),
    # --- audio ---
    "Spectral Analysis": MethodRule(
        issue_threshold=65,
        issues=("Unusual spectral patterns consistent with synthetic audio",),
        bonus_issues=("Possible vocoder band-limiting in high frequencies",),
        signal_ceiling=95,
    ),
    "Voice Pattern Recognition": MethodRule(
        issue_threshold=65,
        issues=(
            "Voice timbre unnaturally stable across the recording",
            "Breathing pauses missing between phrases",
        ),
        bonus_issues=("Prosody might follow a text-to-speech template",),
    ),
    "Acoustic Inconsistency Detection": MethodRule(
        issue_threshold=65,
        issues=("Background noise floor changes abruptly",),
        bonus_issues=("Room reverberation could be synthetic",),
    ),
    "Neural Audio Analysis": MethodRule(
        issue_threshold=60,
        issues=("Neural speech synthesis artifacts detected",),
        bonus_issues=("Voice cloning fingerprint detected",),
        signal_ceiling=85,
    ),
    # --- text ---
    "Pattern Recognition": MethodRule(
        issue_threshold=65,
        issues=("Statistical token patterns typical of language models",),
        bonus_issues=("Possible paraphrasing of generated content",),
        signal_ceiling=95,
    ),
    "Perplexity & Burstiness": MethodRule(
        issue_threshold=65,
        issues=(
            "Low perplexity across the whole text",
            "Sentence burstiness below human baseline",
        ),
    ),
    "Stylometric Fingerprinting": MethodRule(
        issue_threshold=65,
        issues=("Word choice matches common AI writing style",),
        bonus_issues=("Transitional phrases could be template-driven",),
    ),
    "Semantic Coherence Analysis": MethodRule(
        issue_threshold=65,
        issues=("Generic statements without factual grounding",),
        bonus_issues=("Narrative might lack a personal perspective",),
    ),
}

# Vendor model tags installed by the pretrained-model download, per type.
# The runner treats these as specialized models.
PRETRAINED_MODEL_VERSIONS: Dict[ContentType, str] = {
    ContentType.IMAGE: "sdxl-detector-v2",
    ContentType.VIDEO: "deepware-scanner-v3",
    ContentType.AUDIO: "wavlm-spoof-v2",
    ContentType.TEXT: "roberta-openai-detector-v1",
}

SPECIALIZED_MODEL_VERSIONS = frozenset(PRETRAINED_MODEL_VERSIONS.values())


def get_catalog(content_type: ContentType) -> List[DetectionMethod]:
    """Return a copy of the catalog so callers can't mutate the shared list."""
    return [method.model_copy() for method in CATALOGS[ContentType(content_type)]]


def get_method_rule(method_name: str) -> MethodRule:
    rule = METHOD_RULES.get(method_name)
    if rule is None:
        return MethodRule(
            issue_threshold=65,
            issues=(f"Anomalous patterns detected by {method_name}",),
        )
    return rule
