"""
Superficial content signals for AI-origin suspicion.

Functions:
  - filename_has_ai_terms: Strict, delimiter-aware AI term match (aggregator bonus).
  - is_suspiciously_small: File size too small for the declared media type.
  - has_perfect_dimensions: Exact match against known generator output sizes.
  - analyze_text_patterns: Sentence-length variance and 3-gram repetition.
  - detect_signals: All weak signals for one descriptor.
  - is_content_biased: Portrait framing or corroborated signals (runner band choice).

Every signal here is weak on its own. The runner only switches to the biased
band, or boosts a method, when at least two of them coincide.
"""

import re
import logging
from typing import List

from fakefinder.config import settings
from fakefinder.schemas.detection import ContentDescriptor, ContentSignal, ContentType

logger = logging.getLogger(__name__)

# Matched only next to a delimiter, so "brain.jpg" or "detail.png" never hit 'ai'
AI_FILENAME_TERMS = [
    "ai", "generated", "midjourney", "dalle", "stable-diffusion", "synthetic",
    "deepfake", "gpt", "artificial", "neural", "gan", "stylegan", "diffusion",
]
_DELIMITERS = ("-", "_", " ")

# Looser substring terms used for the per-method weak signal
SIGNAL_FILENAME_TERMS = {
    ContentType.IMAGE: [
        "-ai-", "ai-", "-ai", "_ai_", "ai_", "_ai",
        "generated-by", "midjourney", "dalle", "dall-e",
        "stable-diffusion", "deepfake", "stylegan",
    ],
    ContentType.VIDEO: ["-ai", "ai-", "_ai", "ai_", "generated", "deepfake", "synthetic", "fake", "neural"],
    ContentType.AUDIO: ["synthetic", "ai-gen", "tts", "elevenlabs", "generated", "cloned"],
}

# Known generator output sizes (width, height)
AI_OUTPUT_SIZES = {
    (256, 256), (512, 512), (768, 768), (1024, 1024), (2048, 2048),
    (1024, 1792), (1792, 1024),     # DALL-E 3 portrait / landscape
    (1344, 768), (896, 1152),       # Midjourney standard / portrait
    (1280, 720), (720, 1280),       # Text-to-video defaults
}

# (mime fragment, byte floor), first match wins
SMALL_FILE_LIMITS = {
    ContentType.IMAGE: [("jpeg", 80_000), ("jpg", 80_000), ("png", 120_000), ("image/", 60_000)],
    ContentType.VIDEO: [("video/", 500_000)],
    ContentType.AUDIO: [("wav", 200_000), ("audio/", 40_000)],
}

AI_TEXT_PHRASES = [
    "as an ai", "i don't have personal", "i cannot", "i don't have the ability to",
    "i'm an ai", "as a language model", "i don't have access to", "i cannot browse",
]

SENTENCE_VARIANCE_FLOOR = 5.0
REPETITION_THRESHOLD_PERCENT = 2.0
MIN_SENTENCES_FOR_VARIANCE = 5


def filename_has_ai_terms(filename: str) -> bool:
    """True when an AI term appears bounded by a delimiter, or is the whole stem."""
    if not filename:
        return False
    lower = filename.lower()
    stem = lower.rsplit(".", 1)[0]
    for term in AI_FILENAME_TERMS:
        if stem == term:
            return True
        for d in _DELIMITERS:
            if f"{d}{term}" in lower or f"{term}{d}" in lower:
                return True
    return False


def has_signal_filename(descriptor: ContentDescriptor) -> bool:
    terms = SIGNAL_FILENAME_TERMS.get(descriptor.content_type, [])
    lower = (descriptor.filename or "").lower()
    return bool(lower) and any(term in lower for term in terms)


def is_suspiciously_small(descriptor: ContentDescriptor) -> bool:
    if descriptor.file_size <= 0:
        return False
    mime = descriptor.mime_type.lower()
    for fragment, floor in SMALL_FILE_LIMITS.get(descriptor.content_type, []):
        if fragment in mime:
            return descriptor.file_size < floor
    return False


def has_perfect_dimensions(width, height) -> bool:
    if not width or not height:
        return False
    return (width, height) in AI_OUTPUT_SIZES


def has_ai_phrases(text: str) -> bool:
    lower = (text or "").lower()
    return any(phrase in lower for phrase in AI_TEXT_PHRASES)


def analyze_text_patterns(text: str) -> dict:
    """
    Returns {consistent_sentence_lengths, repetitive_patterns, word_count}.

    Low sentence-length variance and repeated 3-grams are both typical of
    generated prose.
    """
    words = (text or "").lower().split()

    sentences = [s.strip() for s in re.split(r"[.!?]+", text or "") if s.strip()]
    consistent = False
    if len(sentences) > MIN_SENTENCES_FOR_VARIANCE:
        lengths = [len(s.split()) for s in sentences]
        avg = sum(lengths) / len(lengths)
        variance = sum((n - avg) ** 2 for n in lengths) / len(lengths)
        consistent = variance < SENTENCE_VARIANCE_FLOOR

    three_grams = [" ".join(words[i:i + 3]) for i in range(len(words) - 2)]
    repetitive = False
    if three_grams:
        repetition_rate = 100 - (len(set(three_grams)) / len(three_grams) * 100)
        repetitive = repetition_rate > REPETITION_THRESHOLD_PERCENT

    return {
        "consistent_sentence_lengths": consistent,
        "repetitive_patterns": repetitive,
        "word_count": len(words),
    }


def detect_signals(descriptor: ContentDescriptor) -> List[ContentSignal]:
    """Collect every weak signal present on the descriptor."""
    signals = []

    if descriptor.content_type == ContentType.TEXT:
        text = descriptor.text or ""
        if has_ai_phrases(text):
            signals.append(ContentSignal(
                name="ai_phrases", issue="Assistant-style disclaimer phrases found in text"
            ))
        patterns = analyze_text_patterns(text)
        if patterns["repetitive_patterns"]:
            signals.append(ContentSignal(
                name="repetitive_patterns", issue="Repetitive phrase patterns detected"
            ))
        if patterns["consistent_sentence_lengths"]:
            signals.append(ContentSignal(
                name="consistent_sentences", issue="Unnaturally consistent sentence structures"
            ))
    else:
        if has_signal_filename(descriptor):
            signals.append(ContentSignal(
                name="ai_filename", issue="AI-related terms found in filename"
            ))
        if is_suspiciously_small(descriptor):
            signals.append(ContentSignal(
                name="small_file",
                issue=f"Unusually small file size for {descriptor.content_type.value} quality",
            ))
        if has_perfect_dimensions(descriptor.width, descriptor.height):
            signals.append(ContentSignal(
                name="perfect_dimensions",
                issue=f"Suspiciously perfect dimensions ({descriptor.width}x{descriptor.height})",
            ))

    if signals:
        logger.info(f"[SIGNALS] {descriptor.content_type.value}: {[s.name for s in signals]}")
    return signals


def is_content_biased(descriptor: ContentDescriptor, signals: List[ContentSignal]) -> bool:
    """Portrait-like images, or content with at least two corroborating signals, draw from the biased band."""
    return descriptor.is_portrait or len(signals) >= settings.min_corroborating_signals
