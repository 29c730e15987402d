"""Similarity scoring between a reference sentence and the learner's attempt."""

import math
import re

PERFECT_SCORE = 100

# Punctuation removed (not replaced by a space) before comparing
_PUNCTUATION = re.compile(r"[.,!?;:]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, drop . , ! ? ; : and trim."""
    return _PUNCTUATION.sub("", text.lower()).strip()


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def accuracy(reference: str, learner_input: str) -> int:
    """
    Score the learner's sentence against the reference, 0 to 100.

    Bag-of-words membership: every input word found anywhere in the reference
    counts once (repeats count again), divided by the longer word count.
    Word order is ignored. Ties round half up, so 2.5 -> 3 and 66.67 -> 67.

    Args:
        reference: The example sentence
        learner_input: What the learner typed

    Returns:
        Integer score in [0, 100]
    """
    if not learner_input.strip():
        return 0

    ref = normalize(reference)
    attempt = normalize(learner_input)
    if ref == attempt:
        return PERFECT_SCORE

    ref_words = _WHITESPACE.split(ref)
    input_words = _WHITESPACE.split(attempt)

    matches = sum(1 for word in input_words if word in ref_words)
    return round_half_up(matches / max(len(ref_words), len(input_words)) * 100)


def accuracy_label(score: int) -> str:
    """Badge text shown next to a practice attempt."""
    if score == PERFECT_SCORE:
        return "PERFECT"
    return f"Acc: {score}%"
