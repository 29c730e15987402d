"""Word selection: random picks from the fixed per-tier pools, or manual entry."""

import random
from types import MappingProxyType
from typing import Optional

from drill.models import DifficultyTier

WORD_POOLS = MappingProxyType(
    {
        DifficultyTier.ELEMENTARY: (
            "Water", "Bread", "Friend", "School", "Family",
            "Happy", "Small", "Color", "Sleep", "Animal",
        ),
        DifficultyTier.PRE_INTERMEDIATE: (
            "Journey", "Village", "Support", "Common", "Simple",
            "Believe", "Future", "Important", "Success", "Reason",
        ),
        DifficultyTier.INTERMEDIATE: (
            "Persistent", "Resilience", "Eloquent", "Meticulous", "Ambiguous",
            "Vibrant", "Pragmatic", "Inevitably", "Compromise", "Paradigm",
        ),
        DifficultyTier.UPPER_INTERMEDIATE: (
            "Authentic", "Dilemma", "Coherent", "Incentive", "Plausible",
            "Substantial", "Versatile", "Widespread", "Yield", "Advocate",
        ),
        DifficultyTier.ADVANCED: (
            "Ephemeral", "Ubiquitous", "Deleterious", "Obfuscate", "Perfunctory",
            "Quixotic", "Surreptitious", "Vicarious", "Zealous", "Equanimity",
        ),
    }
)


def pick(tier: DifficultyTier, rng: Optional[random.Random] = None) -> str:
    """
    Pick a word uniformly at random from the tier's pool.

    Args:
        tier: Difficulty tier to draw from
        rng: Optional random source (module-level random if None)

    Returns:
        One word from the pool
    """
    pool = WORD_POOLS[tier]
    return (rng or random).choice(pool)


def normalize_manual_word(text: str) -> str | None:
    """Trim a learner-typed word. Returns None for empty or whitespace-only input."""
    word = text.strip()
    return word or None
