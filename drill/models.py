"""Pydantic data models for the Daily Word drill session."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

import config


class DifficultyTier(str, Enum):
    """Difficulty tiers, ordered from easiest to hardest."""

    ELEMENTARY = "Elementary"
    PRE_INTERMEDIATE = "Pre-Intermediate"
    INTERMEDIATE = "Intermediate"
    UPPER_INTERMEDIATE = "Upper-Intermediate"
    ADVANCED = "Advanced"

    @property
    def label(self) -> str:
        return TIER_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "DifficultyTier":
        """Look up a tier by value, member name or display label."""
        text = value.strip()
        for tier in cls:
            if text.lower() in (tier.value.lower(), tier.name.lower()) or text == tier.label:
                return tier
        raise ValueError(f"Unknown difficulty tier: {value}")


TIER_LABELS = {
    DifficultyTier.ELEMENTARY: "초보",
    DifficultyTier.PRE_INTERMEDIATE: "기초",
    DifficultyTier.INTERMEDIATE: "중급",
    DifficultyTier.UPPER_INTERMEDIATE: "고급",
    DifficultyTier.ADVANCED: "심화",
}


class ControllerStatus(str, Enum):
    """States of the session controller."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"


class ExampleSlot(BaseModel):
    """One example sentence with its translation and study notes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    reference: str = Field(alias="english")
    translation: str = Field(alias="korean")
    context_note: str = Field(alias="meaning")
    grammar_note: str = Field(alias="grammar")


class WordBatch(BaseModel):
    """A word together with exactly BATCH_SIZE example slots."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    word: str
    slots: tuple[ExampleSlot, ...] = Field(alias="examples")

    @field_validator("slots")
    @classmethod
    def check_batch_size(cls, slots: tuple[ExampleSlot, ...]) -> tuple[ExampleSlot, ...]:
        if len(slots) != config.BATCH_SIZE:
            raise ValueError(f"Expected {config.BATCH_SIZE} examples, got {len(slots)}")
        return slots


class SlotPracticeState(BaseModel):
    """Learner state for one example slot.

    ``revealed`` set means the reference sentence is covered and the practice
    field is shown in its place.
    """

    practice_text: str = ""
    revealed: bool = False
    feedback_text: Optional[str] = None
    feedback_pending: bool = False


def fresh_slot_states() -> list[SlotPracticeState]:
    return [SlotPracticeState() for _ in range(config.BATCH_SIZE)]


class SessionState(BaseModel):
    """Everything the controller owns for the current session."""

    difficulty: DifficultyTier = DifficultyTier(config.DEFAULT_DIFFICULTY)
    current_word: str = ""
    batch: Optional[WordBatch] = None
    per_slot: list[SlotPracticeState] = Field(default_factory=fresh_slot_states)
    loading: bool = False
