"""Session controller: word batches, per-slot practice state and feedback."""

import random
from typing import Callable, Optional

import config
from drill import scoring, word_selector
from drill.errors import PreconditionViolation, ProviderError
from drill.logger import SESSION_LOGGER, get_logger
from drill.models import (
    ControllerStatus,
    DifficultyTier,
    SessionState,
    SlotPracticeState,
    WordBatch,
    fresh_slot_states,
)
from drill.provider import ContentProvider

logger = get_logger(SESSION_LOGGER)

NoticeHandler = Callable[[str], None]


class SessionController:
    """
    Owns the SessionState and funnels every mutation through its methods.

    All methods run on one asyncio event loop. Each load bumps a generation
    counter; any batch or feedback response that completes under an older
    generation is discarded instead of being applied.
    """

    def __init__(
        self,
        provider: Optional[ContentProvider],
        difficulty: DifficultyTier = DifficultyTier(config.DEFAULT_DIFFICULTY),
        on_notice: Optional[NoticeHandler] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            provider: Content provider, or None when credentials are missing.
                Without a provider the session stays in "provider unavailable"
                mode and never issues a request.
            difficulty: Initial difficulty tier
            on_notice: Called with each user-visible notice
            rng: Random source for word picks
        """
        self.provider = provider
        self.state = SessionState(difficulty=difficulty)
        self.notices: list[str] = []
        self._on_notice = on_notice
        self._rng = rng
        self._generation = 0
        # Last accepted batch; restored if the load that hid it fails
        self._accepted_batch: Optional[WordBatch] = None

    # --- Read-only views ---

    @property
    def provider_available(self) -> bool:
        return self.provider is not None

    @property
    def status(self) -> ControllerStatus:
        if self.state.loading:
            return ControllerStatus.LOADING
        if self.state.batch is not None:
            return ControllerStatus.READY
        return ControllerStatus.IDLE

    @property
    def generation(self) -> int:
        return self._generation

    def slot(self, index: int) -> SlotPracticeState:
        self._check_index(index)
        return self.state.per_slot[index]

    def slot_accuracy(self, index: int) -> int:
        """Accuracy of the slot's practice text against its reference sentence."""
        self._check_index(index)
        batch = self.state.batch
        if batch is None:
            return 0
        return scoring.accuracy(batch.slots[index].reference, self.state.per_slot[index].practice_text)

    # --- Word changes ---

    async def select_word(self, tier: DifficultyTier) -> None:
        """Switch to ``tier`` and load a random word from its pool."""
        self.state.difficulty = tier
        word = word_selector.pick(tier, self._rng)
        logger.info(f"Recommended word for {tier.value}: {word}")
        await self.load_word(word, tier)

    async def load_manual_word(self, text: str) -> None:
        """Load a learner-typed word at the current difficulty. Blank input is ignored."""
        word = word_selector.normalize_manual_word(text)
        if word is None:
            return
        await self.load_word(word, self.state.difficulty)

    async def load_word(self, word: str, tier: DifficultyTier) -> None:
        """
        Fetch a new batch for ``word``.

        Slot state is reset and the current batch hidden before the provider
        is called. On failure the previous word and batch come back, the slots
        stay reset and a notice is raised.
        """
        if self.provider is None:
            self._notify(config.PROVIDER_UNAVAILABLE_NOTICE)
            return

        self._generation += 1
        generation = self._generation
        if not self.state.loading:
            self._accepted_batch = self.state.batch
        self.state.loading = True
        self.state.batch = None
        self.state.per_slot = fresh_slot_states()
        log_extra = {"generation": generation}
        logger.info(f"Loading '{word}' ({tier.value})", extra=log_extra)

        batch: Optional[WordBatch] = None
        failure: Optional[ProviderError] = None
        try:
            batch = await self.provider.fetch_batch(word, tier)
        except ProviderError as e:
            failure = e
        finally:
            # Runs for unexpected errors and cancellation too, so the latest
            # load always leaves LOADING
            if generation == self._generation:
                if batch is not None:
                    self._accepted_batch = batch
                    self.state.current_word = batch.word
                self.state.batch = self._accepted_batch
                self.state.loading = False

        if generation != self._generation:
            logger.debug(f"Discarding stale response for '{word}'", extra=log_extra)
            return
        if failure is not None:
            logger.error(f"Batch fetch failed for '{word}': {failure}", extra=log_extra)
            self._notify(config.BATCH_FAILED_NOTICE)
            return
        logger.info(f"Ready: '{batch.word}' with {len(batch.slots)} examples", extra=log_extra)

    # --- Per-slot practice ---

    def toggle_reveal(self, index: int) -> None:
        """Switch the slot between showing the reference and the practice field."""
        self._check_index(index)
        if self.status is not ControllerStatus.READY:
            raise PreconditionViolation(f"Cannot toggle slot {index} while {self.status.value}")
        slot = self.state.per_slot[index]
        slot.revealed = not slot.revealed

    def set_practice_text(self, index: int, text: str) -> None:
        self._check_index(index)
        self.state.per_slot[index].practice_text = text

    def can_request_feedback(self, index: int) -> bool:
        self._check_index(index)
        slot = self.state.per_slot[index]
        return (
            self.provider is not None
            and self.state.batch is not None
            and bool(slot.practice_text)
            and not slot.feedback_pending
            and self.slot_accuracy(index) < scoring.PERFECT_SCORE
        )

    async def request_feedback(self, index: int) -> None:
        """
        Ask the provider why the slot's attempt differs from the reference.

        A no-op when the attempt is empty or perfect, or a request for this
        slot is already in flight. Failures are logged and otherwise ignored.
        """
        if not self.can_request_feedback(index):
            return

        generation = self._generation
        slot = self.state.per_slot[index]
        reference = self.state.batch.slots[index].reference
        slot.feedback_pending = True
        log_extra = {"generation": generation}

        try:
            feedback = await self.provider.fetch_feedback(reference, slot.practice_text)
        except ProviderError as e:
            logger.warning(f"Feedback failed for slot {index}: {e}", extra=log_extra)
            return
        else:
            if generation != self._generation:
                logger.debug(f"Discarding feedback for slot {index}", extra=log_extra)
                return
            slot.feedback_text = feedback
        finally:
            if generation == self._generation:
                slot.feedback_pending = False

    # --- Helpers ---

    def _check_index(self, index: int) -> None:
        if not 0 <= index < config.BATCH_SIZE:
            raise PreconditionViolation(f"Slot index out of range: {index}")

    def _notify(self, message: str) -> None:
        self.notices.append(message)
        logger.info(f"Notice: {message}")
        if self._on_notice is not None:
            self._on_notice(message)
