"""Content provider boundary consumed by the session controller."""

from abc import ABC, abstractmethod

from drill.models import DifficultyTier, WordBatch


class ContentProvider(ABC):
    """Source of example batches and per-sentence critiques.

    Both calls may take arbitrarily long and raise ProviderError on failure.
    """

    @abstractmethod
    async def fetch_batch(self, word: str, tier: DifficultyTier) -> WordBatch:
        pass

    @abstractmethod
    async def fetch_feedback(self, reference: str, learner_text: str) -> str:
        pass

    async def aclose(self) -> None:
        """Release any underlying connections."""
        return None
