import asyncio
import random

import pytest

import config
from drill.models import DifficultyTier, ExampleSlot, WordBatch
from drill.provider import ContentProvider
from drill.session import SessionController


def make_batch(word: str, size: int = config.BATCH_SIZE) -> WordBatch:
    return WordBatch(
        word=word,
        slots=[
            ExampleSlot(
                reference=f"I saw the {word} number {i}.",
                translation=f"{word} 번역 {i}",
                context_note="일상 표현",
                grammar_note="과거 시제",
            )
            for i in range(size)
        ],
    )


class FakeProvider(ContentProvider):
    """Records calls and answers from canned results.

    A word or reference registered in ``batch_gates``/``feedback_gates`` blocks
    until the test sets the matching asyncio.Event.
    """

    def __init__(self):
        self.batch_calls: list[tuple[str, DifficultyTier]] = []
        self.feedback_calls: list[tuple[str, str]] = []
        self.batch_results: dict[str, object] = {}
        self.batch_gates: dict[str, asyncio.Event] = {}
        self.feedback_result: object = "관사가 빠졌어요."
        self.feedback_gates: dict[str, asyncio.Event] = {}
        self.closed = False

    async def fetch_batch(self, word, tier):
        self.batch_calls.append((word, tier))
        gate = self.batch_gates.get(word)
        if gate is not None:
            await gate.wait()
        result = self.batch_results.get(word, make_batch(word))
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_feedback(self, reference, learner_text):
        self.feedback_calls.append((reference, learner_text))
        gate = self.feedback_gates.get(reference)
        if gate is not None:
            await gate.wait()
        if isinstance(self.feedback_result, Exception):
            raise self.feedback_result
        return self.feedback_result

    async def aclose(self):
        self.closed = True


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def controller(provider):
    return SessionController(provider, rng=random.Random(7))


@pytest.fixture
def ready_controller(controller):
    asyncio.run(controller.load_word("alpha", DifficultyTier.INTERMEDIATE))
    return controller


@pytest.fixture
def batch_factory():
    return make_batch
