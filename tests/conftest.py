"""Shared fakes for the answering pipeline."""

import asyncio
from typing import Optional, Union

import pytest

from src.knowledge.loader import KnowledgeBase
from src.llm.providers import LLMProvider

VALID_TEXT = '{"type":"text","answer":"A SAFE is a Simple Agreement for Future Equity.","follow_up":null}'


class FakeProvider(LLMProvider):
    """Provider that returns a fixed string or raises a fixed exception."""

    def __init__(
        self,
        name: str,
        outcome: Union[str, BaseException],
        api_key: str = "test-key",
        timeout: float = 5.0,
        delay: float = 0.0,
        call_log: Optional[list] = None,
    ):
        super().__init__(api_key, f"{name}-model", timeout)
        self.name = name
        self.outcome = outcome
        self.delay = delay
        self.calls = 0
        self.call_log = call_log

    async def call(self, question: str, document: str) -> str:
        self.calls += 1
        if self.call_log is not None:
            self.call_log.append(self.name)
        self._require_key()
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def knowledge():
    return KnowledgeBase(path="does-not-matter.txt", override="A SAFE is a Simple Agreement for Future Equity.")


@pytest.fixture
def call_log():
    return []
