"""Answer orchestration: precheck, primary, one fallback, validated result.

This module is the single entry point for answering a question. It runs a
linear state machine and always resolves to a StructuredAnswer:

  PRECHECK        no provider key          → error CFG00
                  empty knowledge document → error CFG02
  CALL_PRIMARY    ok     → validate(raw, "primary")
                  failed → CALL_SECONDARY, or error F02 if no secondary key
  CALL_SECONDARY  ok     → validate(raw, "secondary")
                  failed → error F01

Primary is called exactly once and secondary at most once, strictly in
sequence. A response that fails validation is returned as-is (PV0x); it does
not trigger the fallback or a same-provider retry.
"""

import asyncio
import time
from typing import Optional

from pydantic import BaseModel

from src.errors import ConfigError
from src.knowledge.loader import KnowledgeBase
from src.llm.providers import LLMProvider
from src.llm.validators import validate_answer
from src.schemas.answers import ErrorAnswer, StructuredAnswer
from src.utils.logging import log, get_logger

MODULE = "llm.invoker"
logger = get_logger()

PRIMARY = "primary"
SECONDARY = "secondary"


class ProviderAttempt(BaseModel):
    """One call to one provider. Lives only for the duration of answer()."""

    label: str
    provider: str
    model: str
    latency_ms: int = 0
    raw: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.raw is not None


class AnswerInvoker:
    """Answers questions with a primary provider and a single fallback."""

    def __init__(
        self,
        primary: LLMProvider,
        secondary: LLMProvider,
        knowledge: KnowledgeBase,
    ):
        self.primary = primary
        self.secondary = secondary
        self.knowledge = knowledge

    async def answer(self, question: str) -> StructuredAnswer:
        """Answer a question. Never raises; failures are ErrorAnswer.

        Args:
            question: The user's question, already checked non-empty

        Returns:
            TextAnswer, ListAnswer, or ErrorAnswer
        """
        try:
            document = self._precheck()
        except ConfigError as e:
            log.error(logger, MODULE, "precheck_failed", str(e), code=e.code)
            return ErrorAnswer(
                message=f"{e} Contact support. (E:{e.code})", code=e.code,
            )

        primary = await self._attempt(PRIMARY, self.primary, question, document)
        if primary.succeeded:
            return self._finish(primary)

        if not self.secondary.is_configured:
            log.error(logger, MODULE, "fallback_skipped",
                      "Secondary provider not configured",
                      provider=self.secondary.name)
            return ErrorAnswer(
                message=(
                    "Primary AI service failed and no fallback configured. "
                    f"{primary.provider} error: {primary.error} (E:F02)"
                ),
                code="F02",
            )

        log.info(logger, MODULE, "provider_fallback", "Falling back to secondary provider",
                 provider=self.secondary.name, primary_error=primary.error)
        secondary = await self._attempt(SECONDARY, self.secondary, question, document)
        if secondary.succeeded:
            return self._finish(secondary)

        return ErrorAnswer(
            message=(
                "All AI services failed. "
                f"{secondary.provider} error: {secondary.error} (E:F01)"
            ),
            code="F01",
        )

    def _precheck(self) -> str:
        if not (self.primary.is_configured or self.secondary.is_configured):
            raise ConfigError("Critical Error: AI service API key(s) missing.", "CFG00")

        document = self.knowledge.get_document()
        if not document:
            raise ConfigError("Critical Error: Knowledge base unavailable.", "CFG02")
        return document

    async def _attempt(
        self,
        label: str,
        provider: LLMProvider,
        question: str,
        document: str,
    ) -> ProviderAttempt:
        attempt = ProviderAttempt(label=label, provider=provider.name, model=provider.model)

        log.info(logger, MODULE, "provider_start", f"Calling {label} provider",
                 label=label, provider=provider.name, model=provider.model)
        _t0 = time.monotonic()
        try:
            attempt.raw = await asyncio.wait_for(
                provider.call(question, document), timeout=provider.timeout,
            )
        except asyncio.TimeoutError:
            attempt.error = f"timed out after {provider.timeout}s"
            attempt.error_type = "TimeoutError"
        except Exception as e:
            attempt.error = str(e) or type(e).__name__
            attempt.error_type = type(e).__name__
        attempt.latency_ms = int((time.monotonic() - _t0) * 1000)

        if attempt.succeeded:
            log.info(logger, MODULE, "provider_done", f"{label} provider answered",
                     label=label, provider=provider.name,
                     latency_ms=attempt.latency_ms, raw_length=len(attempt.raw))
        else:
            log.warning(logger, MODULE, "provider_failed", f"{label} provider failed",
                        label=label, provider=provider.name, model=provider.model,
                        latency_ms=attempt.latency_ms,
                        error=attempt.error, error_type=attempt.error_type)
        return attempt

    def _finish(self, attempt: ProviderAttempt) -> StructuredAnswer:
        answer = validate_answer(attempt.raw, attempt.label)
        log.info(logger, MODULE, "answer_done", "Answer ready",
                 provider=attempt.label, type=answer.type,
                 code=getattr(answer, "code", None))
        return answer
