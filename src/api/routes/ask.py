"""Question answering and history endpoints.

POST /api/ask always answers 200 with a StructuredAnswer, even when every
provider failed: the failure is described by an error-shaped answer, not by
the HTTP status. History is best-effort: a failed write is logged and the
answer is returned regardless.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from src.api.auth import optional_user, require_user
from src.api.dependencies import get_history_store, get_invoker
from src.db.history import HISTORY_LIMIT, HistoryStore
from src.errors import PersistenceError
from src.llm.invoker import AnswerInvoker
from src.schemas import (
    AskRequest,
    HistoryEntry,
    HistoryListResponse,
    StructuredAnswer,
    is_persistable,
    structured_answer_adapter,
)
from src.utils.logging import log, get_logger

MODULE = "ask"
logger = get_logger()

router = APIRouter()


@router.post("/ask", response_model=StructuredAnswer)
async def ask(
    body: AskRequest,
    user_id: Optional[str] = Depends(optional_user),
    invoker: AnswerInvoker = Depends(get_invoker),
    history: HistoryStore = Depends(get_history_store),
):
    """Answer a question from the fundraising guide."""
    log.info(logger, MODULE, "received", "Question received",
             user_id=user_id or "anonymous", question=body.question[:100])

    answer = await invoker.answer(body.question)

    if user_id and is_persistable(answer):
        await _save_history(history, user_id, body.question, answer)
    elif user_id:
        log.info(logger, MODULE, "history_skipped",
                 "Error answer, not saving interaction",
                 user_id=user_id, code=getattr(answer, "code", None))

    return answer


async def _save_history(
    history: HistoryStore,
    user_id: str,
    question: str,
    answer: StructuredAnswer,
) -> None:
    try:
        await history.save_exchange(user_id, question, answer)
    except PersistenceError as e:
        log.error(logger, MODULE, "history_save_failed",
                  "Failed to save Q&A history",
                  error=str(e), error_type=type(e).__name__, user_id=user_id)
        return
    log.info(logger, MODULE, "history_saved", "Saved Q&A history", user_id=user_id)


@router.get("/history", response_model=HistoryListResponse)
async def list_history(
    user_id: str = Depends(require_user),
    history: HistoryStore = Depends(get_history_store),
):
    """The caller's most recent exchanges, newest first."""
    try:
        rows = await history.list_for_user(user_id, limit=HISTORY_LIMIT)
    except PersistenceError as e:
        log.error(logger, MODULE, "history_read_failed",
                  "Failed to fetch history",
                  error=str(e), error_type=type(e).__name__, user_id=user_id)
        raise HTTPException(status_code=503, detail="History is temporarily unavailable.")

    log.debug(logger, MODULE, "history_read", "History retrieved",
              user_id=user_id, count=len(rows))

    return HistoryListResponse(
        items=[
            HistoryEntry(
                id=str(row.id),
                user_id=row.user_id,
                question=row.question,
                response=structured_answer_adapter.validate_python(row.response),
                timestamp=row.created_at,
            )
            for row in rows
        ],
        limit=HISTORY_LIMIT,
    )
