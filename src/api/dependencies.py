"""Request-scoped access to the services built at startup."""

from fastapi import Request

from src.db.history import HistoryStore
from src.llm.invoker import AnswerInvoker


def get_invoker(request: Request) -> AnswerInvoker:
    return request.app.state.invoker


def get_history_store(request: Request) -> HistoryStore:
    return request.app.state.history
