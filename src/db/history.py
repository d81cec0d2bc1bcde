"""Question/answer history store."""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from src.db.models import QAHistory
from src.db.session import Database
from src.errors import PersistenceError
from src.schemas.answers import StructuredAnswer
from src.utils.logging import log, get_logger

MODULE = "db.history"
logger = get_logger()

HISTORY_LIMIT = 20


class HistoryStore:
    """Append-only record of answered questions, keyed by user."""

    def __init__(self, database: Database):
        self.database = database

    async def save_exchange(
        self,
        user_id: str,
        question: str,
        answer: StructuredAnswer,
    ) -> QAHistory:
        """Store one exchange.

        Raises:
            PersistenceError: database unavailable or write failed
        """
        session_factory = await self.database.ensure_ready()
        entry = QAHistory(
            user_id=user_id,
            question=question,
            response=answer.model_dump(mode="json"),
        )
        try:
            async with session_factory() as session:
                session.add(entry)
                await session.commit()
                await session.refresh(entry)
        except SQLAlchemyError as e:
            await self._handle_failure(e)
            raise PersistenceError(f"Failed to save history: {e}") from e

        log.debug(logger, MODULE, "saved", "Saved Q&A history",
                  user_id=user_id, entry_id=str(entry.id))
        return entry

    async def list_for_user(
        self,
        user_id: str,
        limit: int = HISTORY_LIMIT,
    ) -> Sequence[QAHistory]:
        """A user's exchanges, newest first.

        Raises:
            PersistenceError: database unavailable or read failed
        """
        session_factory = await self.database.ensure_ready()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(QAHistory)
                    .where(QAHistory.user_id == user_id)
                    .order_by(QAHistory.created_at.desc())
                    .limit(limit)
                )
                return result.scalars().all()
        except SQLAlchemyError as e:
            await self._handle_failure(e)
            raise PersistenceError(f"Failed to read history: {e}") from e

    async def _handle_failure(self, error: SQLAlchemyError) -> None:
        # Lost or refused connection: reconnect on next ensure_ready()
        if isinstance(error, OperationalError) or (
            isinstance(error, DBAPIError) and error.connection_invalidated
        ):
            await self.database.invalidate()
