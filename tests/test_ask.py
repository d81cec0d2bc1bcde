"""Tests for the ask and history endpoints."""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from src.api import auth
from src.api.app import app
from src.api.dependencies import get_history_store, get_invoker
from src.db.history import HistoryStore
from src.db.session import Database
from src.errors import PersistenceError
from src.schemas import ErrorAnswer, ListAnswer, ListItem, TextAnswer


class FakeInvoker:
    def __init__(self, answer):
        self.answer_value = answer
        self.questions = []

    async def answer(self, question):
        self.questions.append(question)
        return self.answer_value


class FakeHistory:
    def __init__(self, rows=None, fail=False):
        self.rows = rows or []
        self.fail = fail
        self.saved = []

    async def save_exchange(self, user_id, question, answer):
        if self.fail:
            raise PersistenceError("database down")
        self.saved.append((user_id, question, answer))

    async def list_for_user(self, user_id, limit=20):
        if self.fail:
            raise PersistenceError("database down")
        return [r for r in self.rows if r.user_id == user_id][:limit]


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def use(history):
    """Install a fake invoker answering with the given answer."""
    def _use(answer, store=None):
        invoker = FakeInvoker(answer)
        app.dependency_overrides[get_invoker] = lambda: invoker
        app.dependency_overrides[get_history_store] = lambda: store or history
        return invoker
    yield _use
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# =============================================================================
# POST /api/ask
# =============================================================================

@pytest.mark.asyncio
async def test_text_answer_is_returned_and_saved(client, use, history):
    invoker = use(TextAnswer(answer="A SAFE is an agreement.", provider="primary"))

    resp = await client.post("/api/ask", json={"question": "What is a SAFE?"},
                             headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "text"
    assert data["answer"] == "A SAFE is an agreement."
    assert data["follow_up"] is None
    assert invoker.questions == ["What is a SAFE?"]
    assert len(history.saved) == 1
    user_id, question, answer = history.saved[0]
    assert (user_id, question) == ("user_1", "What is a SAFE?")
    assert answer.type == "text"


@pytest.mark.asyncio
async def test_list_answer_wire_shape(client, use, history):
    use(ListAnswer(title="Tips", items=(ListItem(point="Plan", detail="Plan ahead"),)))

    resp = await client.post("/api/ask", json={"question": "Tips?"},
                             headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "list"
    assert data["items"] == [{"point": "Plan", "detail": "Plan ahead"}]
    assert len(history.saved) == 1


@pytest.mark.asyncio
async def test_error_answer_is_200_and_not_saved(client, use, history):
    use(ErrorAnswer(message="All AI services failed. (E:F01)", code="F01"))

    resp = await client.post("/api/ask", json={"question": "What is a SAFE?"},
                             headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "error"
    assert data["code"] == "F01"
    assert history.saved == []


@pytest.mark.asyncio
async def test_anonymous_answer_is_not_saved(client, use, history):
    use(TextAnswer(answer="ok"))

    resp = await client.post("/api/ask", json={"question": "What is a SAFE?"})

    assert resp.status_code == 200
    assert history.saved == []


@pytest.mark.asyncio
async def test_history_write_failure_does_not_affect_answer(client, use):
    use(TextAnswer(answer="still answered"), store=FakeHistory(fail=True))

    resp = await client.post("/api/ask", json={"question": "What is a SAFE?"},
                             headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    assert resp.json()["answer"] == "still answered"


@pytest.mark.asyncio
async def test_unusable_database_url_does_not_affect_answer(client, use):
    store = HistoryStore(Database(url="postgres://user:pw@localhost/db"))
    use(TextAnswer(answer="still answered"), store=store)

    resp = await client.post("/api/ask", json={"question": "What is a SAFE?"},
                             headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    assert resp.json() == {
        "type": "text",
        "answer": "still answered",
        "follow_up": None,
        "source_section_id": None,
        "source_section_title": None,
        "provider": None,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"question": "   "},
    {"question": ""},
    {"question": 42},
    {},
])
async def test_bad_question_is_400(client, use, body):
    invoker = use(TextAnswer(answer="unused"))

    resp = await client.post("/api/ask", json=body)

    assert resp.status_code == 400
    assert resp.json()["type"] == "error"
    assert invoker.questions == []


@pytest.mark.asyncio
async def test_api_key_required_when_configured(client, use, monkeypatch):
    monkeypatch.setattr(auth, "API_KEY", "secret")
    use(TextAnswer(answer="ok"))

    denied = await client.post("/api/ask", json={"question": "q"})
    wrong = await client.post("/api/ask", json={"question": "q"}, headers={"X-API-Key": "nope"})
    allowed = await client.post("/api/ask", json={"question": "q"}, headers={"X-API-Key": "secret"})

    assert denied.status_code == 401
    assert denied.json()["type"] == "error"
    assert wrong.status_code == 401
    assert allowed.status_code == 200


# =============================================================================
# GET /api/history
# =============================================================================

def _row(user_id, question, minutes_ago):
    return SimpleNamespace(
        id=uuid.uuid4(),
        user_id=user_id,
        question=question,
        response={"type": "text", "answer": f"re: {question}", "follow_up": None},
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


@pytest.mark.asyncio
async def test_history_lists_user_records(client, use):
    rows = [_row("user_1", "newer", 1), _row("user_1", "older", 5), _row("user_2", "other", 2)]
    use(TextAnswer(answer="unused"), store=FakeHistory(rows=rows))

    resp = await client.get("/api/history", headers={"X-User-Id": "user_1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["limit"] == 20
    assert [item["question"] for item in data["items"]] == ["newer", "older"]
    assert data["items"][0]["response"] == {
        "type": "text",
        "answer": "re: newer",
        "follow_up": None,
        "source_section_id": None,
        "source_section_title": None,
        "provider": None,
    }


@pytest.mark.asyncio
async def test_history_requires_user(client, use):
    use(TextAnswer(answer="unused"))

    resp = await client.get("/api/history")

    assert resp.status_code == 401
    assert resp.json() == {"type": "error", "message": "User not authenticated."}


@pytest.mark.asyncio
async def test_history_unavailable_is_503(client, use):
    use(TextAnswer(answer="unused"), store=FakeHistory(fail=True))

    resp = await client.get("/api/history", headers={"X-User-Id": "user_1"})

    assert resp.status_code == 503
    assert resp.json()["type"] == "error"


@pytest.mark.asyncio
async def test_history_round_trip_through_database(client, use, tmp_path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'history.db'}")
    store = HistoryStore(database)
    invoker = use(ListAnswer(title="Steps", items=(ListItem(point="Plan", detail="Early"),),
                             provider="secondary"), store=store)

    for question in ("first", "second"):
        await client.post("/api/ask", json={"question": question},
                          headers={"X-User-Id": "user_1"})
    resp = await client.get("/api/history", headers={"X-User-Id": "user_1"})
    await database.dispose()

    assert invoker.questions == ["first", "second"]
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [item["question"] for item in items] == ["second", "first"]
    assert items[0]["user_id"] == "user_1"
    assert items[0]["response"]["type"] == "list"
    assert items[0]["response"]["items"] == [{"point": "Plan", "detail": "Early"}]
    assert items[0]["response"]["provider"] == "secondary"
