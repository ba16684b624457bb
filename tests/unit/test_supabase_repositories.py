import asyncio
import types
from typing import Any, Dict, List, Optional

import pytest

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.schemas import ChatMessage, TopicStatus
from tutor_engine.infrastructure.repositories.supabase_chat_history_repository import (
    SupabaseChatHistoryRepository,
)
from tutor_engine.infrastructure.repositories.supabase_course_repository import SupabaseCourseRepository
from tutor_engine.infrastructure.repositories.supabase_syllabus_repository import SupabaseSyllabusRepository


class _FakeQuery:
    def __init__(self, client: "_FakeClient", table: str):
        self.client = client
        self.table = table
        self.filters: Dict[str, Any] = {}
        self.payload: Any = None
        self.action = "select"

    def select(self, *_args, **_kwargs):
        return self

    def order(self, *_args, **_kwargs):
        return self

    def maybe_single(self):
        return self

    def eq(self, column: str, value: Any):
        self.filters[column] = value
        return self

    def update(self, payload: Any):
        self.action, self.payload = "update", payload
        return self

    def insert(self, payload: Any):
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload: Any, **_kwargs):
        self.action, self.payload = "upsert", payload
        return self

    async def execute(self):
        if self.client.error is not None:
            raise self.client.error
        self.client.calls.append((self.table, self.action, dict(self.filters), self.payload))
        return types.SimpleNamespace(data=self.client.responses.get((self.table, self.action)))


class _FakeClient:
    def __init__(self, responses: Optional[Dict[Any, Any]] = None, error: Optional[Exception] = None):
        self.responses = responses or {}
        self.error = error
        self.calls: List[Any] = []

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self, name)


def _with_client(repo, client: _FakeClient):
    repo._client = client
    return repo


def test_get_syllabus_sorts_topics_and_picks_active_topic() -> None:
    rows = [
        {"topic_id": "sub2", "status": "in_progress", "order_index": 1},
        {"topic_id": "sub1", "status": "completed", "order_index": 0},
    ]
    repo = _with_client(SupabaseSyllabusRepository(), _FakeClient({("student_syllabus", "select"): rows}))

    syllabus = asyncio.run(repo.get_syllabus("student-1", "course-1"))

    assert [t.topic_id for t in syllabus.topics] == ["sub1", "sub2"]
    assert syllabus.current_topic_id == "sub2"


def test_get_syllabus_without_rows_returns_none() -> None:
    repo = _with_client(SupabaseSyllabusRepository(), _FakeClient({("student_syllabus", "select"): []}))

    assert asyncio.run(repo.get_syllabus("student-1", "course-1")) is None


def test_write_topic_status_scopes_update_to_student_course_topic() -> None:
    client = _FakeClient()
    repo = _with_client(SupabaseSyllabusRepository(), client)

    asyncio.run(repo.write_topic_status("student-1", "course-1", "sub1", TopicStatus.COMPLETED))

    assert client.calls == [
        (
            "student_syllabus",
            "update",
            {"student_id": "student-1", "course_id": "course-1", "topic_id": "sub1"},
            {"status": "completed"},
        )
    ]


def test_store_errors_become_persistence_errors() -> None:
    repo = _with_client(SupabaseSyllabusRepository(), _FakeClient(error=RuntimeError("connection reset")))

    with pytest.raises(PersistenceError) as exc:
        asyncio.run(repo.write_topic_status("student-1", "course-1", "sub1", TopicStatus.COMPLETED))
    assert exc.value.operation == "write_topic_status"


def test_initialize_syllabus_activates_first_course_topic() -> None:
    client = _FakeClient({("topics", "select"): [{"id": "t-a"}, {"id": "t-b"}]})
    repo = _with_client(SupabaseSyllabusRepository(), client)

    syllabus = asyncio.run(repo.initialize_syllabus("student-1", "course-1"))

    assert syllabus.current_topic_id == "t-a"
    inserted = client.calls[-1][3]
    assert [(r["topic_id"], r["status"], r["order_index"]) for r in inserted] == [
        ("t-a", "in_progress", 0),
        ("t-b", "pending", 1),
    ]


def test_missing_persona_row_returns_none() -> None:
    repo = _with_client(SupabaseCourseRepository(), _FakeClient({("persona_configs", "select"): None}))

    assert asyncio.run(repo.get_persona_config("course-1")) is None


def test_append_chat_history_concatenates_and_stamps_messages() -> None:
    existing = {"context_data": [{"role": "user", "content": "hola", "timestamp": "2024-01-01T00:00:00+00:00"}]}
    client = _FakeClient({("chat_sessions", "select"): existing})
    repo = _with_client(SupabaseChatHistoryRepository(), client)

    asyncio.run(
        repo.append_chat_history("student-1", "sub1", [ChatMessage(role="assistant", content="Hola!")])
    )

    written = client.calls[-1][3]["context_data"]
    assert [m["content"] for m in written] == ["hola", "Hola!"]
    assert written[1]["timestamp"]
