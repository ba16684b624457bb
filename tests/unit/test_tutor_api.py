from __future__ import annotations

from typing import Any, Optional

from fastapi.testclient import TestClient

from tutor_engine.application.use_cases.tutor_turn_use_case import TutorTurnResult
from tutor_engine.core.dependencies import get_enroll_student_use_case, get_tutor_turn_use_case
from tutor_engine.core.settings import settings
from tutor_engine.domain.exceptions import PersistenceError, SyllabusNotFoundError
from tutor_engine.domain.schemas import SyllabusState, TopicState, TopicStatus
from tutor_engine.main import app


class _FakeTurnUseCase:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.commands: list[Any] = []

    async def handle_message(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return TutorTurnResult(display_text="Muy bien.", topic_id="sub1", summary_scheduled=True)

    async def initialize_session(self, command):
        self.commands.append(command)
        return TutorTurnResult(display_text="Empecemos.", topic_id="sub1", used_fallback=True)


class _FakeEnrollUseCase:
    async def execute(self, student_id: str, course_id: str) -> SyllabusState:
        return SyllabusState.from_topics(
            student_id, course_id, [TopicState(topic_id="sub1", status=TopicStatus.IN_PROGRESS, order_index=0)]
        )


def _client(use_case: _FakeTurnUseCase) -> TestClient:
    app.dependency_overrides[get_tutor_turn_use_case] = lambda: use_case
    app.dependency_overrides[get_enroll_student_use_case] = lambda: _FakeEnrollUseCase()
    return TestClient(app)


def test_message_endpoint_returns_display_text() -> None:
    use_case = _FakeTurnUseCase()
    try:
        with _client(use_case) as client:
            response = client.post(
                "/api/v1/tutor/messages",
                json={"student_id": "student-1", "course_id": "course-1", "message": "hola"},
            )
        assert response.status_code == 200
        assert response.json() == {
            "response": "Muy bien.",
            "topic_id": "sub1",
            "used_fallback": False,
            "summary_scheduled": True,
            "ok": True,
        }
        assert use_case.commands[0].message == "hola"
        assert "X-Correlation-ID" in response.headers
    finally:
        app.dependency_overrides.clear()


def test_initialize_endpoint_runs_session_turn() -> None:
    try:
        with _client(_FakeTurnUseCase()) as client:
            response = client.post(
                "/api/v1/tutor/sessions/initialize",
                json={"student_id": "student-1", "course_id": "course-1"},
            )
        assert response.status_code == 200
        assert response.json()["response"] == "Empecemos."
        assert response.json()["used_fallback"] is True
    finally:
        app.dependency_overrides.clear()


def test_enrollment_endpoint_returns_current_topic() -> None:
    try:
        with _client(_FakeTurnUseCase()) as client:
            response = client.post(
                "/api/v1/tutor/enrollments",
                json={"student_id": "student-1", "course_id": "course-1"},
            )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "current_topic_id": "sub1", "topics": 1}
    finally:
        app.dependency_overrides.clear()


def test_missing_syllabus_maps_to_404() -> None:
    try:
        with _client(_FakeTurnUseCase(error=SyllabusNotFoundError("student-1", "course-1"))) as client:
            response = client.post(
                "/api/v1/tutor/messages",
                json={"student_id": "student-1", "course_id": "course-1", "message": "hola"},
            )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SYLLABUS_NOT_FOUND"
    finally:
        app.dependency_overrides.clear()


def test_store_failure_maps_to_503() -> None:
    error = PersistenceError("timeout", operation="get_syllabus")
    try:
        with _client(_FakeTurnUseCase(error=error)) as client:
            response = client.post(
                "/api/v1/tutor/messages",
                json={"student_id": "student-1", "course_id": "course-1", "message": "hola"},
            )
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"
        assert response.json()["error"]["details"] == "get_syllabus"
    finally:
        app.dependency_overrides.clear()


def test_empty_message_is_request_validation_error() -> None:
    try:
        with _client(_FakeTurnUseCase()) as client:
            response = client.post(
                "/api/v1/tutor/messages",
                json={"student_id": "student-1", "course_id": "course-1", "message": ""},
            )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "FRONTEND_CONTRACT_BREACH"
    finally:
        app.dependency_overrides.clear()


def test_deployed_environment_requires_service_secret() -> None:
    original = (settings.APP_ENV, settings.TUTOR_SERVICE_SECRET)
    settings.APP_ENV = "production"
    settings.TUTOR_SERVICE_SECRET = "topsecret"
    payload = {"student_id": "student-1", "course_id": "course-1", "message": "hola"}
    try:
        with _client(_FakeTurnUseCase()) as client:
            denied = client.post("/api/v1/tutor/messages", json=payload)
            allowed = client.post(
                "/api/v1/tutor/messages", json=payload, headers={"X-Service-Secret": "topsecret"}
            )
        assert denied.status_code == 401
        assert denied.json()["error"]["code"] == "UNAUTHORIZED"
        assert allowed.status_code == 200
    finally:
        settings.APP_ENV, settings.TUTOR_SERVICE_SECRET = original
        app.dependency_overrides.clear()


def test_health() -> None:
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
