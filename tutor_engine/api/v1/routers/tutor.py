from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tutor_engine.api.v1.auth import require_service_auth
from tutor_engine.api.v1.errors import ERROR_RESPONSES, ApiError
from tutor_engine.application.use_cases.enroll_student_use_case import EnrollStudentUseCase
from tutor_engine.application.use_cases.tutor_turn_use_case import (
    HandleStudentMessageCommand,
    InitializeSessionCommand,
    TutorTurnResult,
    TutorTurnUseCase,
)
from tutor_engine.core.dependencies import get_enroll_student_use_case, get_tutor_turn_use_case
from tutor_engine.domain.exceptions import PersistenceError, SyllabusNotFoundError

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/tutor", tags=["tutor"], dependencies=[Depends(require_service_auth)])

TURN_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    code: ERROR_RESPONSES[code] for code in (401, 404, 422, 500, 503)
}


class StudentCourseRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)


class StudentMessageRequest(StudentCourseRequest):
    message: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "student_id": "student-42",
                "course_id": "course-python-101",
                "message": "Creo que una variable es como una caja con una etiqueta.",
            }
        }
    }


class TutorTurnResponse(BaseModel):
    response: str
    topic_id: str
    used_fallback: bool = False
    summary_scheduled: bool = False
    ok: bool = True


class EnrollmentResponse(BaseModel):
    ok: bool
    current_topic_id: str = ""
    topics: int = 0


def _to_response(result: TutorTurnResult) -> TutorTurnResponse:
    return TutorTurnResponse(
        response=result.display_text,
        topic_id=result.topic_id,
        used_fallback=result.used_fallback,
        summary_scheduled=result.summary_scheduled,
        ok=result.ok,
    )


def _translate_turn_error(exc: Exception) -> ApiError:
    if isinstance(exc, SyllabusNotFoundError):
        return ApiError(
            status_code=404,
            code="SYLLABUS_NOT_FOUND",
            message="Student is not enrolled in this course",
            details={"student_id": exc.student_id, "course_id": exc.course_id},
        )
    if isinstance(exc, PersistenceError):
        return ApiError(
            status_code=503,
            code="STORE_UNAVAILABLE",
            message="Tutoring store is unavailable",
            details=exc.operation,
        )
    if isinstance(exc, ValueError):
        return ApiError(status_code=422, code="INVALID_MESSAGE", message=str(exc))
    logger.error("tutor_turn_failed", error_type=type(exc).__name__, error=str(exc))
    return ApiError(status_code=500, code="TUTOR_TURN_FAILED", message="Tutor turn failed")


@router.post(
    "/messages",
    operation_id="sendStudentMessage",
    summary="Run one tutoring turn",
    description=(
        "Sends the student's message to the tutor and returns the display text. "
        "Syllabus progress is reconciled before the response is returned."
    ),
    response_model=TutorTurnResponse,
    responses=TURN_ERROR_RESPONSES,
)
async def send_student_message(
    request: StudentMessageRequest,
    use_case: TutorTurnUseCase = Depends(get_tutor_turn_use_case),
) -> TutorTurnResponse:
    try:
        result = await use_case.handle_message(
            HandleStudentMessageCommand(
                student_id=request.student_id,
                course_id=request.course_id,
                message=request.message,
            )
        )
    except Exception as exc:
        raise _translate_turn_error(exc) from exc
    return _to_response(result)


@router.post(
    "/sessions/initialize",
    operation_id="initializeTutorSession",
    summary="Open a session on the current topic",
    description="Runs a tutoring turn without student input so the tutor can introduce the current topic.",
    response_model=TutorTurnResponse,
    responses=TURN_ERROR_RESPONSES,
)
async def initialize_session(
    request: StudentCourseRequest,
    use_case: TutorTurnUseCase = Depends(get_tutor_turn_use_case),
) -> TutorTurnResponse:
    try:
        result = await use_case.initialize_session(
            InitializeSessionCommand(student_id=request.student_id, course_id=request.course_id)
        )
    except Exception as exc:
        raise _translate_turn_error(exc) from exc
    return _to_response(result)


@router.post(
    "/enrollments",
    operation_id="enrollStudent",
    summary="Create the student's syllabus for a course",
    response_model=EnrollmentResponse,
    responses={401: ERROR_RESPONSES[401], 503: ERROR_RESPONSES[503]},
)
async def enroll_student(
    request: StudentCourseRequest,
    use_case: EnrollStudentUseCase = Depends(get_enroll_student_use_case),
) -> EnrollmentResponse:
    try:
        syllabus = await use_case.execute(request.student_id, request.course_id)
    except Exception as exc:
        raise _translate_turn_error(exc) from exc
    return EnrollmentResponse(ok=True, current_topic_id=syllabus.current_topic_id, topics=len(syllabus.topics))
