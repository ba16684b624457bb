import structlog

from tutor_engine.domain.repositories import ISyllabusRepository
from tutor_engine.domain.schemas import SyllabusState

logger = structlog.get_logger(__name__)


class EnrollStudentUseCase:
    """Creates the syllabus of a newly enrolled student, or returns the existing one."""

    def __init__(self, syllabus_repository: ISyllabusRepository):
        self.syllabus_repository = syllabus_repository

    async def execute(self, student_id: str, course_id: str) -> SyllabusState:
        existing = await self.syllabus_repository.get_syllabus(student_id, course_id)
        if existing is not None:
            logger.info("enrollment_already_exists", student_id=student_id, course_id=course_id)
            return existing

        syllabus = await self.syllabus_repository.initialize_syllabus(student_id, course_id)
        logger.info(
            "syllabus_initialized",
            student_id=student_id,
            course_id=course_id,
            topics=len(syllabus.topics),
        )
        return syllabus
