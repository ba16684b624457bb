from tutor_engine.domain.repositories.chat_history_repository import IChatHistoryRepository
from tutor_engine.domain.repositories.course_repository import ICourseRepository
from tutor_engine.domain.repositories.summary_repository import ITopicSummaryRepository
from tutor_engine.domain.repositories.syllabus_repository import ISyllabusRepository

__all__ = [
    "IChatHistoryRepository",
    "ICourseRepository",
    "ISyllabusRepository",
    "ITopicSummaryRepository",
]
