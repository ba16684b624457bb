from abc import ABC, abstractmethod
from typing import Optional

from tutor_engine.domain.schemas import SyllabusState, TopicStatus


class ISyllabusRepository(ABC):
    @abstractmethod
    async def get_syllabus(self, student_id: str, course_id: str) -> Optional[SyllabusState]:
        pass

    @abstractmethod
    async def write_topic_status(
        self, student_id: str, course_id: str, topic_id: str, status: TopicStatus
    ) -> None:
        """Raises PersistenceError when the write fails."""

    @abstractmethod
    async def initialize_syllabus(self, student_id: str, course_id: str) -> SyllabusState:
        """Creates one entry per course topic: first in_progress, the rest pending."""
