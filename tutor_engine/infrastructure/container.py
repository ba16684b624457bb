"""
Tutor Container - Infrastructure Layer

Builds repositories, model clients and use cases lazily and owns their lifecycle.
"""

from tutor_engine.application.services.topic_summary_trigger import TopicSummaryTrigger
from tutor_engine.application.use_cases.enroll_student_use_case import EnrollStudentUseCase
from tutor_engine.application.use_cases.tutor_turn_use_case import TutorTurnUseCase
from tutor_engine.core.llm import get_llm
from tutor_engine.core.settings import settings
from tutor_engine.infrastructure.ai.langchain_model_client import LangChainModelClient
from tutor_engine.infrastructure.concurrency.student_turn_lock_manager import StudentTurnLockManager
from tutor_engine.infrastructure.repositories.supabase_chat_history_repository import (
    SupabaseChatHistoryRepository,
)
from tutor_engine.infrastructure.repositories.supabase_course_repository import SupabaseCourseRepository
from tutor_engine.infrastructure.repositories.supabase_summary_repository import (
    SupabaseTopicSummaryRepository,
)
from tutor_engine.infrastructure.repositories.supabase_syllabus_repository import (
    SupabaseSyllabusRepository,
)


class TutorContainer:
    """
    IoC Container for tutoring services.
    """

    def __init__(self):
        self._syllabus_repository = None
        self._course_repository = None
        self._history_repository = None
        self._summary_repository = None
        self._teacher_model_client = None
        self._archivist_model_client = None
        self._turn_locks = None
        self._summary_trigger = None
        self._tutor_turn_use_case = None
        self._enroll_student_use_case = None

    @property
    def syllabus_repository(self) -> SupabaseSyllabusRepository:
        if self._syllabus_repository is None:
            self._syllabus_repository = SupabaseSyllabusRepository()
        return self._syllabus_repository

    @property
    def course_repository(self) -> SupabaseCourseRepository:
        if self._course_repository is None:
            self._course_repository = SupabaseCourseRepository()
        return self._course_repository

    @property
    def history_repository(self) -> SupabaseChatHistoryRepository:
        if self._history_repository is None:
            self._history_repository = SupabaseChatHistoryRepository()
        return self._history_repository

    @property
    def summary_repository(self) -> SupabaseTopicSummaryRepository:
        if self._summary_repository is None:
            self._summary_repository = SupabaseTopicSummaryRepository()
        return self._summary_repository

    @property
    def teacher_model_client(self) -> LangChainModelClient:
        if self._teacher_model_client is None:
            llm = get_llm(capability="CHAT", prefer_provider=settings.TEACHER_PROVIDER)
            self._teacher_model_client = LangChainModelClient(llm, span_name="teacher_turn")
        return self._teacher_model_client

    @property
    def archivist_model_client(self) -> LangChainModelClient:
        if self._archivist_model_client is None:
            llm = get_llm(capability="SUMMARIZATION", prefer_provider=settings.ARCHIVIST_PROVIDER)
            self._archivist_model_client = LangChainModelClient(llm, span_name="archivist_summary")
        return self._archivist_model_client

    @property
    def turn_locks(self) -> StudentTurnLockManager:
        if self._turn_locks is None:
            self._turn_locks = StudentTurnLockManager()
        return self._turn_locks

    @property
    def summary_trigger(self) -> TopicSummaryTrigger:
        if self._summary_trigger is None:
            self._summary_trigger = TopicSummaryTrigger(
                history_repository=self.history_repository,
                summary_repository=self.summary_repository,
                model_client=self.archivist_model_client,
                max_concurrency=settings.SUMMARY_WORKER_CONCURRENCY,
                transcript_max_chars=settings.SUMMARY_TRANSCRIPT_MAX_CHARS,
            )
        return self._summary_trigger

    @property
    def tutor_turn_use_case(self) -> TutorTurnUseCase:
        if self._tutor_turn_use_case is None:
            self._tutor_turn_use_case = TutorTurnUseCase(
                syllabus_repository=self.syllabus_repository,
                course_repository=self.course_repository,
                history_repository=self.history_repository,
                model_client=self.teacher_model_client,
                summary_trigger=self.summary_trigger,
                turn_locks=self.turn_locks,
                max_history_messages=settings.TUTOR_HISTORY_MAX_MESSAGES,
                max_input_chars=settings.TUTOR_MAX_INPUT_CHARS,
            )
        return self._tutor_turn_use_case

    @property
    def enroll_student_use_case(self) -> EnrollStudentUseCase:
        if self._enroll_student_use_case is None:
            self._enroll_student_use_case = EnrollStudentUseCase(self.syllabus_repository)
        return self._enroll_student_use_case

    async def startup(self) -> None:
        _ = self.turn_locks

    async def shutdown(self) -> None:
        if self._summary_trigger is not None:
            await self._summary_trigger.drain()
