"""
Tutoring turn orchestration.

One student message (or one session initialization) runs inline: load context,
compose the prompt, call the teacher model, split and parse the reply, reconcile
the syllabus, append history. The display text is returned as soon as that chain
completes; an archivist summary, when requested, is launched without waiting.
"""
from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from structlog.contextvars import bound_contextvars

from tutor_engine.application.services.topic_summary_trigger import TopicSummaryTrigger
from tutor_engine.domain.exceptions import (
    ModelCallError,
    PersistenceError,
    StateUpdateError,
    SyllabusNotFoundError,
)
from tutor_engine.domain.interfaces.model_client import IModelClient
from tutor_engine.domain.repositories import (
    IChatHistoryRepository,
    ICourseRepository,
    ISyllabusRepository,
)
from tutor_engine.domain.schemas import ChatMessage, PersonaConfig, StateUpdate, SyllabusState
from tutor_engine.domain.tutoring import (
    ReconciliationResult,
    SyllabusReconciler,
    compose_teacher_prompt,
    parse_state_update,
    split_response,
    synthesize_fallback_update,
)
from tutor_engine.infrastructure.concurrency.student_turn_lock_manager import StudentTurnLockManager

logger = structlog.get_logger(__name__)

MODEL_UNAVAILABLE_MESSAGES = {
    "es": "Lo siento, no pude preparar una respuesta en este momento. Inténtalo de nuevo en unos instantes.",
    "en": "Sorry, I could not prepare an answer right now. Please try again in a moment.",
}


@dataclass(frozen=True)
class HandleStudentMessageCommand:
    student_id: str
    course_id: str
    message: str


@dataclass(frozen=True)
class InitializeSessionCommand:
    student_id: str
    course_id: str


@dataclass
class TutorTurnResult:
    display_text: str
    topic_id: str
    ok: bool = True
    failure_reason: Optional[str] = None
    update: Optional[StateUpdate] = None
    used_fallback: bool = False
    reconciliation: Optional[ReconciliationResult] = None
    history_saved: bool = False
    summary_scheduled: bool = False


class TutorTurnUseCase:
    def __init__(
        self,
        syllabus_repository: ISyllabusRepository,
        course_repository: ICourseRepository,
        history_repository: IChatHistoryRepository,
        model_client: IModelClient,
        summary_trigger: TopicSummaryTrigger,
        turn_locks: Optional[StudentTurnLockManager] = None,
        max_history_messages: Optional[int] = 20,
        max_input_chars: int = 5000,
    ):
        self.syllabus_repository = syllabus_repository
        self.course_repository = course_repository
        self.history_repository = history_repository
        self.model_client = model_client
        self.summary_trigger = summary_trigger
        self.turn_locks = turn_locks
        self.max_history_messages = max_history_messages
        self.max_input_chars = max_input_chars
        self.reconciler = SyllabusReconciler(syllabus_repository)

    async def handle_message(self, command: HandleStudentMessageCommand) -> TutorTurnResult:
        message = (command.message or "").strip()
        if not message:
            raise ValueError("Student message must not be empty")
        if len(message) > self.max_input_chars:
            raise ValueError(f"Student message exceeds {self.max_input_chars} characters")
        return await self._run_turn(command.student_id, command.course_id, user_input=message)

    async def initialize_session(self, command: InitializeSessionCommand) -> TutorTurnResult:
        return await self._run_turn(command.student_id, command.course_id, user_input=None)

    async def _run_turn(self, student_id: str, course_id: str, user_input: Optional[str]) -> TutorTurnResult:
        mode = "initialize" if user_input is None else "message"
        slot = self.turn_locks.turn_slot(student_id, course_id) if self.turn_locks else nullcontext()

        with bound_contextvars(student_id=student_id, course_id=course_id, turn_mode=mode):
            async with slot:
                syllabus = await self.syllabus_repository.get_syllabus(student_id, course_id)
                if syllabus is None:
                    logger.warning("syllabus_not_found")
                    raise SyllabusNotFoundError(student_id, course_id)

                topic_id = syllabus.current_topic_id
                persona = await self._load_persona(course_id)
                history = await self._load_history(student_id, topic_id)
                logger.info("turn_context_loaded", topic_id=topic_id, history_messages=len(history))

                prompt = compose_teacher_prompt(
                    persona,
                    syllabus,
                    history,
                    user_input,
                    max_history_messages=self.max_history_messages,
                )

                try:
                    raw_reply = await self.model_client.generate(prompt)
                except ModelCallError as exc:
                    logger.error("teacher_turn_aborted", topic_id=topic_id, error=str(exc))
                    return TutorTurnResult(
                        display_text=self._apology(persona),
                        topic_id=topic_id,
                        ok=False,
                        failure_reason="model_call_failed",
                    )

                split = split_response(raw_reply)
                update, used_fallback = self._resolve_update(split.delta_text, syllabus)
                reconciliation = await self.reconciler.apply(syllabus, update)

                new_messages = self._turn_messages(user_input, split.display_text)
                history_saved = await self._append_history(student_id, topic_id, new_messages)

                summary_scheduled = False
                if update.trigger_summary_generation:
                    summary_scheduled = self.summary_trigger.launch(student_id, topic_id)

                logger.info(
                    "turn_completed",
                    topic_id=topic_id,
                    used_fallback=used_fallback,
                    reconciliation_ok=reconciliation.ok,
                    summary_scheduled=summary_scheduled,
                )
                return TutorTurnResult(
                    display_text=split.display_text,
                    topic_id=topic_id,
                    update=update,
                    used_fallback=used_fallback,
                    reconciliation=reconciliation,
                    history_saved=history_saved,
                    summary_scheduled=summary_scheduled,
                )

    @staticmethod
    def _resolve_update(delta_text: str, syllabus: SyllabusState) -> tuple[StateUpdate, bool]:
        try:
            return parse_state_update(delta_text), False
        except StateUpdateError as exc:
            logger.warning(
                "state_update_rejected",
                error_type=type(exc).__name__,
                error=exc.message,
                raw_delta=(delta_text or "")[:500],
            )
            fallback = synthesize_fallback_update(syllabus)
            logger.info("fallback_state_update_used", current_topic_id=fallback.current_topic_id)
            return fallback, True

    async def _load_persona(self, course_id: str) -> PersonaConfig:
        try:
            persona = await self.course_repository.get_persona_config(course_id)
        except PersistenceError as exc:
            logger.warning("persona_load_failed", error=exc.message)
            persona = None
        if persona is None:
            logger.info("persona_default_used")
            return PersonaConfig()
        return persona

    async def _load_history(self, student_id: str, topic_id: str) -> List[ChatMessage]:
        try:
            return await self.history_repository.get_chat_history(student_id, topic_id)
        except PersistenceError as exc:
            logger.warning("chat_history_load_failed", topic_id=topic_id, error=exc.message)
            return []

    async def _append_history(self, student_id: str, topic_id: str, messages: List[ChatMessage]) -> bool:
        try:
            await self.history_repository.append_chat_history(student_id, topic_id, messages)
        except PersistenceError as exc:
            logger.error("chat_history_append_failed", topic_id=topic_id, error=exc.message)
            return False
        return True

    @staticmethod
    def _turn_messages(user_input: Optional[str], display_text: str) -> List[ChatMessage]:
        now = datetime.now(timezone.utc).isoformat()
        messages: List[ChatMessage] = []
        if user_input is not None:
            messages.append(ChatMessage(role="user", content=user_input, timestamp=now))
        messages.append(ChatMessage(role="assistant", content=display_text, timestamp=now))
        return messages

    @staticmethod
    def _apology(persona: PersonaConfig) -> str:
        language = (persona.language or "es").strip().lower()[:2]
        return MODEL_UNAVAILABLE_MESSAGES.get(language, MODEL_UNAVAILABLE_MESSAGES["es"])
