from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import ISyllabusRepository
from tutor_engine.domain.schemas import StateUpdate, SyllabusState, TopicStatus, resolve_current_topic_id

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationResult:
    syllabus: SyllabusState
    written_topic_ids: List[str] = field(default_factory=list)
    failed_topic_ids: List[str] = field(default_factory=list)
    repaired_topic_id: Optional[str] = None
    course_completed: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed_topic_ids


class SyllabusReconciler:
    """
    Applies a StateUpdate to a student's syllabus.

    Writes are best-effort and never retried: one failed entry is logged and the
    remaining entries are still written. When the update completes a topic without
    activating any other, the topic after the highest-ordered completed one is
    activated. The repair is computed from the intended update and the syllabus
    loaded for the turn, not from what the store actually accepted. Completed
    topics are never reopened by the repair.
    """

    def __init__(self, repository: ISyllabusRepository):
        self.repository = repository

    async def apply(self, syllabus: SyllabusState, update: StateUpdate) -> ReconciliationResult:
        result = ReconciliationResult(syllabus=syllabus)

        for entry in update.topics_updated:
            if syllabus.find_topic(entry.topic_id) is None:
                logger.warning("state_update_unknown_topic", topic_id=entry.topic_id)
            await self._write(result, entry.topic_id, entry.status)

        completed_ids = update.ids_with_status(TopicStatus.COMPLETED)
        activated_ids = update.ids_with_status(TopicStatus.IN_PROGRESS)
        if completed_ids and not activated_ids:
            await self._repair_missing_activation(result, syllabus, completed_ids)

        result.syllabus = self._refresh_current_topic(result.syllabus)
        active = result.syllabus.active_topic_ids()
        if len(active) > 1:
            logger.warning("syllabus_multiple_active_topics", topic_ids=active)

        logger.info(
            "syllabus_reconciled",
            written=len(result.written_topic_ids),
            failed=result.failed_topic_ids,
            repaired_topic_id=result.repaired_topic_id,
            course_completed=result.course_completed,
        )
        return result

    async def _write(self, result: ReconciliationResult, topic_id: str, status: TopicStatus) -> bool:
        syllabus = result.syllabus
        try:
            await self.repository.write_topic_status(
                syllabus.student_id, syllabus.course_id, topic_id, status
            )
        except PersistenceError as exc:
            logger.error(
                "topic_status_write_failed",
                topic_id=topic_id,
                status=status.value,
                error=exc.message,
            )
            result.failed_topic_ids.append(topic_id)
            return False

        result.written_topic_ids.append(topic_id)
        result.syllabus = syllabus.with_status(topic_id, status)
        return True

    async def _repair_missing_activation(
        self, result: ReconciliationResult, syllabus: SyllabusState, completed_ids: List[str]
    ) -> None:
        logger.warning("topic_completed_without_successor_activation", topic_ids=completed_ids)

        known = [t for t in (syllabus.find_topic(topic_id) for topic_id in completed_ids) if t is not None]
        if not known:
            logger.warning("repair_skipped_unknown_topic", topic_ids=completed_ids)
            return
        anchor = max(known, key=lambda t: t.order_index)
        completed_topic_id = anchor.topic_id

        successor = syllabus.topic_at(anchor.order_index + 1)
        if successor is None:
            logger.info("course_completed", last_topic_id=completed_topic_id)
            result.course_completed = True
            return
        if successor.status == TopicStatus.COMPLETED:
            logger.warning("repair_skipped_completed_successor", topic_id=successor.topic_id)
            return

        if await self._write(result, successor.topic_id, TopicStatus.IN_PROGRESS):
            result.repaired_topic_id = successor.topic_id
            logger.info("successor_topic_activated", topic_id=successor.topic_id)

    @staticmethod
    def _refresh_current_topic(syllabus: SyllabusState) -> SyllabusState:
        current = resolve_current_topic_id(syllabus.topics) or syllabus.current_topic_id
        return syllabus.model_copy(update={"current_topic_id": current})
