from typing import Optional

import structlog

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import ISyllabusRepository
from tutor_engine.domain.schemas import SyllabusState, TopicState, TopicStatus
from tutor_engine.infrastructure.supabase.client import get_async_supabase_client

logger = structlog.get_logger(__name__)

SYLLABUS_TABLE = "student_syllabus"
TOPICS_TABLE = "topics"


class SupabaseSyllabusRepository(ISyllabusRepository):
    def __init__(self):
        self._client = None

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def get_syllabus(self, student_id: str, course_id: str) -> Optional[SyllabusState]:
        try:
            client = await self.get_client()
            res = (
                await client.table(SYLLABUS_TABLE)
                .select("topic_id, status, order_index")
                .eq("student_id", student_id)
                .eq("course_id", course_id)
                .order("order_index")
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to load syllabus: {exc}", operation="get_syllabus", cause=exc) from exc

        rows = res.data or []
        if not rows:
            return None

        topics = [
            TopicState(
                topic_id=str(row["topic_id"]),
                status=TopicStatus(row.get("status") or TopicStatus.PENDING.value),
                order_index=int(row.get("order_index") or 0),
            )
            for row in rows
        ]
        return SyllabusState.from_topics(student_id, course_id, topics)

    async def write_topic_status(
        self, student_id: str, course_id: str, topic_id: str, status: TopicStatus
    ) -> None:
        try:
            client = await self.get_client()
            await (
                client.table(SYLLABUS_TABLE)
                .update({"status": TopicStatus(status).value})
                .eq("student_id", student_id)
                .eq("course_id", course_id)
                .eq("topic_id", topic_id)
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(
                f"Failed to write status for topic {topic_id}: {exc}",
                operation="write_topic_status",
                cause=exc,
            ) from exc

    async def initialize_syllabus(self, student_id: str, course_id: str) -> SyllabusState:
        try:
            client = await self.get_client()
            res = (
                await client.table(TOPICS_TABLE)
                .select("id")
                .eq("course_id", course_id)
                .order("created_at")
                .execute()
            )
            topic_ids = [str(row["id"]) for row in (res.data or [])]
            topics = [
                TopicState(
                    topic_id=topic_id,
                    status=TopicStatus.IN_PROGRESS if index == 0 else TopicStatus.PENDING,
                    order_index=index,
                )
                for index, topic_id in enumerate(topic_ids)
            ]
            if topics:
                await client.table(SYLLABUS_TABLE).insert(
                    [
                        {
                            "student_id": student_id,
                            "course_id": course_id,
                            "topic_id": t.topic_id,
                            "status": t.status.value,
                            "order_index": t.order_index,
                        }
                        for t in topics
                    ]
                ).execute()
        except Exception as exc:
            raise PersistenceError(
                f"Failed to initialize syllabus: {exc}", operation="initialize_syllabus", cause=exc
            ) from exc

        if not topics:
            logger.warning("course_has_no_topics", course_id=course_id)
        return SyllabusState.from_topics(student_id, course_id, topics)
