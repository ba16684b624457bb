from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import ITopicSummaryRepository
from tutor_engine.domain.schemas import TopicSummary
from tutor_engine.infrastructure.supabase.client import get_async_supabase_client


class SupabaseTopicSummaryRepository(ITopicSummaryRepository):
    def __init__(self):
        self._client = None

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def save_summary(self, summary: TopicSummary) -> None:
        row = {
            "student_id": summary.student_id,
            "topic_id": summary.topic_id,
            "topic_completion_summary": summary.completion_summary or "",
            "student_doubts": list(summary.student_doubts or []),
            "effective_analogies": summary.effective_analogies or "",
            "engagement_level": summary.engagement_level or "Medium",
            "next_session_hook": summary.next_session_hook or "",
        }
        try:
            client = await self.get_client()
            await client.table("topic_summaries").insert(row).execute()
        except Exception as exc:
            raise PersistenceError(
                f"Failed to save topic summary: {exc}", operation="save_summary", cause=exc
            ) from exc
