from datetime import datetime, timezone
from typing import Any, Dict, List

import structlog
from pydantic import ValidationError

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import IChatHistoryRepository
from tutor_engine.domain.schemas import ChatMessage
from tutor_engine.infrastructure.supabase.client import get_async_supabase_client

logger = structlog.get_logger(__name__)

SESSIONS_TABLE = "chat_sessions"


class SupabaseChatHistoryRepository(IChatHistoryRepository):
    """
    Chat history lives as a jsonb list in chat_sessions.context_data, one row per
    (student, topic). Appends read the row and write the concatenated list back.
    """

    def __init__(self):
        self._client = None

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def _fetch_context(self, student_id: str, topic_id: str) -> List[Dict[str, Any]]:
        client = await self.get_client()
        res = (
            await client.table(SESSIONS_TABLE)
            .select("context_data")
            .eq("student_id", student_id)
            .eq("topic_id", topic_id)
            .maybe_single()
            .execute()
        )
        row = getattr(res, "data", None) if res is not None else None
        if not row:
            return []
        data = row.get("context_data") or []
        return data if isinstance(data, list) else []

    async def get_chat_history(self, student_id: str, topic_id: str) -> List[ChatMessage]:
        try:
            raw_messages = await self._fetch_context(student_id, topic_id)
        except Exception as exc:
            raise PersistenceError(
                f"Failed to load chat history: {exc}", operation="get_chat_history", cause=exc
            ) from exc

        messages: List[ChatMessage] = []
        for item in raw_messages:
            try:
                messages.append(ChatMessage.model_validate(item))
            except ValidationError:
                logger.warning("chat_history_entry_skipped", topic_id=topic_id)
        return messages

    async def append_chat_history(
        self, student_id: str, topic_id: str, messages: List[ChatMessage]
    ) -> None:
        if not messages:
            return
        now = datetime.now(timezone.utc).isoformat()
        stamped = [
            m.model_dump() if m.timestamp else {**m.model_dump(), "timestamp": now}
            for m in messages
        ]
        try:
            existing = await self._fetch_context(student_id, topic_id)
            client = await self.get_client()
            await client.table(SESSIONS_TABLE).upsert(
                {
                    "student_id": student_id,
                    "topic_id": topic_id,
                    "context_data": existing + stamped,
                    "updated_at": now,
                },
                on_conflict="student_id,topic_id",
            ).execute()
        except Exception as exc:
            raise PersistenceError(
                f"Failed to append chat history: {exc}", operation="append_chat_history", cause=exc
            ) from exc
