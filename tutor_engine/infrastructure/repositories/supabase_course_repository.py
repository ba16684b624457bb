from typing import Optional

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import ICourseRepository
from tutor_engine.domain.schemas import PersonaConfig
from tutor_engine.infrastructure.supabase.client import get_async_supabase_client


class SupabaseCourseRepository(ICourseRepository):
    def __init__(self):
        self._client = None

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def get_persona_config(self, course_id: str) -> Optional[PersonaConfig]:
        try:
            client = await self.get_client()
            res = (
                await client.table("persona_configs")
                .select("tone, explanation_style, language, difficulty_level")
                .eq("course_id", course_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(
                f"Failed to load persona config: {exc}", operation="get_persona_config", cause=exc
            ) from exc

        row = getattr(res, "data", None) if res is not None else None
        if not row:
            return None
        return PersonaConfig(**{k: v for k, v in row.items() if v is not None})
