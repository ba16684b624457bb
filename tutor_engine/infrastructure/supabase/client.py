from supabase import AsyncClient, create_async_client

from tutor_engine.core.settings import settings

_async_supabase_client = None


async def get_async_supabase_client() -> AsyncClient:
    """
    Returns the shared Async Supabase Client built from settings.
    """
    global _async_supabase_client
    if _async_supabase_client is None:
        url = settings.SUPABASE_URL
        key = settings.SUPABASE_SERVICE_KEY

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set to reach the tutoring store.")
        _async_supabase_client = await create_async_client(url, key)
    return _async_supabase_client


def reset_async_supabase_client():
    """Drops the shared client so the next call reconnects."""
    global _async_supabase_client
    _async_supabase_client = None
