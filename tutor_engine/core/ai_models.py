"""
Centralized AI model configurations for the tutoring engine.
Teacher turns and archivist summaries both resolve their models here.
"""

from tutor_engine.core.settings import settings


class AIModelConfig:
    # Gemini Configuration
    GEMINI_API_KEY = settings.GEMINI_API_KEY
    GEMINI_MODEL_NAME = "gemini-2.0-flash"

    # Groq Configuration
    GROQ_API_KEY = settings.GROQ_API_KEY
    GROQ_MODEL_LIGHTWEIGHT = "openai/gpt-oss-20b"
    GROQ_MODEL_HEAVY = "openai/gpt-oss-120b"
    GROQ_MODEL_CHAT = GROQ_MODEL_HEAVY
    GROQ_MODEL_SUMMARIZATION = GROQ_MODEL_LIGHTWEIGHT

    # Default Temperatures
    DEFAULT_TEMPERATURE_CHAT = 0.7
    DEFAULT_TEMPERATURE_SUMMARIZATION = 0.3

    _GROQ_MODEL_BY_CAPABILITY = {
        "CHAT": GROQ_MODEL_CHAT,
        "SUMMARIZATION": GROQ_MODEL_SUMMARIZATION,
    }

    @classmethod
    def is_gemini_available(cls) -> bool:
        return bool(cls.GEMINI_API_KEY)

    @classmethod
    def get_groq_model_for_capability(cls, capability: str) -> str:
        normalized = (capability or "CHAT").strip().upper()
        return cls._GROQ_MODEL_BY_CAPABILITY.get(normalized, cls.GROQ_MODEL_CHAT)
