from __future__ import annotations

from typing import Any, Optional, cast

from langchain_core.language_models.chat_models import BaseChatModel

from tutor_engine.core.ai_models import AIModelConfig


def _default_temperature_for_capability(capability: str) -> float:
    cap = (capability or "CHAT").strip().upper()
    if cap == "SUMMARIZATION":
        return AIModelConfig.DEFAULT_TEMPERATURE_SUMMARIZATION
    return AIModelConfig.DEFAULT_TEMPERATURE_CHAT


def _build_groq(*, capability: str, temperature: float) -> BaseChatModel | None:
    if not AIModelConfig.GROQ_API_KEY:
        return None
    try:
        from langchain_groq import ChatGroq
    except ImportError:
        return None

    model_name = AIModelConfig.get_groq_model_for_capability(capability)
    return ChatGroq(
        model=model_name,
        temperature=temperature,
        api_key=cast(Any, AIModelConfig.GROQ_API_KEY),
    )


def _build_gemini(*, temperature: float) -> BaseChatModel | None:
    if not AIModelConfig.is_gemini_available():
        return None
    try:
        from langchain_google_genai import ChatGoogleGenerativeAI
    except ImportError:
        return None

    return ChatGoogleGenerativeAI(
        model=AIModelConfig.GEMINI_MODEL_NAME,
        temperature=temperature,
        google_api_key=AIModelConfig.GEMINI_API_KEY,
    )


def get_llm(
    temperature: Optional[float] = None,
    capability: str = "CHAT",
    prefer_provider: str = "auto",
) -> BaseChatModel:
    """
    Returns the configured chat model for a capability.
    CHAT (teacher turns) prefers Gemini; SUMMARIZATION (archivist) prefers Groq.
    """
    cap = (capability or "CHAT").strip().upper()
    temp = _default_temperature_for_capability(cap) if temperature is None else float(temperature)

    preference = (prefer_provider or "auto").strip().lower()
    if preference not in {"auto", "groq", "gemini"}:
        preference = "auto"

    default_order_by_capability = {
        "CHAT": ["gemini", "groq"],
        "SUMMARIZATION": ["groq", "gemini"],
    }
    if preference == "auto":
        provider_order = default_order_by_capability.get(cap, ["gemini", "groq"])
    else:
        provider_order = [preference, "gemini" if preference == "groq" else "groq"]

    for provider in provider_order:
        if provider == "groq":
            model = _build_groq(capability=cap, temperature=temp)
        else:
            model = _build_gemini(temperature=temp)
        if model is not None:
            return model

    raise ValueError("No valid AI Provider found. Set GEMINI_API_KEY or GROQ_API_KEY.")
