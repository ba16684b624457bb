from __future__ import annotations

from typing import Any

import structlog
from langchain_core.language_models.chat_models import BaseChatModel

from tutor_engine.domain.exceptions import ModelCallError

logger = structlog.get_logger(__name__)


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(content or "")


class LangChainModelClient:
    """Adapts a LangChain chat model to the single-prompt model client contract."""

    def __init__(self, llm: BaseChatModel, span_name: str = "llm_inference"):
        self.llm = llm
        self.span_name = span_name

    async def generate(self, prompt: str) -> str:
        try:
            response = await self.llm.ainvoke([{"role": "user", "content": prompt}])
        except Exception as exc:
            logger.error("model_call_failed", span=self.span_name, error=str(exc))
            raise ModelCallError(f"Model call failed: {exc}") from exc

        text = _content_to_text(getattr(response, "content", response))
        if not text.strip():
            logger.error("model_call_empty_reply", span=self.span_name)
            raise ModelCallError("Empty response from model")

        logger.info("model_call_completed", span=self.span_name, chars=len(text))
        return text
