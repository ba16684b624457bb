"""Provider-agnostic contract for the language model black box."""

from __future__ import annotations

from typing import Protocol


class IModelClient(Protocol):
    async def generate(self, prompt: str) -> str:
        """Returns the raw reply text; raises ModelCallError on failure or empty output."""
        ...
