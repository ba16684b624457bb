from abc import ABC, abstractmethod
from typing import List

from tutor_engine.domain.schemas import ChatMessage


class IChatHistoryRepository(ABC):
    @abstractmethod
    async def get_chat_history(self, student_id: str, topic_id: str) -> List[ChatMessage]:
        pass

    @abstractmethod
    async def append_chat_history(
        self, student_id: str, topic_id: str, messages: List[ChatMessage]
    ) -> None:
        """Appends in order; raises PersistenceError when the write fails."""
