from abc import ABC, abstractmethod

from tutor_engine.domain.schemas import TopicSummary


class ITopicSummaryRepository(ABC):
    @abstractmethod
    async def save_summary(self, summary: TopicSummary) -> None:
        pass
