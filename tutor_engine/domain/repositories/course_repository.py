from abc import ABC, abstractmethod
from typing import Optional

from tutor_engine.domain.schemas import PersonaConfig


class ICourseRepository(ABC):
    @abstractmethod
    async def get_persona_config(self, course_id: str) -> Optional[PersonaConfig]:
        pass
