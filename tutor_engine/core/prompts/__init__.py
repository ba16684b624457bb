from tutor_engine.core.prompts.archivist import ARCHIVIST_PROMPT_TEMPLATE
from tutor_engine.core.prompts.teacher import (
    FIRST_INTERACTION_SENTINEL,
    STATE_UPDATE_DELIMITER,
    TEACHER_PROMPT_TEMPLATE,
)

__all__ = [
    "ARCHIVIST_PROMPT_TEMPLATE",
    "FIRST_INTERACTION_SENTINEL",
    "STATE_UPDATE_DELIMITER",
    "TEACHER_PROMPT_TEMPLATE",
]
