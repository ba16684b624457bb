from tutor_engine.domain.schemas.summary import ArchivistSummary, PedagogicalNotes, TopicSummary
from tutor_engine.domain.schemas.syllabus import (
    ChatMessage,
    PersonaConfig,
    StateUpdate,
    SyllabusState,
    TopicState,
    TopicStatus,
    TopicStatusChange,
    resolve_current_topic_id,
)

__all__ = [
    "ArchivistSummary",
    "ChatMessage",
    "PedagogicalNotes",
    "PersonaConfig",
    "StateUpdate",
    "SyllabusState",
    "TopicState",
    "TopicStatus",
    "TopicStatusChange",
    "TopicSummary",
    "resolve_current_topic_id",
]
