from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


EngagementLevel = Literal["High", "Medium", "Low"]


class PedagogicalNotes(BaseModel):
    student_doubts: List[str] = Field(default_factory=list)
    effective_analogies: str = ""
    engagement_level: EngagementLevel = "Medium"

    model_config = ConfigDict(extra="ignore")

    @field_validator("student_doubts", mode="before")
    @classmethod
    def _coerce_doubts(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    @field_validator("engagement_level", mode="before")
    @classmethod
    def _normalize_engagement(cls, value: Any) -> str:
        text = str(value or "Medium").strip().capitalize()
        return text if text in {"High", "Medium", "Low"} else "Medium"


class ArchivistSummary(BaseModel):
    """JSON-only reply of the archivist model."""

    topic_completion_summary: str = ""
    pedagogical_notes: PedagogicalNotes = Field(default_factory=PedagogicalNotes)
    next_session_hook: str = ""

    model_config = ConfigDict(extra="ignore")


class TopicSummary(BaseModel):
    """Write-once pedagogical record persisted when a topic is completed."""

    student_id: str
    topic_id: str
    completion_summary: str
    student_doubts: List[str] = Field(default_factory=list)
    effective_analogies: str = ""
    engagement_level: EngagementLevel = "Medium"
    next_session_hook: str = ""

    @classmethod
    def from_archivist(cls, student_id: str, topic_id: str, payload: ArchivistSummary) -> "TopicSummary":
        notes = payload.pedagogical_notes
        return cls(
            student_id=student_id,
            topic_id=topic_id,
            completion_summary=payload.topic_completion_summary,
            student_doubts=list(notes.student_doubts),
            effective_analogies=notes.effective_analogies,
            engagement_level=notes.engagement_level,
            next_session_hook=payload.next_session_hook,
        )
