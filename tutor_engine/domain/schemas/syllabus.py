"""
Domain schemas for syllabus progress and tutoring turns.

A SyllabusState is the per-(student, course) progress record; a StateUpdate is the
ephemeral progress instruction a model reply carries after the delimiter.
"""
import json
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class TopicStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TopicState(BaseModel):
    topic_id: str
    status: TopicStatus
    order_index: int = Field(ge=0)


def resolve_current_topic_id(topics: List[TopicState]) -> str:
    """
    First in_progress topic, else first pending topic. A fully completed syllabus
    resolves to its last topic so a finished course is never reopened.
    """
    ordered = sorted(topics, key=lambda t: t.order_index)
    for status in (TopicStatus.IN_PROGRESS, TopicStatus.PENDING):
        match = next((t for t in ordered if t.status == status), None)
        if match is not None:
            return match.topic_id
    return ordered[-1].topic_id if ordered else ""


class SyllabusState(BaseModel):
    """
    Ordered curriculum progress for one (student, course) pair.
    current_topic_id names the topic the student is actively working on.
    """

    student_id: str
    course_id: str
    topics: List[TopicState] = Field(default_factory=list)
    current_topic_id: str = ""

    @classmethod
    def from_topics(cls, student_id: str, course_id: str, topics: List[TopicState]) -> "SyllabusState":
        ordered = sorted(topics, key=lambda t: t.order_index)
        return cls(
            student_id=student_id,
            course_id=course_id,
            topics=ordered,
            current_topic_id=resolve_current_topic_id(ordered),
        )

    @property
    def is_completed(self) -> bool:
        return bool(self.topics) and all(t.status == TopicStatus.COMPLETED for t in self.topics)

    def ordered_topics(self) -> List[TopicState]:
        return sorted(self.topics, key=lambda t: t.order_index)

    def find_topic(self, topic_id: str) -> Optional[TopicState]:
        return next((t for t in self.topics if t.topic_id == topic_id), None)

    def topic_at(self, order_index: int) -> Optional[TopicState]:
        return next((t for t in self.topics if t.order_index == order_index), None)

    def active_topic_ids(self) -> List[str]:
        return [t.topic_id for t in self.ordered_topics() if t.status == TopicStatus.IN_PROGRESS]

    def with_status(self, topic_id: str, status: TopicStatus) -> "SyllabusState":
        """Returns a copy with one topic's status replaced; unknown ids leave it unchanged."""
        topics = [
            t.model_copy(update={"status": status}) if t.topic_id == topic_id else t
            for t in self.topics
        ]
        return self.model_copy(update={"topics": topics})

    def to_prompt_payload(self) -> Dict[str, Any]:
        return {
            "course_id": self.course_id,
            "current_topic_id": self.current_topic_id,
            "topics": [
                {"topic_id": t.topic_id, "status": t.status.value, "order_index": t.order_index}
                for t in self.ordered_topics()
            ],
        }


class TopicStatusChange(BaseModel):
    topic_id: StrictStr
    status: TopicStatus

    model_config = ConfigDict(extra="ignore")


class StateUpdate(BaseModel):
    """
    Progress instruction emitted by the model after the ###STATE_UPDATE### delimiter.
    Structural only: topic ids are not checked against any syllabus here.
    """

    trigger_summary_generation: StrictBool
    current_topic_id: StrictStr
    topics_updated: List[TopicStatusChange]

    model_config = ConfigDict(extra="ignore")

    def ids_with_status(self, status: TopicStatus) -> List[str]:
        return [entry.topic_id for entry in self.topics_updated if entry.status == status]

    def to_minified_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False)


class PersonaConfig(BaseModel):
    """Teaching persona configured per course; read-only input to prompt composition."""

    tone: str = "profesional"
    explanation_style: str = "detallado"
    language: str = "es"
    difficulty_level: str = "intermedio"

    model_config = ConfigDict(extra="ignore")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
