import asyncio
from typing import Dict, List, Optional, Set, Tuple

from tutor_engine.domain.exceptions import PersistenceError
from tutor_engine.domain.repositories import ISyllabusRepository
from tutor_engine.domain.schemas import StateUpdate, SyllabusState, TopicState, TopicStatus
from tutor_engine.domain.tutoring import SyllabusReconciler, synthesize_fallback_update


class _InMemorySyllabusRepository(ISyllabusRepository):
    def __init__(self, syllabus: SyllabusState, failing_topic_ids: Optional[Set[str]] = None):
        self.statuses: Dict[str, TopicStatus] = {t.topic_id: t.status for t in syllabus.topics}
        self.syllabus = syllabus
        self.failing_topic_ids = failing_topic_ids or set()
        self.writes: List[Tuple[str, TopicStatus]] = []

    async def get_syllabus(self, student_id: str, course_id: str) -> Optional[SyllabusState]:
        return self.syllabus

    async def write_topic_status(self, student_id: str, course_id: str, topic_id: str, status: TopicStatus) -> None:
        if topic_id in self.failing_topic_ids:
            raise PersistenceError("write rejected", operation="write_topic_status")
        self.writes.append((topic_id, status))
        if topic_id in self.statuses:
            self.statuses[topic_id] = status

    async def initialize_syllabus(self, student_id: str, course_id: str) -> SyllabusState:
        return self.syllabus


def _syllabus(*statuses: TopicStatus) -> SyllabusState:
    topics = [
        TopicState(topic_id=f"sub{i + 1}", status=status, order_index=i)
        for i, status in enumerate(statuses)
    ]
    return SyllabusState.from_topics("student-1", "course-1", topics)


def _update(current: str, entries: List[Tuple[str, str]], trigger: bool = True) -> StateUpdate:
    return StateUpdate.model_validate(
        {
            "trigger_summary_generation": trigger,
            "current_topic_id": current,
            "topics_updated": [{"topic_id": t, "status": s} for t, s in entries],
        }
    )


P, I, C = TopicStatus.PENDING, TopicStatus.IN_PROGRESS, TopicStatus.COMPLETED


def test_completion_without_activation_activates_successor() -> None:
    syllabus = _syllabus(I, P, P)
    repo = _InMemorySyllabusRepository(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, _update("sub2", [("sub1", "completed")])))

    assert repo.statuses == {"sub1": C, "sub2": I, "sub3": P}
    assert result.repaired_topic_id == "sub2"
    assert result.syllabus.current_topic_id == "sub2"
    assert result.ok is True


def test_explicit_activation_needs_no_repair() -> None:
    syllabus = _syllabus(I, P, P)
    repo = _InMemorySyllabusRepository(syllabus)
    update = _update("sub2", [("sub1", "completed"), ("sub2", "in_progress")])

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, update))

    assert repo.statuses == {"sub1": C, "sub2": I, "sub3": P}
    assert result.repaired_topic_id is None
    assert repo.writes == [("sub1", C), ("sub2", I)]


def test_last_topic_completion_marks_course_complete() -> None:
    syllabus = _syllabus(C, C, I)
    repo = _InMemorySyllabusRepository(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, _update("sub3", [("sub3", "completed")])))

    assert repo.statuses == {"sub1": C, "sub2": C, "sub3": C}
    assert result.course_completed is True
    assert result.syllabus.active_topic_ids() == []
    assert result.syllabus.current_topic_id == "sub3"


def test_fallback_update_rewrites_current_topic_only() -> None:
    syllabus = _syllabus(C, I, P)
    repo = _InMemorySyllabusRepository(syllabus)
    fallback = synthesize_fallback_update(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, fallback))

    assert fallback.trigger_summary_generation is False
    assert repo.writes == [("sub2", I)]
    assert repo.statuses == {"sub1": C, "sub2": I, "sub3": P}
    assert result.syllabus == syllabus


def test_reapplying_same_update_is_idempotent() -> None:
    syllabus = _syllabus(I, P, P)
    repo = _InMemorySyllabusRepository(syllabus)
    update = _update("sub2", [("sub1", "completed")])
    reconciler = SyllabusReconciler(repo)

    first = asyncio.run(reconciler.apply(syllabus, update))
    second = asyncio.run(reconciler.apply(first.syllabus, update))

    assert repo.statuses == {"sub1": C, "sub2": I, "sub3": P}
    assert second.syllabus.topics == first.syllabus.topics


def test_failed_write_does_not_stop_remaining_entries() -> None:
    syllabus = _syllabus(I, P, P)
    repo = _InMemorySyllabusRepository(syllabus, failing_topic_ids={"sub1"})
    update = _update("sub2", [("sub1", "completed"), ("sub2", "in_progress")])

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, update))

    assert result.ok is False
    assert result.failed_topic_ids == ["sub1"]
    assert repo.statuses == {"sub1": I, "sub2": I, "sub3": P}


def test_repair_skipped_when_completed_topic_is_unknown() -> None:
    syllabus = _syllabus(I, P)
    repo = _InMemorySyllabusRepository(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, _update("x", [("ghost", "completed")])))

    assert repo.writes == [("ghost", C)]
    assert result.repaired_topic_id is None
    assert result.course_completed is False
    assert repo.statuses == {"sub1": I, "sub2": P}


def test_completed_course_is_not_reopened_by_fallback() -> None:
    syllabus = _syllabus(C, C, C)
    repo = _InMemorySyllabusRepository(syllabus)
    fallback = synthesize_fallback_update(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, fallback))

    assert syllabus.is_completed is True
    assert syllabus.current_topic_id == "sub3"
    assert fallback.topics_updated == []
    assert repo.writes == []
    assert repo.statuses == {"sub1": C, "sub2": C, "sub3": C}
    assert result.syllabus.current_topic_id == "sub3"


def test_current_topic_falls_back_to_first_pending_topic() -> None:
    syllabus = _syllabus(C, P, P)

    assert syllabus.current_topic_id == "sub2"
    assert synthesize_fallback_update(syllabus).topics_updated[0].topic_id == "sub2"


def test_repair_anchors_on_highest_completed_topic() -> None:
    syllabus = _syllabus(I, P, P, P)
    repo = _InMemorySyllabusRepository(syllabus)
    update = _update("sub3", [("sub1", "completed"), ("sub2", "completed")])

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, update))

    assert result.repaired_topic_id == "sub3"
    assert repo.statuses == {"sub1": C, "sub2": C, "sub3": I, "sub4": P}
    assert result.syllabus.current_topic_id == "sub3"


def test_repair_never_reopens_completed_successor() -> None:
    syllabus = _syllabus(I, C, P)
    repo = _InMemorySyllabusRepository(syllabus)

    result = asyncio.run(SyllabusReconciler(repo).apply(syllabus, _update("sub2", [("sub1", "completed")])))

    assert result.repaired_topic_id is None
    assert repo.writes == [("sub1", C)]
    assert result.syllabus.current_topic_id == "sub3"
