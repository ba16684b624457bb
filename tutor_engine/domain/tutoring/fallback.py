from tutor_engine.domain.schemas import StateUpdate, SyllabusState, TopicStatus, TopicStatusChange


def synthesize_fallback_update(syllabus: SyllabusState) -> StateUpdate:
    """
    Safe no-op update used when the model delta cannot be parsed or validated:
    the current topic is rewritten as in_progress and no summary is requested.
    A completed current topic is left untouched.
    """
    current_topic_id = syllabus.current_topic_id
    current = syllabus.find_topic(current_topic_id) if current_topic_id else None
    topics_updated = (
        [TopicStatusChange(topic_id=current_topic_id, status=TopicStatus.IN_PROGRESS)]
        if current is not None and current.status != TopicStatus.COMPLETED
        else []
    )
    return StateUpdate(
        trigger_summary_generation=False,
        current_topic_id=current_topic_id,
        topics_updated=topics_updated,
    )
