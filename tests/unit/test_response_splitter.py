from tutor_engine.domain.schemas import StateUpdate, TopicStatus
from tutor_engine.domain.tutoring import parse_state_update, split_response


def test_split_returns_display_text_and_delta() -> None:
    raw = (
        "Muy bien! Pasemos al siguiente tema.\n###STATE_UPDATE###\n"
        '{"trigger_summary_generation": true, "current_topic_id": "sub2", '
        '"topics_updated": [{"topic_id": "sub1", "status": "completed"}]}'
    )

    split = split_response(raw)
    update = parse_state_update(split.delta_text)

    assert split.display_text == "Muy bien! Pasemos al siguiente tema."
    assert split.has_delta is True
    assert update.trigger_summary_generation is True
    assert update.topics_updated[0].status == TopicStatus.COMPLETED


def test_split_without_delimiter_keeps_whole_reply_as_display() -> None:
    split = split_response("  Solo texto para el estudiante.  ")

    assert split.display_text == "Solo texto para el estudiante."
    assert split.delta_text == ""
    assert split.has_delta is False


def test_split_uses_first_delimiter_occurrence() -> None:
    split = split_response("hola###STATE_UPDATE###{}###STATE_UPDATE###{}")

    assert split.display_text == "hola"
    assert split.delta_text == "{}###STATE_UPDATE###{}"


def test_split_strips_code_fences_around_delta() -> None:
    update = StateUpdate(trigger_summary_generation=False, current_topic_id="sub1", topics_updated=[])
    raw = "Explicacion.\n```json\n###STATE_UPDATE###\n" + update.to_minified_json() + "\n```"

    split = split_response(raw)

    assert split.display_text == "Explicacion."
    assert parse_state_update(split.delta_text) == update


def test_split_keeps_balanced_code_block_in_display() -> None:
    raw = "Ejemplo:\n```python\nx = 1\n```\n###STATE_UPDATE###\n{}"

    split = split_response(raw)

    assert split.display_text.endswith("```")
    assert "x = 1" in split.display_text
