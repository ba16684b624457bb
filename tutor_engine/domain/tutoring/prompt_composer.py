"""
Prompt composition for teacher turns and archivist summaries.

Pure functions: identical inputs always render the identical prompt string.
"""
import json
import re
from typing import Any, Dict, Optional, Sequence

from tutor_engine.core.prompts import (
    ARCHIVIST_PROMPT_TEMPLATE,
    FIRST_INTERACTION_SENTINEL,
    STATE_UPDATE_DELIMITER,
    TEACHER_PROMPT_TEMPLATE,
)
from tutor_engine.domain.schemas import ChatMessage, PersonaConfig, SyllabusState

_PLACEHOLDER = re.compile(r"\{\{([A-Z_]+)\}\}")
_EMPTY_HISTORY = "(no previous messages)"
_TRUNCATION_MARKER = "[... earlier transcript truncated ...]"


def fill_prompt(template: str, replacements: Dict[str, str]) -> str:
    """
    Single-pass placeholder substitution. Inserted values are never rescanned,
    so student text containing ``{{...}}`` stays literal.
    """
    return _PLACEHOLDER.sub(lambda m: replacements.get(m.group(1), m.group(0)), template)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)


def render_history(history: Sequence[ChatMessage], max_messages: Optional[int] = None) -> str:
    messages = [m for m in history if (m.content or "").strip()]
    if max_messages is not None:
        messages = messages[-max_messages:] if max_messages > 0 else []
    return "\n\n".join(f"{m.role.upper()}: {m.content.strip()}" for m in messages)


def compose_teacher_prompt(
    persona: PersonaConfig,
    syllabus: SyllabusState,
    history: Sequence[ChatMessage],
    user_input: Optional[str],
    max_history_messages: Optional[int] = None,
) -> str:
    """
    Builds the teacher prompt. ``user_input=None`` marks the first interaction for
    the current topic and is replaced by the session-initialization sentinel.
    """
    rendered_history = render_history(history, max_history_messages) or _EMPTY_HISTORY
    resolved_input = FIRST_INTERACTION_SENTINEL if user_input is None else user_input.strip()

    return fill_prompt(
        TEACHER_PROMPT_TEMPLATE,
        {
            "PERSONA_JSON": _to_json(persona.model_dump(mode="json")),
            "SYLLABUS_JSON": _to_json(syllabus.to_prompt_payload()),
            "CHAT_HISTORY": rendered_history,
            "USER_INPUT": resolved_input,
            "DELIMITER": STATE_UPDATE_DELIMITER,
        },
    )


def compose_archivist_prompt(transcript: Sequence[ChatMessage], max_chars: Optional[int] = None) -> str:
    rendered = render_history(transcript)
    if max_chars is not None and max_chars > 0 and len(rendered) > max_chars:
        rendered = _TRUNCATION_MARKER + "\n\n" + rendered[-max_chars:]
    return fill_prompt(ARCHIVIST_PROMPT_TEMPLATE, {"CHAT_TRANSCRIPT": rendered})
