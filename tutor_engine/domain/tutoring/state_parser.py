"""
Tolerant JSON parsing for model replies.

The same cleaning applies to teacher deltas and to archivist replies: fence markers
are stripped, and a JSON object followed by stray trailing text is still accepted.
Text before the object is not: the reply must start with the object once fences
and surrounding whitespace are removed. Validation here is structural only.
"""
import json
from typing import Any, Dict, Optional

from pydantic import ValidationError

from tutor_engine.domain.exceptions import ParseError, SchemaError
from tutor_engine.domain.schemas import ArchivistSummary, StateUpdate
from tutor_engine.domain.tutoring.response_splitter import strip_code_fences


def _compact_error(err: Exception, limit: int = 320) -> str:
    text = str(err or "").replace("\n", " ").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ParseError("State block is empty or missing", raw_text=text)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        if not cleaned.startswith("{"):
            raise ParseError(f"Invalid JSON: {_compact_error(exc)}", raw_text=text) from exc
        try:
            payload, _ = json.JSONDecoder().raw_decode(cleaned)
        except json.JSONDecodeError as inner:
            raise ParseError(f"Invalid JSON: {_compact_error(inner)}", raw_text=text) from inner

    if not isinstance(payload, dict):
        raise SchemaError(
            f"Expected a JSON object, got {type(payload).__name__}", raw_text=text
        )
    return payload


def parse_state_update(delta_text: Optional[str]) -> StateUpdate:
    """
    Parses the delta that follows the delimiter.

    Raises:
        ParseError: delta missing or not JSON.
        SchemaError: JSON lacks trigger_summary_generation (bool), current_topic_id (str)
            or topics_updated (list of {topic_id, status}).
    """
    payload = parse_json_object(delta_text)
    try:
        return StateUpdate.model_validate(payload)
    except ValidationError as exc:
        raise SchemaError(f"Invalid state update: {_compact_error(exc)}", raw_text=delta_text) from exc


def parse_archivist_summary(raw_text: Optional[str]) -> ArchivistSummary:
    payload = parse_json_object(raw_text)
    try:
        return ArchivistSummary.model_validate(payload)
    except ValidationError as exc:
        raise SchemaError(f"Invalid archivist summary: {_compact_error(exc)}", raw_text=raw_text) from exc
