from tutor_engine.domain.tutoring.fallback import synthesize_fallback_update
from tutor_engine.domain.tutoring.prompt_composer import (
    compose_archivist_prompt,
    compose_teacher_prompt,
    fill_prompt,
    render_history,
)
from tutor_engine.domain.tutoring.reconciler import ReconciliationResult, SyllabusReconciler
from tutor_engine.domain.tutoring.response_splitter import SplitReply, split_response, strip_code_fences
from tutor_engine.domain.tutoring.state_parser import (
    parse_archivist_summary,
    parse_json_object,
    parse_state_update,
)

__all__ = [
    "ReconciliationResult",
    "SplitReply",
    "SyllabusReconciler",
    "compose_archivist_prompt",
    "compose_teacher_prompt",
    "fill_prompt",
    "parse_archivist_summary",
    "parse_json_object",
    "parse_state_update",
    "render_history",
    "split_response",
    "strip_code_fences",
    "synthesize_fallback_update",
]
