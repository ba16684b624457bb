from typing import Optional


class TutorEngineError(Exception):
    """Base class for every failure raised by the tutoring engine."""


class StateUpdateError(TutorEngineError):
    """
    The machine-facing part of a model reply could not be turned into a StateUpdate.
    Always routed to the fallback update, never shown to the student.
    """

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text


class ParseError(StateUpdateError):
    """Delimiter missing, or the delta is not valid JSON."""


class SchemaError(StateUpdateError):
    """The delta is valid JSON but does not have the StateUpdate shape."""


class PersistenceError(TutorEngineError):
    """A collaborator store read or write failed."""

    def __init__(self, message: str, operation: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.cause = cause


class ModelCallError(TutorEngineError):
    """The language model call failed or returned nothing."""


class SyllabusNotFoundError(TutorEngineError):
    def __init__(self, student_id: str, course_id: str):
        super().__init__(f"No syllabus for student {student_id} in course {course_id}")
        self.student_id = student_id
        self.course_id = course_id
