from typing import Annotated

from fastapi import Depends, Request

from tutor_engine.infrastructure.container import TutorContainer


def get_container(request: Request) -> TutorContainer:
    """
    Pulls the container instance from app state (initialized in lifespan).
    """
    return request.app.state.container


def get_tutor_turn_use_case(container: Annotated[TutorContainer, Depends(get_container)]):
    return container.tutor_turn_use_case


def get_enroll_student_use_case(container: Annotated[TutorContainer, Depends(get_container)]):
    return container.enroll_student_use_case
