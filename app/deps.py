from typing import Optional

from fastapi import Depends, Request

from app.errors import Unauthenticated
from app.models import User
from app.services.feedback_service import FeedbackService
from app.services.interview_service import InterviewService
from app.services.session_service import SESSION_COOKIE_NAME, SessionService


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_interview_service(request: Request) -> InterviewService:
    return request.app.state.interview_service


def get_feedback_service(request: Request) -> FeedbackService:
    return request.app.state.feedback_service


def get_current_user(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
) -> Optional[User]:
    return sessions.get_current_user(request.cookies.get(SESSION_COOKIE_NAME))


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise Unauthenticated("Not signed in")
    return user
