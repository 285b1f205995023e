import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.deps import (
    get_current_user,
    get_feedback_service,
    get_interview_service,
    get_session_service,
    require_user,
)
from app.errors import AppError, NotFound
from app.models import (
    ActionResult,
    CreateFeedbackParams,
    CreateFeedbackRequest,
    Feedback,
    FeedbackResult,
    GetFeedbackByInterviewIdParams,
    GetLatestInterviewsParams,
    Interview,
    SignInParams,
    SignUpParams,
    User,
)
from app.services.ai_service import AIService
from app.services.auth_service import AuthService, initialize_firebase
from app.services.feedback_service import FeedbackService
from app.services.interview_service import InterviewService
from app.services.session_service import SessionService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    auth_service: Optional[AuthService] = None,
    storage_service: Optional[StorageService] = None,
    ai_service: Optional[AIService] = None,
) -> FastAPI:
    """
    Build the API. Clients that are not passed in are created from settings
    at startup and closed at shutdown.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage = storage_service or StorageService.from_settings(settings)
        auth_svc = auth_service or AuthService(initialize_firebase(settings))
        ai_svc = ai_service or AIService.from_settings(settings)

        storage.ensure_indexes()
        interviews = InterviewService(storage)
        app.state.session_service = SessionService(auth_svc, storage, secure_cookies=settings.is_production)
        app.state.interview_service = interviews
        app.state.feedback_service = FeedbackService(ai_svc, interviews)
        logger.info("PrepWise API started (env=%s)", settings.app_env)

        yield

        if storage_service is None:
            storage.close()

    app = FastAPI(title="PrepWise", lifespan=lifespan)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "code": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "code": "INTERNAL_ERROR", "message": "Something went wrong"},
        )

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    @app.get("/api/config/firebase")
    def firebase_config():
        """Public Firebase web config for the client SDK"""
        return {
            "apiKey": settings.firebase_api_key,
            "authDomain": settings.firebase_auth_domain,
            "projectId": settings.firebase_project_id,
        }

    # Auth

    @app.post("/api/auth/sign-up", response_model=ActionResult)
    def sign_up(params: SignUpParams, sessions: SessionService = Depends(get_session_service)):
        return sessions.sign_up(params)

    @app.post("/api/auth/sign-in", response_model=ActionResult)
    def sign_in(
        params: SignInParams,
        response: Response,
        sessions: SessionService = Depends(get_session_service),
    ):
        return sessions.sign_in(params, response)

    @app.post("/api/auth/sign-out", response_model=ActionResult)
    def sign_out(response: Response, sessions: SessionService = Depends(get_session_service)):
        sessions.sign_out(response)
        return ActionResult(success=True, message="Signed out.")

    @app.get("/api/auth/me", response_model=User)
    def me(user: User = Depends(require_user)):
        return user

    @app.get("/api/auth/status")
    def auth_status(user: Optional[User] = Depends(get_current_user)):
        return {"authenticated": user is not None}

    # Interviews and feedback

    @app.get("/api/interviews", response_model=List[Interview])
    def list_my_interviews(
        user: User = Depends(require_user),
        interviews: InterviewService = Depends(get_interview_service),
    ):
        return interviews.get_interviews_by_user_id(user.id)

    @app.get("/api/interviews/latest", response_model=List[Interview])
    def list_latest_interviews(
        limit: int = Query(20, ge=1, le=100),
        user: User = Depends(require_user),
        interviews: InterviewService = Depends(get_interview_service),
    ):
        return interviews.get_latest_interviews(GetLatestInterviewsParams(user_id=user.id, limit=limit))

    @app.get("/api/interviews/{interview_id}", response_model=Interview)
    def get_interview(
        interview_id: str,
        user: User = Depends(require_user),
        interviews: InterviewService = Depends(get_interview_service),
    ):
        interview = interviews.get_interview_by_id(interview_id)
        if interview is None:
            raise NotFound(f"Interview {interview_id} not found")
        return interview

    @app.get("/api/interviews/{interview_id}/feedback", response_model=Feedback)
    def get_feedback(
        interview_id: str,
        user: User = Depends(require_user),
        interviews: InterviewService = Depends(get_interview_service),
    ):
        feedback = interviews.get_feedback_by_interview_id(
            GetFeedbackByInterviewIdParams(interview_id=interview_id, user_id=user.id)
        )
        if feedback is None:
            raise NotFound(f"No feedback for interview {interview_id}")
        return feedback

    @app.post(
        "/api/interviews/{interview_id}/feedback",
        response_model=FeedbackResult,
        response_model_exclude_none=True,
    )
    def create_feedback(
        interview_id: str,
        body: CreateFeedbackRequest,
        user: User = Depends(require_user),
        interviews: InterviewService = Depends(get_interview_service),
        feedback_service: FeedbackService = Depends(get_feedback_service),
    ):
        if interviews.get_interview_by_id(interview_id) is None:
            raise NotFound(f"Interview {interview_id} not found")

        return feedback_service.create_feedback(
            CreateFeedbackParams(interview_id=interview_id, user_id=user.id, transcript=body.transcript)
        )

    return app


app = create_app()
