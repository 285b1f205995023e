from __future__ import annotations

from types import SimpleNamespace

import mongomock
import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth

from app.config import Settings
from app.main import create_app
from app.models import CATEGORY_NAMES, FeedbackEvaluation
from app.services.ai_service import AIService
from app.services.interview_service import InterviewService
from app.services.session_service import SessionService
from app.services.storage_service import StorageService


class FakeAuthService:
    """Stands in for the Firebase-backed AuthService."""

    def __init__(self) -> None:
        self.registered_emails: set[str] = set()
        self.cookies: dict[str, str] = {}
        self.revoked: set[str] = set()
        self.expired: set[str] = set()
        self.created: list[tuple[str, object]] = []

    def register(self, *, uid: str, email: str, id_token: str) -> str:
        self.registered_emails.add(email)
        cookie = f"cookie-{id_token}"
        self.cookies[cookie] = uid
        return cookie

    def create_session_cookie(self, id_token: str, expires_in) -> str:
        self.created.append((id_token, expires_in))
        cookie = f"cookie-{id_token}"
        if cookie not in self.cookies:
            raise auth.InvalidIdTokenError("unknown id token")
        return cookie

    def verify_session_cookie(self, session_cookie: str, check_revoked: bool = True) -> dict:
        if session_cookie in self.expired:
            raise auth.ExpiredSessionCookieError("expired", None)
        if check_revoked and session_cookie in self.revoked:
            raise auth.RevokedSessionCookieError("revoked")
        if session_cookie not in self.cookies:
            raise auth.InvalidSessionCookieError("malformed")
        return {"uid": self.cookies[session_cookie]}

    def get_user_by_email(self, email: str):
        if email not in self.registered_emails:
            raise auth.UserNotFoundError(f"No user record found for {email}")
        return SimpleNamespace(email=email)


class FakeCompletions:
    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.result: FeedbackEvaluation | None = None
        self.refusal: str | None = None
        self.error: Exception | None = None

    def parse(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(parsed=self.result, refusal=self.refusal)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self) -> None:
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


def make_evaluation(total_score: int = 72) -> FeedbackEvaluation:
    return FeedbackEvaluation(
        total_score=total_score,
        category_scores=[
            {"name": name, "score": 70 + i, "comment": f"{name} comment"}
            for i, name in enumerate(CATEGORY_NAMES)
        ],
        strengths=["Clear answers", "Good examples"],
        areas_for_improvement=["Go deeper on system design"],
        final_assessment="Solid candidate with room to grow.",
    )


@pytest.fixture
def storage() -> StorageService:
    storage = StorageService(mongomock.MongoClient()["prepwise_test"])
    storage.ensure_indexes()
    return storage


@pytest.fixture
def fake_auth() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    client = FakeOpenAI()
    client.completions.result = make_evaluation()
    return client


@pytest.fixture
def ai_service(fake_openai) -> AIService:
    return AIService(fake_openai, model="test-model")


@pytest.fixture
def session_service(fake_auth, storage) -> SessionService:
    return SessionService(fake_auth, storage)


@pytest.fixture
def interview_service(storage) -> InterviewService:
    return InterviewService(storage)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        app_env="test",
        firebase_api_key="web-key",
        firebase_auth_domain="prepwise.example.com",
        firebase_project_id="prepwise-test",
    )


@pytest.fixture
def client(settings, fake_auth, storage, ai_service):
    app = create_app(settings, auth_service=fake_auth, storage_service=storage, ai_service=ai_service)
    with TestClient(app) as test_client:
        yield test_client


def add_interview(storage: StorageService, interview_id: str, *, user_id: str, created_at: str, finalized: bool = True, **extra) -> None:
    storage.interviews.insert_one({
        "_id": interview_id,
        "userId": user_id,
        "finalized": finalized,
        "createdAt": created_at,
        **extra,
    })


@pytest.fixture(name="add_interview")
def add_interview_fixture(storage):
    def _add(interview_id: str, **kwargs) -> None:
        add_interview(storage, interview_id, **kwargs)

    return _add


@pytest.fixture(name="make_evaluation")
def make_evaluation_fixture():
    return make_evaluation
