from datetime import timedelta

import firebase_admin
from firebase_admin import credentials, auth

from app.config import Settings

APP_NAME = "prepwise"


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """Initialize (or reuse) the Firebase Admin app for this process."""
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    cred_dict = {
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "private_key": settings.firebase_private_key.replace('\\n', '\n'),
        "client_email": settings.firebase_client_email,
        "token_uri": "https://oauth2.googleapis.com/token",
    }

    cred = credentials.Certificate(cred_dict)
    return firebase_admin.initialize_app(cred, name=APP_NAME)


class AuthService:
    """Identity provider calls, bound to one Firebase Admin app."""

    def __init__(self, firebase_app: firebase_admin.App):
        self.app = firebase_app

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        return auth.create_session_cookie(id_token, expires_in=expires_in, app=self.app)

    def verify_session_cookie(self, session_cookie: str, check_revoked: bool = True) -> dict:
        """
        Verify a session cookie.
        Returns: decoded claims dict (always contains 'uid')
        """
        return auth.verify_session_cookie(session_cookie, check_revoked=check_revoked, app=self.app)

    def get_user_by_email(self, email: str) -> auth.UserRecord:
        return auth.get_user_by_email(email, app=self.app)
