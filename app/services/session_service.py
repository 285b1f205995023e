import logging
from datetime import timedelta
from typing import Optional

from fastapi import Response
from firebase_admin import auth
from pymongo.errors import DuplicateKeyError

from app.models import ActionResult, SignInParams, SignUpParams, User
from app.services.auth_service import AuthService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"
# One week, in seconds
SESSION_DURATION = 60 * 60 * 24 * 7


class SessionService:
    """Sign-up, sign-in and session cookie handling."""

    def __init__(self, auth_service: AuthService, storage: StorageService, secure_cookies: bool = False):
        self.auth_service = auth_service
        self.storage = storage
        self.secure_cookies = secure_cookies

    def set_session_cookie(self, response: Response, id_token: str) -> None:
        session_cookie = self.auth_service.create_session_cookie(
            id_token,
            expires_in=timedelta(seconds=SESSION_DURATION),
        )

        response.set_cookie(
            SESSION_COOKIE_NAME,
            session_cookie,
            max_age=SESSION_DURATION,
            httponly=True,
            secure=self.secure_cookies,
            path="/",
            samesite="lax",
        )

    def sign_up(self, params: SignUpParams) -> ActionResult:
        try:
            # insert fails on an existing _id, so check and write are one call
            self.storage.users.insert_one({
                '_id': params.uid,
                'name': params.name,
                'email': params.email,
            })
        except DuplicateKeyError:
            return ActionResult(success=False, message="User already exists. Please sign in.")
        # Not raised by the store; kept so an identity-side email clash gets its own message
        except auth.EmailAlreadyExistsError:
            return ActionResult(success=False, message="This email is already in use")
        except Exception:
            logger.exception("Error creating user %s", params.uid)
            return ActionResult(success=False, message="Failed to create account. Please try again.")

        logger.info("Created user %s", params.uid)
        return ActionResult(success=True, message="Account created successfully. Please sign in.")

    def sign_in(self, params: SignInParams, response: Response) -> ActionResult:
        try:
            self.auth_service.get_user_by_email(params.email)
            self.set_session_cookie(response, params.id_token)
        except auth.UserNotFoundError:
            return ActionResult(success=False, message="User does not exist. Create an account.")
        except Exception:
            logger.exception("Error signing in %s", params.email)
            return ActionResult(success=False, message="Failed to log into account. Please try again.")

        return ActionResult(success=True, message="Signed in successfully.")

    def sign_out(self, response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")

    def get_current_user(self, session_cookie: Optional[str]) -> Optional[User]:
        """
        Resolve the user behind a session cookie.
        Returns None for a missing, invalid, expired or revoked cookie, and for
        a valid cookie whose user document no longer exists.
        """
        if not session_cookie:
            return None

        try:
            decoded_claims = self.auth_service.verify_session_cookie(session_cookie, check_revoked=True)
            user_doc = self.storage.users.find_one({'_id': decoded_claims['uid']})
        except Exception as e:
            logger.warning("Session cookie rejected: %s", e)
            return None

        if user_doc is None:
            return None

        return User.from_document(user_doc)

    def is_authenticated(self, session_cookie: Optional[str]) -> bool:
        return self.get_current_user(session_cookie) is not None
