"""Firebase Authentication adapter - REST client for email/password sign-in."""

import hashlib
import logging
import time
from pathlib import Path

import requests

from smarttodo.config import Session

logger = logging.getLogger(__name__)

IDENTITY_API = "https://identitytoolkit.googleapis.com/v1"
TOKEN_URL = "https://securetoken.googleapis.com/v1/token"
REQUEST_TIMEOUT = 30

NETWORK_ERROR = "Network error. Please check your connection."

# Firebase error code -> message shown to the user
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "This email is already registered. Please sign in instead.",
    "INVALID_EMAIL": "Invalid email address format.",
    "WEAK_PASSWORD": "Password is too weak. Please use at least 6 characters.",
    "EMAIL_NOT_FOUND": "No account found with this email. Please register first.",
    "INVALID_PASSWORD": "Incorrect password. Please try again.",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect password. Please try again.",
    "USER_DISABLED": "This account has been disabled. Please contact support.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many failed attempts. Please try again later.",
}


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    pass


def error_code(resp: requests.Response) -> str:
    """Extract the Firebase error code, e.g. "WEAK_PASSWORD : Password should be..." -> "WEAK_PASSWORD"."""
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return ""
    return message.split(":")[0].strip()


def friendly_message(code: str, fallback: str) -> str:
    return ERROR_MESSAGES.get(code, fallback)


class FirebaseAuthAdapter:
    """
    Firebase Auth REST adapter.

    Implements AuthProvider protocol. Persists the session to the session
    file and refreshes the ID token when it is about to expire.
    """

    def __init__(self, api_key: str, session_file: Path | None = None):
        if not api_key:
            raise AuthenticationError("Missing FIREBASE_API_KEY. Add it to config/smarttodo.conf")
        self.api_key = api_key
        self.session_file = session_file
        self._session = requests.Session()

    def _post(self, url: str, fallback: str, **kwargs) -> dict:
        try:
            resp = self._session.post(
                url, params={"key": self.api_key}, timeout=REQUEST_TIMEOUT, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Auth request failed: {e}")
            raise AuthenticationError(NETWORK_ERROR) from e

        if resp.status_code != 200:
            code = error_code(resp)
            logger.warning(f"Auth request rejected: {code or resp.status_code}")
            raise AuthenticationError(friendly_message(code, fallback))
        return resp.json()

    def _start_session(self, data: dict) -> Session:
        session = Session(
            user_id=data["localId"],
            email=data.get("email", ""),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_at=int(time.time()) + int(data.get("expiresIn", 3600)),
        )
        session.save(self.session_file)
        return session

    def register(self, email: str, password: str) -> Session:
        """Create an account and sign in."""
        data = self._post(
            f"{IDENTITY_API}/accounts:signUp",
            "Registration failed. Please try again.",
            json={"email": email.strip(), "password": password, "returnSecureToken": True},
        )
        logger.info(f"Registered {email.strip()}")
        return self._start_session(data)

    def sign_in(self, email: str, password: str) -> Session:
        """Sign in with email and password."""
        data = self._post(
            f"{IDENTITY_API}/accounts:signInWithPassword",
            "Login failed. Please try again.",
            json={"email": email.strip(), "password": password, "returnSecureToken": True},
        )
        logger.info(f"Signed in {email.strip()}")
        return self._start_session(data)

    def sign_out(self) -> None:
        Session.clear(self.session_file)

    def _refresh(self, session: Session) -> Session:
        """Exchange the refresh token for a new ID token."""
        if not session.refresh_token:
            raise AuthenticationError("Session expired. Run 'todo login' again.")

        data = self._post(
            TOKEN_URL,
            "Session expired. Run 'todo login' again.",
            data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
        )
        session.id_token = data["id_token"]
        session.refresh_token = data.get("refresh_token", session.refresh_token)
        session.expires_at = int(time.time()) + int(data.get("expires_in", 3600))
        session.save(self.session_file)
        logger.debug(f"Refreshed token for {session.user_id}")
        return session

    def current_session(self) -> Session | None:
        session = Session.load(self.session_file)
        if session and session.expires_soon():
            session = self._refresh(session)
        return session


class LocalAuthAdapter:
    """
    Offline identity for the file store.

    Implements AuthProvider protocol. No password check - the user id is a
    stable hash of the email, so the same email always sees the same tasks.
    """

    def __init__(self, session_file: Path | None = None):
        self.session_file = session_file

    @staticmethod
    def user_id_for(email: str) -> str:
        return hashlib.sha256(email.strip().lower().encode()).hexdigest()[:28]

    def _start_session(self, email: str) -> Session:
        email = email.strip()
        if not email:
            raise AuthenticationError("Invalid email address format.")
        session = Session(user_id=self.user_id_for(email), email=email)
        session.save(self.session_file)
        return session

    def register(self, email: str, password: str) -> Session:
        return self._start_session(email)

    def sign_in(self, email: str, password: str) -> Session:
        return self._start_session(email)

    def sign_out(self) -> None:
        Session.clear(self.session_file)

    def current_session(self) -> Session | None:
        return Session.load(self.session_file)
