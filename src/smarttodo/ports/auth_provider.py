"""Auth provider interface."""

from typing import Protocol

from smarttodo.config import Session


class AuthProvider(Protocol):
    """Interface for user identity. Scopes which tasks are visible."""

    def register(self, email: str, password: str) -> Session:
        """Create an account and sign in."""
        ...

    def sign_in(self, email: str, password: str) -> Session:
        """Sign in with email and password."""
        ...

    def sign_out(self) -> None:
        """Forget the current session."""
        ...

    def current_session(self) -> Session | None:
        """Restore the saved session, refreshing it if needed. None if signed out."""
        ...
