"""Configuration management for smarttodo."""

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SMARTTODO_HOME = Path(os.environ.get("SMARTTODO_HOME", Path.home() / "smarttodo"))
CONFIG_FILE = SMARTTODO_HOME / "config" / "smarttodo.conf"
SESSION_FILE = SMARTTODO_HOME / "config" / ".session.json"
DATA_DIR = SMARTTODO_HOME / "data"

STORE_BACKENDS = ("file", "firestore")


@dataclass
class Config:
    """smarttodo configuration."""

    store_backend: str = "file"
    store_path: str = ""
    firebase_api_key: str = ""
    firebase_project_id: str = ""
    timezone: str = "UTC"
    poll_interval: float = 5.0
    default_filter: str = "all"

    @property
    def task_file(self) -> Path:
        """Location of the local JSON task store."""
        if self.store_path:
            return Path(self.store_path).expanduser()
        return DATA_DIR / "tasks.json"


@dataclass
class Session:
    """Signed-in user and its auth tokens."""

    user_id: str = ""
    email: str = ""
    id_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0

    def expires_soon(self, margin: int = 300) -> bool:
        """True when the token expires within `margin` seconds."""
        return bool(self.expires_at) and time.time() >= self.expires_at - margin

    def save(self, path: Path | None = None) -> None:
        """Save session to file."""
        path = path or SESSION_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(
                {
                    "user_id": self.user_id,
                    "email": self.email,
                    "id_token": self.id_token,
                    "refresh_token": self.refresh_token,
                    "expires_at": self.expires_at,
                }
            )
        )
        path.chmod(0o600)

    @classmethod
    def load(cls, path: Path | None = None) -> "Session | None":
        """Load session from file. None if there is no usable session."""
        path = path or SESSION_FILE
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
            session = cls(
                user_id=data["user_id"],
                email=data.get("email", ""),
                id_token=data.get("id_token", ""),
                refresh_token=data.get("refresh_token", ""),
                expires_at=data.get("expires_at", 0),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return None
        return session if session.user_id else None

    @staticmethod
    def clear(path: Path | None = None) -> None:
        """Delete the saved session."""
        path = path or SESSION_FILE
        path.unlink(missing_ok=True)


def _strip_value(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from smarttodo.conf file."""
    path = path or CONFIG_FILE
    config = Config()

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "store_backend":
                backend = value.lower()
                if backend in STORE_BACKENDS:
                    config.store_backend = backend
                else:
                    logger.warning(f"Unknown STORE_BACKEND {value!r}, using {config.store_backend!r}")
            case "store_path":
                config.store_path = value
            case "firebase_api_key":
                config.firebase_api_key = value
            case "firebase_project_id":
                config.firebase_project_id = value
            case "timezone":
                config.timezone = value
            case "poll_interval":
                try:
                    config.poll_interval = float(value)
                except ValueError:
                    logger.warning(f"Invalid POLL_INTERVAL {value!r}, using {config.poll_interval}")
            case "default_filter":
                config.default_filter = value.lower()

    return config
