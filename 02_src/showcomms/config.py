"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "showcomms.db"
DEFAULT_MEDIA_DIR = DATA_DIR / "media"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Messaging defaults
DEFAULT_POLL_INTERVAL_SECONDS = 15.0
DEFAULT_MESSAGE_LIMIT = 150
DEFAULT_LANGUAGE = "en"
DEFAULT_TRANSLATION_TARGET = "es"

DEFAULT_ROLE_KEYS = ("FOH", "BOH", "StageManager", "Security")
URGENCY_KEYWORDS = ("urgent", "911", "immediately")
DEFAULT_REACTION_EMOJIS = ("👍", "✅", "🙏", "🔥", "😂", "🎭", "🎶")
SMART_REPLY_CHIPS = ("On it.", "Copy.", "Done.", "Need 2 minutes.")
OPS_SHORTCUT_CHIPS = (
    "Dim lights to 30%",
    "Turn guitar up +2 dB",
    "Hold doors 10 minutes",
)
LANGUAGE_OPTIONS = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}


PathLike = Union[str, Path]


def resolve_media_dir(env_value: PathLike | None = None) -> Path:
    """Resolve MEDIA_DIR to an absolute directory for uploaded attachments."""
    if not env_value:
        return DEFAULT_MEDIA_DIR

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


@dataclass
class ClientSettings:
    """Settings for a messaging client session."""

    api_base_url: str = "http://localhost:8000"
    media_upload_url: str = "http://localhost:8000/api/media"
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    message_limit: int = DEFAULT_MESSAGE_LIMIT
    request_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Build settings from environment variables, keeping defaults."""
        api_base_url = os.getenv("API_BASE_URL", cls.api_base_url).rstrip("/")
        return cls(
            api_base_url=api_base_url,
            media_upload_url=os.getenv("MEDIA_UPLOAD_URL", f"{api_base_url}/api/media"),
            poll_interval_seconds=float(
                os.getenv("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS)
            ),
            message_limit=int(os.getenv("MESSAGE_LIMIT", DEFAULT_MESSAGE_LIMIT)),
            request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10")),
        )
