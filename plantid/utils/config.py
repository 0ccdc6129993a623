# utils/config.py
import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    use_mock: bool = False
    log_level: str = "INFO"

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.strip())

    @classmethod
    def from_env(cls, environ=None, secrets=None) -> "Settings":
        """
        Resolve settings from environment variables, falling back to
        Streamlit secrets (or any mapping) for values that are not set.
        """
        environ = os.environ if environ is None else environ
        secrets = secrets or {}

        def lookup(name):
            value = environ.get(name)
            if value is None:
                value = secrets.get(name)
            return None if value is None else str(value)

        return cls(
            api_key=(lookup("GEMINI_API_KEY") or "").strip(),
            model=(lookup("GEMINI_MODEL") or DEFAULT_MODEL).strip() or DEFAULT_MODEL,
            base_url=(lookup("GEMINI_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/") or DEFAULT_BASE_URL,
            timeout_seconds=parse_timeout_seconds(lookup("GEMINI_TIMEOUT_SECONDS"), fallback=DEFAULT_TIMEOUT_SECONDS),
            use_mock=parse_bool(lookup("PLANTID_USE_MOCK"), default=False),
            log_level=(lookup("PLANTID_LOG_LEVEL") or "INFO").strip().upper() or "INFO",
        )


def parse_timeout_seconds(raw_value, *, fallback):
    if raw_value is None:
        return fallback
    try:
        parsed = float(raw_value)
    except ValueError:
        logger.warning("Ignoring invalid timeout %r, using %.0fs", raw_value, fallback)
        return fallback
    if not parsed > 0:
        return fallback
    return parsed


def parse_bool(raw_value, *, default):
    if raw_value is None:
        return default
    value = raw_value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default
