"""Network configuration constants for the quiz application."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
DEFAULT_LOG_LEVEL: str = "INFO"

USER_ID_HEADER: str = "X-User-Id"
USER_NAME_HEADER: str = "X-User-Name"
