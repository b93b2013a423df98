"""Network configuration constants for the admin API."""

DEFAULT_ADMIN_HOST: str = "127.0.0.1"
DEFAULT_ADMIN_PORT: int = 8000
