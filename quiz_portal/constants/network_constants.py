"""Network configuration constants for the quiz portal."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000

PASSWORD_HEADER: str = "X-Quiz-Password"
IDENTITY_HEADER: str = "X-Caller-Identity"
