"""Network configuration for the API server and the desktop client."""

import os

DEFAULT_HOST: str = os.environ.get("QUIZGENIUS_HOST", "127.0.0.1")
DEFAULT_PORT: int = int(os.environ.get("QUIZGENIUS_PORT", "8000"))
API_BASE_URL: str = os.environ.get("QUIZGENIUS_API_URL", f"http://{DEFAULT_HOST}:{DEFAULT_PORT}")
REQUEST_TIMEOUT_SECONDS: float = 10.0
