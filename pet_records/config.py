"""
Settings for the API server and the client transport.

Values are read from environment variables when this module is imported;
``settings`` is the shared instance.  Tests build their own ``Settings``
with explicit keyword arguments instead of touching the environment.
"""

import os
from dataclasses import dataclass


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Pet Health Records API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    env: str = os.getenv("FLASK_ENV", "").lower().strip()
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3001"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # JSON-lines request log, only written when env == "testing"
    log_path: str = os.getenv("API_LOG_PATH", "logs/api_test.log")

    # Load the development dataset (pet_records/data) into the server store
    seed_data: bool = _flag("SEED_DATA")

    # Comma-separated candidate base URLs; the client pins the first one
    # whose /health answers.
    api_base_urls: str = os.getenv(
        "PET_RECORDS_API_URLS",
        "http://127.0.0.1:3001/api,http://localhost:3001/api",
    )
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
    max_retries: int = int(os.getenv("MAX_RETRIES", "3"))
    retry_delay: float = float(os.getenv("RETRY_DELAY", "2"))

    @property
    def base_urls(self) -> list[str]:
        return [u.strip().rstrip("/") for u in self.api_base_urls.split(",") if u.strip()]

    @property
    def testing(self) -> bool:
        return self.env == "testing"


settings = Settings()
