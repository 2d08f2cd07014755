"""
Configuration for the assessment run.

Uses Pydantic BaseSettings so a missing API key fails fast instead of
being pasted into the source.
"""
from typing import Dict, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .retry import RetryPolicy


class Settings(BaseSettings):
    """Settings read from ``KSENSE_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="KSENSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API access
    api_key: str = Field(..., min_length=1, description="Value sent in the x-api-key header")
    base_url: str = Field(
        default="https://assessment.ksensetech.com/api",
        description="Root URL of the assessment API",
    )
    patients_path: str = "/patients"
    submit_path: str = "/submit-assessment"
    request_timeout: float = Field(default=30.0, gt=0)

    # Pagination
    page_size: int = Field(default=20, ge=1)
    max_pages: int = Field(default=500, ge=1)

    # Retry behaviour
    fetch_max_attempts: int = Field(default=5, ge=1)
    fetch_initial_backoff: float = Field(default=0.5, ge=0)
    submit_max_attempts: int = Field(default=3, ge=1)
    submit_retry_delay: float = Field(default=1.0, ge=0)
    retry_client_errors: bool = Field(
        default=False,
        description="Retry 4xx responses other than 429 and 404 while fetching",
    )

    # Run behaviour
    dry_run: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def patients_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.patients_path}"

    @property
    def submit_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.submit_path}"

    def headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key}

    def fetch_policy(self) -> RetryPolicy:
        # 404 means the endpoint is wrong, not that the server is busy
        return RetryPolicy(
            max_attempts=self.fetch_max_attempts,
            initial_delay=self.fetch_initial_backoff,
            backoff="exponential",
            retry_client_errors=self.retry_client_errors,
            fatal_statuses=frozenset({404}),
        )

    def submit_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.submit_max_attempts,
            initial_delay=self.submit_retry_delay,
            backoff="linear",
            retry_client_errors=False,
        )
