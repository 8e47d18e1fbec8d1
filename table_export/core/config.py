import os
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Table Export"
    VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # DynamoDB
    AWS_REGION: str = "us-east-2"
    DYNAMODB_ENDPOINT_URL: Optional[str] = None
    DYNAMODB_MAX_ATTEMPTS: int = 5
    DYNAMODB_CONSISTENT_READ: bool = False

    # Pipeline
    QUEUE_CAPACITY: int = 10000
    SEGMENT_COUNT: Optional[int] = None  # None -> one segment per CPU
    MAX_WORKERS: Optional[int] = None  # None -> min(segments, 4 x CPUs)
    POLL_TIMEOUT_SECONDS: float = 0.1

    # Attribute discovery
    SAMPLE_SIZE: int = 100

    # Output directory for API-triggered exports
    ARTIFACT_ROOT: str = "./out"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    @field_validator("QUEUE_CAPACITY", "SAMPLE_SIZE", "DYNAMODB_MAX_ATTEMPTS")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("SEGMENT_COUNT", "MAX_WORKERS")
    @classmethod
    def optional_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("POLL_TIMEOUT_SECONDS")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v


def default_segment_count() -> int:
    """One segment per available CPU."""
    return os.cpu_count() or 1


settings = Settings()
