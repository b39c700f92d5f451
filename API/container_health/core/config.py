from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    DOCKER_BASE_URL: Optional[str] = Field(
        default=None,
        description="Engine endpoint, e.g. tcp://localhost:2375. Falls back to the DOCKER_HOST environment when unset"
    )

    DOCKER_TIMEOUT: int = Field(
        default=10,
        description="HTTP timeout (seconds) of the docker SDK client"
    )

    LOG_TAIL_LINES: int = Field(
        default=20,
        ge=1,
        description="Log lines kept per container by the full listing"
    )

    SUMMARY_LOG_TAIL: int = Field(
        default=5,
        ge=1,
        description="Log lines returned by the single-container summary"
    )

    MAX_CONCURRENCY: int = Field(
        default=10,
        ge=1,
        description="Containers processed simultaneously during a listing"
    )

    TASK_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Per-container budget before the container is dropped from a listing"
    )

    FAIL_CLOSED_ON_SILENT_LOGS: bool = Field(
        default=True,
        description="Report a container without any log output as not running"
    )

    NOT_STARTED_MARKERS: List[str] = Field(
        default_factory=lambda: ["waiting for qr code scan"],
        description="Log fragments meaning the application has not finished starting"
    )

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=".env"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
