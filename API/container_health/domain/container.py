from enum import Enum
from datetime import datetime
from dataclasses import dataclass, field
from typing import Optional, Tuple

from container_health.domain.image import ImageMetadata


@dataclass(frozen=True)
class ContainerDescriptor:
    id: str
    name: str
    image: str
    state: str  # created / running / paused / restarting / removing / exited / dead
    status: str = ""  # engine wording, e.g. "Up 3 hours"
    created_at: datetime | None = None

    @property
    def engine_running(self) -> bool:
        return self.state == "running"


@dataclass(frozen=True)
class LogWindow:
    """Sanitized, non-blank log lines, oldest first."""
    lines: Tuple[str, ...] = ()

    @property
    def last_line(self) -> Optional[str]:
        return self.lines[-1] if self.lines else None

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class UsageSnapshot:
    container_cpu: int
    previous_container_cpu: int
    system_cpu: int
    previous_system_cpu: int
    online_cpus: int
    memory_usage: int
    memory_limit: int
    read_at: datetime | None = None


class HealthState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    NOT_STARTED = "not started"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ContainerHealth:
    state: HealthState
    running: bool
    error_message: str | None = None  # only for HealthState.ERROR
    status_label: str | None = None


@dataclass(frozen=True)
class ContainerIdentity:
    client: str = "Unknown"
    session_id: str | None = None


@dataclass(frozen=True)
class UsageFigures:
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    memory_usage_mb: float = 0.0
    memory_limit_mb: float = 0.0
    memory_available: bool = False


@dataclass(frozen=True)
class ContainerUsageReport:
    id: str
    image: str
    state: str
    created_at: datetime | None
    cpu_percent: str = "0%"
    memory_usage: str = "0 MB"
    memory_limit: str = "0 MB"
    memory_percent: str = "0%"
    last_logs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContainerRecord:
    """Everything one listing learned about a container."""
    descriptor: ContainerDescriptor
    health: ContainerHealth
    logs: LogWindow = field(default_factory=LogWindow)
    identity: ContainerIdentity | None = None
    image: ImageMetadata | None = None
