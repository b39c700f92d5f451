from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from container_health.domain.container import ContainerRecord, ContainerUsageReport

UNKNOWN_SESSION = "unknown"


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------
# GET /docker/containers
# ---------------------------
class ContainerSummaryResponse(_Response):
    id: str
    name: str
    image: str
    state: str = Field(..., description="Engine lifecycle state (running, exited, ...)")
    status: Optional[str] = Field(None, description="Engine status text, or 'not started'")
    inspect_data: Optional[datetime] = Field(None, alias="inspectData", description="Container creation time")
    running: bool = Field(..., description="Engine state fused with the log health heuristic")

    @classmethod
    def from_record(cls, record: ContainerRecord) -> "ContainerSummaryResponse":
        d = record.descriptor
        return cls(
            id=d.id,
            name=d.name,
            image=d.image,
            state=d.state,
            status=record.health.status_label,
            inspect_data=d.created_at,
            running=record.health.running,
        )


# ---------------------------
# GET /docker/containers/full
# ---------------------------
class ContainerFullResponse(_Response):
    id: str
    name: str
    image: str
    image_updated_at: Optional[str] = Field(None, alias="imageUpdatedAt")
    status: str
    client: str
    number: str
    logs: List[str] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: ContainerRecord) -> "ContainerFullResponse":
        d = record.descriptor
        image = record.image
        identity = record.identity
        return cls(
            id=d.id,
            name=d.name,
            image=image.name if image else d.image,
            image_updated_at=image.created_at if image else None,
            status=record.health.status_label or record.health.state.value,
            client=identity.client if identity else "Unknown",
            number=(identity.session_id if identity else None) or UNKNOWN_SESSION,
            logs=list(record.logs.lines),
        )


# ---------------------------
# GET /docker/containers/{id}/summary
# ---------------------------
class ContainerUsageResponse(_Response):
    id: str
    image: str
    state: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    cpu_percent: str = Field(..., alias="cpuPercent")
    memory_usage: str = Field(..., alias="memoryUsage")
    memory_limit: str = Field(..., alias="memoryLimit")
    memory_percent: str = Field(..., alias="memoryPercent")
    last_logs: List[str] = Field(default_factory=list, alias="lastLogs")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "4f1c2d9a7b3e",
                "image": "bot:latest",
                "state": "running",
                "createdAt": "2025-01-10T12:00:00Z",
                "cpuPercent": "80.00%",
                "memoryUsage": "100.00 MB",
                "memoryLimit": "200.00 MB",
                "memoryPercent": "50.00%",
                "lastLogs": ["listening on :3000"],
            }
        },
    )

    @classmethod
    def from_report(cls, report: ContainerUsageReport) -> "ContainerUsageResponse":
        return cls(
            id=report.id,
            image=report.image,
            state=report.state,
            created_at=report.created_at,
            cpu_percent=report.cpu_percent,
            memory_usage=report.memory_usage,
            memory_limit=report.memory_limit,
            memory_percent=report.memory_percent,
            last_logs=list(report.last_logs),
        )
