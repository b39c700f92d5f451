# container_health/schemas/engine.py
# Validation of the raw JSON handed back by the Docker engine. Nothing past this
# module reads engine dictionaries directly.
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from container_health.core.errors import StatsParseError
from container_health.domain.container import ContainerDescriptor, UsageSnapshot
from container_health.domain.image import ImageMetadata

_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)


def parse_engine_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an engine timestamp. Accepts epoch seconds (list entries) and RFC 3339
    strings with nanosecond precision (inspect/stats payloads).
    The zero value "0001-01-01T00:00:00Z" means "never" and maps to None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc) if value > 0 else None

    match = _TIMESTAMP.match(str(value).strip())
    if not match:
        return None
    frac = (match["frac"] or "")[:6].ljust(6, "0")
    tz = match["tz"] or "Z"
    parsed = datetime.fromisoformat(
        f"{match['base']}.{frac}{'+00:00' if tz == 'Z' else tz}"
    )
    if parsed.year <= 1:
        return None
    return parsed


class _EngineModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------
# Containers
# ---------------------------
class EngineContainer(_EngineModel):
    """One entry of GET /containers/json?all=1."""
    id: str = Field(alias="Id")
    names: List[str] = Field(default_factory=list, alias="Names")
    image: str = Field("", alias="Image")
    state: str = Field("unknown", alias="State")
    status: str = Field("", alias="Status")
    created: Optional[int] = Field(None, alias="Created")

    def to_descriptor(self) -> ContainerDescriptor:
        name = self.names[0].lstrip("/") if self.names else ""
        return ContainerDescriptor(
            id=self.id,
            name=name or "unnamed",
            image=self.image or "unknown",
            state=self.state.lower(),
            status=self.status,
            created_at=parse_engine_timestamp(self.created),
        )


class _InspectState(_EngineModel):
    status: str = Field("unknown", alias="Status")


class _InspectConfig(_EngineModel):
    image: Optional[str] = Field(None, alias="Image")


class EngineContainerInspect(_EngineModel):
    """GET /containers/{id}/json"""
    id: str = Field(alias="Id")
    name: str = Field("", alias="Name")
    image: str = Field("", alias="Image")
    created: Optional[str] = Field(None, alias="Created")
    state: _InspectState = Field(default_factory=_InspectState, alias="State")
    config: _InspectConfig = Field(default_factory=_InspectConfig, alias="Config")

    def to_descriptor(self) -> ContainerDescriptor:
        return ContainerDescriptor(
            id=self.id,
            name=self.name.lstrip("/") or "unnamed",
            image=self.config.image or self.image or "unknown",
            state=self.state.status.lower(),
            status=self.state.status,
            created_at=parse_engine_timestamp(self.created),
        )


# ---------------------------
# Stats
# ---------------------------
class _CpuUsage(_EngineModel):
    total_usage: int = 0
    percpu_usage: Optional[List[int]] = None


class _CpuStats(_EngineModel):
    cpu_usage: _CpuUsage = Field(default_factory=_CpuUsage)
    system_cpu_usage: int = 0
    online_cpus: Optional[int] = None


class _MemoryStats(_EngineModel):
    usage: int = 0
    limit: int = 0


class EngineStats(_EngineModel):
    """GET /containers/{id}/stats?stream=0"""
    read: Optional[str] = None
    name: Optional[str] = None
    cpu_stats: _CpuStats
    precpu_stats: _CpuStats = Field(default_factory=_CpuStats)
    memory_stats: _MemoryStats = Field(default_factory=_MemoryStats)

    def to_snapshot(self) -> UsageSnapshot:
        online = self.cpu_stats.online_cpus
        if not online:
            # Older engines only report the per-cpu breakdown
            online = len(self.cpu_stats.cpu_usage.percpu_usage or ()) or 1
        return UsageSnapshot(
            container_cpu=self.cpu_stats.cpu_usage.total_usage,
            previous_container_cpu=self.precpu_stats.cpu_usage.total_usage,
            system_cpu=self.cpu_stats.system_cpu_usage,
            previous_system_cpu=self.precpu_stats.system_cpu_usage,
            online_cpus=online,
            memory_usage=self.memory_stats.usage,
            memory_limit=self.memory_stats.limit,
            read_at=parse_engine_timestamp(self.read),
        )


def parse_stats(payload: Dict[str, Any]) -> UsageSnapshot:
    """Validate a stats payload, raising StatsParseError on any schema mismatch."""
    if not isinstance(payload, dict):
        raise StatsParseError(f"Expected a JSON object, got {type(payload).__name__}")
    try:
        return EngineStats.model_validate(payload).to_snapshot()
    except ValidationError as exc:
        raise StatsParseError(str(exc)) from exc


# ---------------------------
# Images
# ---------------------------
class EngineImageInspect(_EngineModel):
    """GET /images/{name}/json"""
    repo_tags: Optional[List[str]] = Field(None, alias="RepoTags")
    created: Optional[str] = Field(None, alias="Created")

    def to_metadata(self, image_ref: str) -> ImageMetadata:
        tags = [t for t in (self.repo_tags or []) if t and t != "<none>:<none>"]
        return ImageMetadata(
            name=tags[0] if tags else image_ref,
            created_at=self.created or None,
        )
