# container_health/services/container_service.py
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, TypeVar

from pydantic import ValidationError

from container_health.core.config import Settings
from container_health.core.errors import EngineError, EngineUnavailableError
from container_health.domain.container import (
    ContainerDescriptor,
    ContainerRecord,
    ContainerUsageReport,
    LogWindow,
)
from container_health.domain.ports import EngineClient
from container_health.schemas.engine import (
    EngineContainer,
    EngineContainerInspect,
    parse_stats,
)
from container_health.services.identity import extract_identity
from container_health.services.image_resolver import ImageResolver
from container_health.services.log_sanitizer import to_log_window
from container_health.services.state_fusion import StateFusionEngine
from container_health.services.usage_stats import UsageStatsCalculator

logger = logging.getLogger(__name__)

T = TypeVar("T")

# The light listing only needs the most recent line for the health heuristic.
SUMMARY_MODE_TAIL = 1


class ListMode(str, Enum):
    SUMMARY = "summary"
    FULL = "full"


class ContainerService:
    def __init__(
        self,
        engine: EngineClient,
        settings: Optional[Settings] = None,
        fusion: Optional[StateFusionEngine] = None,
        image_resolver: Optional[ImageResolver] = None,
        calculator: Optional[UsageStatsCalculator] = None,
    ):
        self.engine = engine
        self.settings = settings or Settings()
        self.fusion = fusion or StateFusionEngine(
            fail_closed=self.settings.FAIL_CLOSED_ON_SILENT_LOGS,
            not_started_markers=self.settings.NOT_STARTED_MARKERS,
        )
        self.image_resolver = image_resolver or ImageResolver(engine)
        self.calculator = calculator or UsageStatsCalculator()

    # -------------------------------
    # Listing
    # -------------------------------
    async def list_containers(self, mode: ListMode = ListMode.SUMMARY) -> List[ContainerRecord]:
        """
        Process every container known to the engine, stopped ones included.

        Containers are handled concurrently, at most MAX_CONCURRENCY at a time.
        A container whose processing raises or exceeds TASK_TIMEOUT_SECONDS is
        logged and left out; only the initial list call can fail the request.
        Results keep the engine's enumeration order.
        """
        descriptors = await self._list_descriptors()
        semaphore = asyncio.Semaphore(self.settings.MAX_CONCURRENCY)

        async def bounded(descriptor: ContainerDescriptor) -> Optional[ContainerRecord]:
            async with semaphore:
                return await self._isolate(descriptor, self._process(descriptor, mode))

        results = await asyncio.gather(*(bounded(d) for d in descriptors))
        records = [r for r in results if r is not None]

        logger.info(
            "Listed %d/%d containers (mode=%s)", len(records), len(descriptors), mode.value
        )
        return records

    async def list_summaries(self) -> List[ContainerRecord]:
        return await self.list_containers(ListMode.SUMMARY)

    async def list_full(self) -> List[ContainerRecord]:
        return await self.list_containers(ListMode.FULL)

    # -------------------------------
    # Single container usage
    # -------------------------------
    async def get_usage(self, container_id: str) -> ContainerUsageReport:
        """
        CPU/memory usage plus the latest log lines of one container.
        Raises ContainerNotFoundError for an unknown id. Stats and logs are
        best effort and fall back to zero values / no lines.
        """
        payload = await self.engine.inspect_container(container_id)
        try:
            descriptor = EngineContainerInspect.model_validate(payload).to_descriptor()
        except ValidationError as exc:
            raise EngineUnavailableError(f"Unreadable inspect payload for {container_id}") from exc

        window, figures = await asyncio.gather(
            self._usage_logs(descriptor.id),
            self._usage_figures(descriptor.id),
        )

        return ContainerUsageReport(
            id=descriptor.id,
            image=descriptor.image,
            state=descriptor.state,
            created_at=descriptor.created_at,
            last_logs=window.lines,
            **figures,
        )

    # -------------------------------
    # Internal methods
    # -------------------------------
    async def _list_descriptors(self) -> List[ContainerDescriptor]:
        entries = await self.engine.list_containers(include_stopped=True)
        descriptors = []
        for entry in entries:
            try:
                descriptors.append(EngineContainer.model_validate(entry).to_descriptor())
            except ValidationError as exc:
                logger.error("Skipping unreadable container entry %r: %s", entry, exc)
        return descriptors

    async def _isolate(
        self, descriptor: ContainerDescriptor, work: Awaitable[T]
    ) -> Optional[T]:
        try:
            return await asyncio.wait_for(work, timeout=self.settings.TASK_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.error(
                "Timed out after %.1fs processing container %s (%s)",
                self.settings.TASK_TIMEOUT_SECONDS, descriptor.id, descriptor.name,
            )
        except Exception:
            logger.error(
                "Failed processing container %s (%s)", descriptor.id, descriptor.name,
                exc_info=True,
            )
        return None

    async def _process(self, descriptor: ContainerDescriptor, mode: ListMode) -> ContainerRecord:
        if mode is ListMode.FULL:
            window, image = await asyncio.gather(
                self._fetch_window(descriptor.id, self.settings.LOG_TAIL_LINES),
                self.image_resolver.resolve(descriptor.image),
            )
            identity = extract_identity(window.lines)
        else:
            window = await self._fetch_window(descriptor.id, SUMMARY_MODE_TAIL)
            image = None
            identity = None

        health = self.fusion.fuse(descriptor.engine_running, window, descriptor.status)
        return ContainerRecord(
            descriptor=descriptor,
            health=health,
            logs=window,
            identity=identity,
            image=image,
        )

    async def _fetch_window(self, container_id: str, tail: int) -> LogWindow:
        raw = await self.engine.logs(container_id, tail=tail, stdout=True, stderr=True)
        return to_log_window(raw, tail)

    async def _usage_logs(self, container_id: str) -> LogWindow:
        return await self._best_effort(
            lambda: self._fetch_window(container_id, self.settings.SUMMARY_LOG_TAIL),
            LogWindow(),
            f"Could not fetch logs for container {container_id}",
        )

    async def _usage_figures(self, container_id: str) -> dict:
        async def compute() -> dict:
            snapshot = parse_stats(await self.engine.stats(container_id))
            return self.calculator.format(self.calculator.compute(snapshot))

        return await self._best_effort(
            compute,
            self.calculator.format_unavailable(),
            f"Could not compute usage for container {container_id}",
        )

    async def _best_effort(self, fetch: Callable[[], Awaitable[T]], fallback: T, message: str) -> T:
        try:
            return await fetch()
        except EngineError as exc:
            logger.warning("%s: %s", message, exc)
            return fallback
