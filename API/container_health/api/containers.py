import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from container_health.core.config import get_settings
from container_health.core.errors import ContainerNotFoundError, EngineUnavailableError
from container_health.services.container_service import ContainerService
from container_health.services.docker_runtime import DockerSDKRuntime
from container_health.schemas.container import (
    ContainerFullResponse,
    ContainerSummaryResponse,
    ContainerUsageResponse,
)

logger = logging.getLogger(__name__)


@lru_cache
def get_container_service() -> ContainerService:
    # Built on first request so importing the app never needs a reachable engine
    settings = get_settings()
    return ContainerService(DockerSDKRuntime(settings), settings)


router = APIRouter(prefix="/docker/containers", tags=["containers"])


@router.get("", response_model=list[ContainerSummaryResponse])
async def list_containers(service: ContainerService = Depends(get_container_service)):
    try:
        records = await service.list_summaries()
    except EngineUnavailableError as e:
        logger.error("Container listing failed: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return [ContainerSummaryResponse.from_record(r) for r in records]


@router.get(
    "/full",
    response_model=list[ContainerFullResponse],
    summary="List containers with logs, client and session",
)
async def list_containers_full(service: ContainerService = Depends(get_container_service)):
    try:
        records = await service.list_full()
    except EngineUnavailableError as e:
        logger.error("Full container listing failed: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return [ContainerFullResponse.from_record(r) for r in records]


@router.get("/{container_id}/summary", response_model=ContainerUsageResponse)
async def get_container_summary(
    container_id: str,
    service: ContainerService = Depends(get_container_service),
):
    try:
        report = await service.get_usage(container_id)
    except ContainerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EngineUnavailableError as e:
        logger.error("Usage summary for %s failed: %s", container_id, e)
        raise HTTPException(status_code=503, detail=str(e))
    return ContainerUsageResponse.from_report(report)
