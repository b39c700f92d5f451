import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import docker
from docker.errors import NotFound, DockerException
from requests.exceptions import RequestException

from container_health.core.config import Settings
from container_health.core.errors import ContainerNotFoundError, EngineUnavailableError
from container_health.domain.ports import EngineClient

logger = logging.getLogger(__name__)


class DockerSDKRuntime(EngineClient):
    """
    Read-only access to the Docker engine through the SDK's low-level API client.
    Every SDK call blocks, so it runs in a worker thread.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[docker.DockerClient] = None):
        settings = settings or Settings()
        if client is not None:
            self.docker_client = client
        elif settings.DOCKER_BASE_URL:
            self.docker_client = docker.DockerClient(
                base_url=settings.DOCKER_BASE_URL, timeout=settings.DOCKER_TIMEOUT
            )
        else:
            self.docker_client = docker.from_env(timeout=settings.DOCKER_TIMEOUT)

    async def _call(self, func: Callable[..., Any], *args, not_found: Optional[str] = None, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except NotFound as exc:
            if not_found is not None:
                raise ContainerNotFoundError(not_found) from exc
            raise EngineUnavailableError(f"Engine returned 404: {exc}") from exc
        except (DockerException, RequestException) as exc:
            raise EngineUnavailableError(f"Docker engine call failed: {exc}") from exc

    # -------------------------------
    # Containers
    # -------------------------------
    async def list_containers(self, include_stopped: bool = True) -> List[Dict[str, Any]]:
        containers = await self._call(self.docker_client.api.containers, all=include_stopped)
        logger.debug("Engine listed %d containers", len(containers))
        return containers

    async def inspect_container(self, container_id: str) -> Dict[str, Any]:
        return await self._call(
            self.docker_client.api.inspect_container, container_id, not_found=container_id
        )

    async def logs(
        self,
        container_id: str,
        *,
        tail: int,
        stdout: bool = True,
        stderr: bool = True,
    ) -> bytes:
        # Non-tty streams come back already demultiplexed by the SDK.
        return await self._call(
            self.docker_client.api.logs,
            container_id,
            stdout=stdout,
            stderr=stderr,
            stream=False,
            follow=False,
            tail=tail,
            not_found=container_id,
        )

    async def stats(self, container_id: str) -> Dict[str, Any]:
        return await self._call(
            self.docker_client.api.stats, container_id, stream=False, not_found=container_id
        )

    # -------------------------------
    # Images
    # -------------------------------
    async def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        return await self._call(self.docker_client.api.inspect_image, image_ref)

    def close(self) -> None:
        self.docker_client.close()
