from typing import Any, Dict, List, Protocol


class EngineClient(Protocol):
    # -------------------------------
    # Containers
    # -------------------------------
    async def list_containers(self, include_stopped: bool = True) -> List[Dict[str, Any]]:
        """Return the engine's container list entries, in engine order."""
        ...

    async def inspect_container(self, container_id: str) -> Dict[str, Any]:
        """Return the inspect payload. Raises ContainerNotFoundError."""
        ...

    async def logs(
        self,
        container_id: str,
        *,
        tail: int,
        stdout: bool = True,
        stderr: bool = True,
    ) -> bytes:
        """Return the last `tail` log lines (not followed)."""
        ...

    async def stats(self, container_id: str) -> Dict[str, Any]:
        """Return a single, non-streamed stats snapshot."""
        ...

    # -------------------------------
    # Images
    # -------------------------------
    async def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        """Return the image inspect payload (RepoTags, Created, ...)."""
        ...

    def close(self) -> None:
        ...
