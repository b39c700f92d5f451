import logging

from container_health.domain.image import ImageMetadata
from container_health.domain.ports import EngineClient
from container_health.schemas.engine import EngineImageInspect

logger = logging.getLogger(__name__)


class ImageResolver:
    """Best-effort lookup of an image's tag and creation time."""

    def __init__(self, engine: EngineClient):
        self.engine = engine

    async def resolve(self, image_ref: str) -> ImageMetadata:
        """
        Never raises: any failure (engine down, unknown image, odd payload)
        yields the raw reference and no timestamp.
        """
        try:
            payload = await self.engine.inspect_image(image_ref)
            return EngineImageInspect.model_validate(payload).to_metadata(image_ref)
        except Exception as exc:
            logger.warning("Could not resolve image %s: %s", image_ref, exc)
            return ImageMetadata(name=image_ref, created_at=None)
