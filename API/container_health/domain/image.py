from dataclasses import dataclass


@dataclass(frozen=True)
class ImageMetadata:
    name: str = ""  # first repo tag, or the raw reference
    created_at: str | None = None  # as reported by the engine
