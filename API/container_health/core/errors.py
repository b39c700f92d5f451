class EngineError(Exception):
    """Base class for failures talking to the container engine."""


class EngineUnavailableError(EngineError):
    """The engine could not be reached or a stream read failed."""


class ContainerNotFoundError(EngineError):
    def __init__(self, container_id: str):
        super().__init__(f"Container {container_id} not found")
        self.container_id = container_id


class StatsParseError(EngineError):
    """The stats payload did not have the expected shape."""
