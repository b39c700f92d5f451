import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the package logger.
    Calling it again only updates the level.
    """
    package_logger = logging.getLogger("container_health")
    package_logger.setLevel(level.upper())

    if not any(getattr(h, "_container_health", False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._container_health = True
        package_logger.addHandler(handler)
