import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from container_health.api import containers
from container_health.core.config import Settings, get_settings
from container_health.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Container Health Dashboard API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(containers.router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    # ---------- Startup / Shutdown ----------

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "[STARTUP] max concurrency=%d, task timeout=%.1fs, fail closed on silent logs=%s",
            settings.MAX_CONCURRENCY,
            settings.TASK_TIMEOUT_SECONDS,
            settings.FAIL_CLOSED_ON_SILENT_LOGS,
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        # Only close a client that was actually created
        if containers.get_container_service.cache_info().currsize:
            containers.get_container_service().engine.close()
            logger.info("[SHUTDOWN] Docker client closed")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("container_health.main:app", host="0.0.0.0", port=8000)
