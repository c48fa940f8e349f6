from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .app.api import workflow
from .app.core.config import get_settings
from .app.core.dependencies import get_workflow_controller
from .app.core.logging import configure_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info("Starting Image Compression Client...")

    Path(settings.absolute_download_dir).mkdir(parents=True, exist_ok=True)
    logger.info(
        f"Analysis service: {settings.ANALYSIS_SERVICE_URL}, "
        f"compression service: {settings.COMPRESSION_SERVICE_URL}"
    )

    logger.info("Image Compression Client startup complete")

    yield

    logger.info("Shutting down Image Compression Client...")

    await get_workflow_controller().shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(workflow.router, prefix="/api", tags=["workflow"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "compression_client"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
    )


if __name__ == "__main__":
    run()
