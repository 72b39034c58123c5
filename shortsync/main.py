"""
FastAPI entrypoint for the ShortSync API.

Assembly attempts normally run from the CLI (python -m shortsync.pipelines.run_assembly).
The API serves the persisted segment maps and alignment reports of each project
and can trigger a single attempt.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortsync import __version__
from shortsync.api.routes_segments import router as segments_router
from shortsync.core.config import Settings, settings
from shortsync.core.exceptions import ShortSyncError
from shortsync.core.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(app_settings: Settings) -> FastAPI:
    """
    Build the API application.

    Args:
        app_settings: Settings used for logging, CORS and the startup banner

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(log_level=app_settings.log_level, log_file=app_settings.log_file)
        logger.info(f"{app_settings.app_name} v{__version__} serving projects from {app_settings.workspace_root}")
        yield
        logger.info("Shutting down API")

    app = FastAPI(
        title=app_settings.app_name,
        version=__version__,
        description="Narration-to-clip alignment for short-form video assembly",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Restrict origins when exposed beyond localhost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ShortSyncError)
    async def shortsync_error_handler(request: Request, exc: ShortSyncError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc), "error": type(exc).__name__})

    app.include_router(segments_router)

    @app.get("/")
    async def root():
        return {
            "name": app_settings.app_name,
            "version": __version__,
            "endpoints": {
                "segments": "/projects/{project_id}/segments",
                "segments_detailed": "/projects/{project_id}/segments/detailed",
                "alignment": "/projects/{project_id}/alignment",
                "assemble": "/projects/{project_id}/assemble",
                "docs": "/docs",
            },
        }

    @app.get("/health")
    async def health():
        """Health check; also reports whether the workspace root is reachable."""
        return {"status": "healthy", "workspaceRootExists": Path(app_settings.workspace_root).is_dir()}

    return app


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shortsync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
