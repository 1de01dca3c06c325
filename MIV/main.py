from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Core imports
from packages.miv_core.config import MIVConfig
from packages.miv_core.logging import get_logger
from packages.miv_core.errors import MIVBaseError

# API Routers
from MIV.api.health import router as health_router
from MIV.api.candidate import router as candidate_router
from MIV.api.session import router as session_router
from MIV.api.interviews import router as interviews_router
from MIV.api.reports import router as reports_router

# Configuration Load
config = MIVConfig.load()
logger = get_logger("MIV.main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {config.PROJECT_NAME} v{config.VERSION}...")
    if not config.GEMINI_API_KEY:
        logger.warning("Running with mock question/scoring providers")

    yield

    # Shutdown
    logger.info("Server shutting down...")

async def miv_error_handler(request: Request, exc: MIVBaseError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.warning(f"MIVBaseError ({exc.code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {"code": exc.code, "message": exc.message, "detail": exc.details},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )

def create_app() -> FastAPI:
    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
        docs_url="/docs",       # Dev only
        redoc_url=None
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],    # Allow all for now (Dev)
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MIVBaseError, miv_error_handler)

    # Routers
    app.include_router(health_router, prefix="", tags=["Status"])
    app.include_router(candidate_router, prefix="/api/v1")
    app.include_router(session_router, prefix="/api/v1")
    app.include_router(interviews_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("MIV.main:app", host="0.0.0.0", port=8000, reload=True)
