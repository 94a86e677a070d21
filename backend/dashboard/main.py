import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from dashboard.api import pages
from dashboard.api.pages import STATIC_DIR
from dashboard.api.router import api_router
from dashboard.config import get_settings
from dashboard.database import Database
from dashboard.exceptions import PersistenceError
from dashboard.limiter import limiter
from dashboard.services.provisioning import provision_tables

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: connection pool, then make sure the tables exist
    credentials = settings.database_credentials
    app.state.database = Database.from_credentials(
        credentials,
        use_ssl=settings.postgres_ssl,
        echo=settings.app_debug,
    )
    logger.info(
        "Using PostgreSQL %s@%s:%s/%s",
        credentials.user, credentials.host, credentials.port, credentials.database,
    )

    if settings.provision_on_startup:
        await provision_tables(app.state.database)

    yield
    # Shutdown; the pool may have been replaced by test-and-save
    await app.state.database.dispose()
    logger.info("Database pool closed")


app = FastAPI(
    title=settings.app_name,
    description="Meta Ads performance dashboard backend",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Attach rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": exc.message, "error_kind": exc.kind.value},
    )


# Global unhandled exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": str(exc) if settings.app_debug else "Internal server error",
        },
    )


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(pages.router)

# Settings page assets
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    import uvicorn

    uvicorn.run("dashboard.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
