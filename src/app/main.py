"""Toronto Attractions API.

Main FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.config import settings
from app.routers import attractions_router
from catalogue import DocumentStore, FeatureRepository


def create_repository() -> FeatureRepository:
    """Build the repository over the configured GeoJSON document."""
    store = DocumentStore(
        settings.geojson_path,
        default_name=settings.default_collection_name,
        default_crs_name=settings.default_crs_name,
        serialize_writes=settings.serialize_writes,
    )
    return FeatureRepository(store)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} - INITIALIZING")
    logger.info("=" * 60)

    repo = create_repository()
    repo.store.bootstrap()
    app.state.repository = repo
    logger.info(f"Catalogue: {len(repo.get_all())} attractions in {repo.store.path}")

    logger.info(f"  {settings.app_name} running on port {settings.port}")
    yield
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Places of interest and attractions catalogue",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(attractions_router)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    """Log unexpected failures and answer with a 500."""
    logger.opt(exception=exc).error(
        f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}"
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.1.0",
        "service": settings.app_name,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
