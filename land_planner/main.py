"""
Land Planner API.

Wires the layout, analysis and capture routers onto a FastAPI app with
logging, CORS, rate limiting and the global error handler.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from land_planner.config import settings
from land_planner.api.dependencies import get_layout_planner
from land_planner.api.limiter import limiter
from land_planner.middleware.error_handler import ErrorHandlerMiddleware
from land_planner.api.v1.routers import analyses, capture, layouts

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared planner on startup and drop its memo cache on shutdown."""
    planner = get_layout_planner()
    logger.info(f"Starting {settings.app_name} v{settings.app_version} "
                f"(log level {settings.log_level})")
    logger.info(f"Layout defaults: buffer={planner.config.buffer_distance}m, "
                f"spacing={settings.layout_default_spacing}m, "
                f"scale={settings.layout_default_scale}m/unit, "
                f"cache={planner.config.cache_size} analyses")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    info = planner.cache_info()
    logger.info(f"Shutting down; layout cache served {info.hits} hits, {info.misses} misses")
    planner.clear_cache()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Land Boundary and Tree Layout Planning API

    Trace a land boundary and get an optimal tree-planting layout together
    with economic and environmental projections.

    ## Features

    - **Boundary Capture**: Snapping, clamping, vertex selection and bounded
      undo/redo over explicit capture state
    - **Geometry**: Area, perimeter and inward buffering of simple polygons
    - **Tree Layout**: Grid enumeration inside the buffered boundary,
      clear of every edge
    - **Terrain**: Deterministic elevation, soil and sun exposure per tree
    - **Metrics**: Yield, water, carbon, maintenance cost, revenue and ROI
    - **Record Regeneration**: Recompute stored analyses and check consistency

    ## Units

    Boundary coordinates are working units (canvas pixels). `scale` gives
    meters per unit; spacing and buffer distances are in meters.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ErrorHandlerMiddleware)

for router in (layouts.router, analyses.router, capture.router):
    app.include_router(router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """Service name, version and status."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check with layout cache usage.

    Returns:
        Status and the number of memoized analyses
    """
    info = get_layout_planner().cache_info()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "cachedAnalyses": info.currsize,
    }
