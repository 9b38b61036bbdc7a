"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from bundletrack.bundles.sequence import SequenceCounter
from bundletrack.config import get_settings
from bundletrack.db.database import SessionLocal, init_db

logger = logging.getLogger(__name__)

settings = get_settings()


def init_counter() -> None:
    """Seed the bundle counter if it has never been set."""
    db = SessionLocal()
    try:
        SequenceCounter(db).ensure_initialized(settings.counter_initial_value)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not initialize bundle counter: {e}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events.

    Args:
        app: FastAPI application instance.
    """
    # Startup
    init_db()
    init_counter()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Bundle tracking for the production floor: numbering, labels, moves and returns",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request data as 400, like service validation errors."""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Import and include routers
from bundletrack.bundles.router import router as bundles_router
from bundletrack.die_mutation.router import router as die_mutation_router
from bundletrack.labels.router import router as labels_router
from bundletrack.moves.router import router as moves_router
from bundletrack.variants.router import router as variants_router

# API routes
app.include_router(labels_router, prefix="/api/bundle", tags=["labels"])
app.include_router(bundles_router, prefix="/api/bundle", tags=["bundles"])
app.include_router(variants_router, prefix="/api/variant", tags=["variants"])
app.include_router(moves_router, prefix="/api", tags=["moves"])
app.include_router(die_mutation_router, prefix="/api/die-mutation", tags=["die-mutation"])


@app.get("/api")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Status code of the service.
    """
    return {"status": 200}
