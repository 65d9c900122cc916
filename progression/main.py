import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from progression.database import init_db
from progression.config import get_settings
from progression.errors import ValidationError, InvariantViolation

# Import routers
from progression.routes import performance, goals, completion, animations, reset, progress

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Initialize database
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    await init_db()
    logger.info("Database initialized")
    logger.info("Character chain: %s", " -> ".join(settings.CHARACTER_CHAIN))
    yield
    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(performance.router)  # Interaction log + rolling metrics
app.include_router(goals.router)  # Team goals
app.include_router(completion.router)  # Completion status / mark complete
app.include_router(animations.router)  # Unlock animation status
app.include_router(reset.router)  # Reset one character
app.include_router(progress.router)  # Whole chain overview


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"error": "Storage unavailable, try again"})


@app.exception_handler(InvariantViolation)
async def invariant_error_handler(request: Request, exc: InvariantViolation):
    logger.critical("Invariant violated on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# Health check for API
@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("progression.main:app", host="0.0.0.0", port=8000, reload=True)
