"""Secret Santa Web Application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from secret_santa.core.config import settings
from secret_santa.core.database import create_db_and_tables
from secret_santa.core.security import signing_key_configured
from secret_santa.errors import SantaError
from secret_santa.routes import admin, assignments, participants

# Configure logging
log_dir = Path(settings.log_dir).expanduser()
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Secret Santa application")
    create_db_and_tables()
    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD is not set; admin endpoints are unreachable")
    if not signing_key_configured():
        logger.warning("SECRET_KEY is empty or a placeholder; admin login is refused")
    elif "secret_key" not in settings.model_fields_set:
        logger.info("SECRET_KEY is not set; admin tokens are valid until restart")
    yield
    logger.info("Secret Santa application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Registers Secret Santa participants, draws who gives to whom and emails everyone their assignment",
    version="0.1.0",
    lifespan=lifespan,
)

origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SantaError)
async def santa_error_handler(request: Request, exc: SantaError):
    """Render domain errors as ``{"error": message}`` with their status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


app.include_router(admin.router)
app.include_router(participants.router)
app.include_router(assignments.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
