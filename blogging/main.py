import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogging.config import settings
from blogging.database import engine
from blogging.error_handlers import setup_exception_handlers
from blogging.middleware import DiagnosticsMiddleware
from blogging.routers import posts
from blogging.schemas import HealthResponse

VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the schema is managed by Alembic, nothing to create here.
    logger.info("Blogging API starting (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Blogging API",
    description="Short-form posts with normalised tags and substring search",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(DiagnosticsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Routers
app.include_router(posts.router)


@app.get("/health", response_model=HealthResponse)
async def health():
    return {"status": "healthy", "version": VERSION}
