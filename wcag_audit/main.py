import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wcag_audit.api_routers.v1 import api_router
from wcag_audit.features.analysis.dependencies import get_dispatcher
from wcag_audit.features.analysis.routes.fixtures import router as fixtures_router
from wcag_audit.features.health.routes.health import router as health_router
from wcag_audit.platform.config import settings
from wcag_audit.platform.db.session import init_models
from wcag_audit.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield
    # Let in-flight analyses reach a terminal status before the loop goes away
    await get_dispatcher().drain(timeout=settings.SHUTDOWN_GRACE_SECONDS)


app = FastAPI(
    title="WCAG Audit API",
    description="Asynchronous accessibility analysis of web pages",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "WCAG Audit API",
        "description": "Fetches a page and checks it against a set of WCAG rules.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
        "progress_ws": "/api/v1/ws/analyses",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")

if settings.ENABLE_TEST_FIXTURES:
    app.include_router(fixtures_router)
