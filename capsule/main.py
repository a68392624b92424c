"""Capsule Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capsule.config import settings
from capsule.database import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield


app = FastAPI(
    title="Capsule",
    description="Shared photo albums: membership, roles and invites",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register API routers ---
from capsule.api.errors import register_error_handlers  # noqa: E402
from capsule.api.albums import router as albums_router  # noqa: E402
from capsule.api.members import router as members_router  # noqa: E402
from capsule.api.invites import router as invites_router  # noqa: E402
from capsule.api.join_requests import router as join_requests_router  # noqa: E402

API_PREFIX = "/api/v1"

register_error_handlers(app)
app.include_router(albums_router, prefix=API_PREFIX)
app.include_router(members_router, prefix=API_PREFIX)
app.include_router(invites_router, prefix=API_PREFIX)
app.include_router(join_requests_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}
