"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from activitycore.api.routes import activities, athletes
from activitycore.db.engine import get_engine, init_db


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the API.

    Args:
        engine: database to bootstrap on startup; the configured one when
            omitted. Request sessions still come from the get_session
            dependency, so callers swapping databases override that too.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine or get_engine())
        yield

    app = FastAPI(
        title="Activity Core API",
        description="Activity file ingestion, best efforts and training load",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(activities.router, prefix="/activities", tags=["activities"])
    app.include_router(athletes.router, prefix="/athletes", tags=["athletes"])
    return app


# uvicorn activitycore.api.main:app
app = create_app()
