"""
Entry point for the GreenRatchet projection API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api.routes import router
from api.security import InternalAuthMiddleware
from config import HEALTH_PATH, settings
from database import connection_test, dispose_database, init_database, init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.database_url:
        init_database(settings.database_url)
        init_db()
        log.info("Database initialized")
    else:
        log.warning("GREENRATCHET_DATABASE_URL is not set; timeline queries will fail")
    try:
        yield
    finally:
        dispose_database()


app = FastAPI(
    title="GreenRatchet Projections",
    description="Monthly cumulative ESG metric timelines with linear-trend projections.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(InternalAuthMiddleware)
app.include_router(router, prefix="/api/v1")


@app.get(HEALTH_PATH, tags=["health"], summary="Database readiness probe")
async def ready() -> JSONResponse:
    connected = await asyncio.to_thread(connection_test)
    code = 200 if connected else 503
    return JSONResponse(
        status_code=code,
        content={"ready": connected, "database": "connected" if connected else "unavailable"},
    )


if __name__ == "__main__":
    uvicorn_kwargs = {
        "host": settings.host,
        "port": settings.port,
        "log_level": settings.log_level,
        "access_log": True,
    }
    if settings.ssl_enabled:
        uvicorn_kwargs["ssl_certfile"] = settings.ssl_certfile
        uvicorn_kwargs["ssl_keyfile"] = settings.ssl_keyfile

    uvicorn.run(
        "main:app",
        **uvicorn_kwargs,
    )
