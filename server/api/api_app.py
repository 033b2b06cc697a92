"""FastAPI application entry point for the filing bridge API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
from server.api.routers.RecordRouter import record_router
from server.api.routers.SessionRouter import session_router
from services.filing_records.RecordService import RecordService
from shared.clients.backend.BackendClientManager import BackendClientManager
from shared.clients.store.StoreClientManager import StoreClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging

app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = setup_logging()
    app.state.config = HelperConfig(logger=app.state.logging)

    # Initialise clients
    store_client = StoreClientManager(helper_config=app.state.config).get_client()
    backend_client = BackendClientManager(helper_config=app.state.config).get_client()
    async with store_client, backend_client:
        # Health checks: the store is required, the backend is only needed for validation
        await store_client.do_healthcheck()
        try:
            await backend_client.do_healthcheck()
        except httpx.HTTPError as e:
            app.state.logging.warning("Backend %s is not reachable yet: %s", backend_client.get_engine_name(), e)

        # Wire up services
        app.state.record_service = RecordService(
            helper_config=app.state.config,
            store_client=store_client,
            backend_client=backend_client,
        )

        app.state.logging.info("Filing bridge API ready (store: %s, backend: %s).", store_client.get_engine_name(), backend_client.get_engine_name())
        yield

    app.state.logging.info("Filing bridge API shut down.")


app = FastAPI(
    title="Filing Pipeline Bridge",
    description="Session, record and validation API for regulatory filing extraction.",
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session_router)
app.include_router(record_router)


# Server Start
if __name__ == "__main__":
    # start server
    import uvicorn
    logging = setup_logging()
    port = int(os.getenv("API_PORT", "8000"))
    logging.info("Starting filing bridge API server v%s on port %d...", app_version, port)
    uvicorn.run(app, host="0.0.0.0", port=port)
