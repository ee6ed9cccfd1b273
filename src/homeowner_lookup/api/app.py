from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from homeowner_lookup.api.routes.lookup import error_response
from homeowner_lookup.api.routes.lookup import router as lookup_router
from homeowner_lookup.client import BatchDataClient
from homeowner_lookup.config import Settings, get_settings
from homeowner_lookup.service import HomeownerLookupService
from homeowner_lookup.storage import HomeownerLookupSQLite


CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def health():
    return {"status": "ok"}


async def _invalid_body(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request body")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[HomeownerLookupSQLite] = None,
    client=None,
) -> FastAPI:
    """Build the API around one settings object.

    Serve with ``uvicorn --factory homeowner_lookup.api.app:create_app``.
    """

    settings = settings or get_settings()
    store = store or HomeownerLookupSQLite(settings.db_path)
    client = client or BatchDataClient(
        settings.batch_data_api_key, settings.batch_data_api_url
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger("hl.startup")
        logger.info(
            "startup: db=%s provider_url=%s provider_configured=%s",
            settings.db_path,
            settings.batch_data_api_url,
            settings.provider_configured,
        )
        try:
            yield
        finally:
            store.close()
            close = getattr(client, "close", None)
            if close is not None:
                close()

    app = FastAPI(title="homeowner-lookup", lifespan=lifespan)
    app.state.settings = settings
    app.state.lookup_service = HomeownerLookupService(settings, store, client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=CORS_HEADERS,
    )
    app.add_exception_handler(RequestValidationError, _invalid_body)
    app.include_router(lookup_router, prefix="/api")

    app.get("/health")(health)

    return app
