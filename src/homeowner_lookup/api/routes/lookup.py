from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from homeowner_lookup.api.schemas import ErrorBody, LookupBody
from homeowner_lookup.errors import InvalidRequest, ProviderError, ServiceNotConfigured
from homeowner_lookup.service import HomeownerLookupService


router = APIRouter(tags=["homeowner-lookup"])
logger = logging.getLogger("hl.api")


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorBody(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def _service(request: Request) -> HomeownerLookupService:
    return request.app.state.lookup_service


@router.post("/homeowner-lookup")
def homeowner_lookup(request: Request, payload: Any = Body(default=None)):
    service = _service(request)
    if not service.settings.provider_configured:
        logger.error("BATCH_DATA_API_KEY not configured")
        return error_response(500, "Homeowner lookup service not configured")

    if not isinstance(payload, dict):
        return error_response(400, "Request body must be a JSON object")
    try:
        lookup_request = LookupBody.model_validate(payload).to_request()
    except ValidationError:
        return error_response(400, "Invalid request body")

    try:
        outcome = service.lookup(lookup_request)
    except InvalidRequest as exc:
        return error_response(400, str(exc))
    except ServiceNotConfigured as exc:
        return error_response(500, str(exc))
    except ProviderError as exc:
        return error_response(502, "Failed to lookup homeowner information", exc.details)
    except Exception as exc:
        logger.exception("Error in homeowner lookup")
        return error_response(500, "Internal server error", str(exc))

    return outcome.to_dict()


@router.get("/homeowner-lookup/cache/{property_id}")
def homeowner_lookup_cache(request: Request, property_id: str):
    outcome = _service(request).check_cache(property_id)
    if outcome is None:
        return error_response(404, "No cached homeowner information for this property")
    return outcome.to_dict()
