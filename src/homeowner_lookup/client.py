from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from homeowner_lookup.config import DEFAULT_BATCH_DATA_API_URL
from homeowner_lookup.errors import ProviderError, ServiceNotConfigured


logger = logging.getLogger("hl.client")


class BatchDataClient:
    """Skip-trace client for the BatchData property endpoint.

    One request per call: no retry, no backoff, and no timeout beyond the
    httpx default.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BATCH_DATA_API_URL,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._http = http
        self._owns_http = http is None

    def _client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client()
        return self._http

    def close(self) -> None:
        if self._http is not None and self._owns_http:
            self._http.close()
            self._http = None

    @staticmethod
    def build_payload(street: str, city: str, state: str, zip_code: str) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "propertyAddress": {
                        "street": street,
                        "city": city,
                        "state": state,
                        "zip": zip_code,
                    }
                }
            ]
        }

    def skip_trace(self, street: str, city: str, state: str, zip_code: str) -> Dict[str, Any]:
        if not self.api_key:
            raise ServiceNotConfigured("Homeowner lookup service not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = self.build_payload(street, city, state, zip_code)
        try:
            resp = self._client().post(self.base_url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("BatchData request failed: %s", exc)
            raise ProviderError(f"BatchData request failed: {exc}") from exc

        if not resp.is_success:
            logger.error("BatchData API error: %s - %s", resp.status_code, resp.text[:500])
            raise ProviderError(
                f"BatchData API returned {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("BatchData returned non-JSON body: %s", resp.text[:500])
            raise ProviderError("BatchData returned a non-JSON response") from exc
        logger.info("BatchData API response received")
        return data
