from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from homeowner_lookup.models import LookupRequest


class LookupBody(BaseModel):
    """Inbound lookup payload.

    Every field is optional here so that missing address parts surface as a
    400 with the service's message rather than a 422.
    """

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    property_id: Optional[str] = Field(default=None, alias="propertyId")
    zpid: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    def to_request(self) -> LookupRequest:
        return LookupRequest.from_payload(
            {
                "propertyId": self.property_id or self.zpid,
                "street": self.street,
                "city": self.city,
                "state": self.state,
                "zip": self.zip,
            }
        )


class ErrorBody(BaseModel):
    error: str
    details: Optional[str] = None
