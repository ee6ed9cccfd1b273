from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class EmailAddress:
    email: str
    tested: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "tested": bool(self.tested)}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "EmailAddress":
        return cls(email=str(raw.get("email") or ""), tested=bool(raw.get("tested")))


@dataclass(frozen=True)
class PhoneNumber:
    number: str
    type: str = "Unknown"
    carrier: str = "Unknown"
    score: int = 0
    reachable: bool = False
    dnc: bool = False
    tested: bool = False
    first_reported_date: Optional[str] = None
    last_reported_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "number": self.number,
            "type": self.type,
            "carrier": self.carrier,
            "score": int(self.score),
            "reachable": bool(self.reachable),
            "dnc": bool(self.dnc),
            "tested": bool(self.tested),
        }
        if self.first_reported_date is not None:
            out["firstReportedDate"] = self.first_reported_date
        if self.last_reported_date is not None:
            out["lastReportedDate"] = self.last_reported_date
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PhoneNumber":
        try:
            score = int(raw.get("score") or 0)
        except (TypeError, ValueError):
            score = 0
        return cls(
            number=str(raw.get("number") or ""),
            type=str(raw.get("type") or "Unknown"),
            carrier=str(raw.get("carrier") or "Unknown"),
            score=score,
            reachable=bool(raw.get("reachable")),
            dnc=bool(raw.get("dnc")),
            tested=bool(raw.get("tested")),
            first_reported_date=raw.get("firstReportedDate"),
            last_reported_date=raw.get("lastReportedDate"),
        )


@dataclass(frozen=True)
class HomeownerRecord:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    emails: List[EmailAddress] = field(default_factory=list)
    phone_numbers: List[PhoneNumber] = field(default_factory=list)
    is_litigator: bool = False
    has_dnc_phone: bool = False

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name or self.full_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "emails": [e.to_dict() for e in self.emails],
            "phoneNumbers": [p.to_dict() for p in self.phone_numbers],
            "isLitigator": bool(self.is_litigator),
            "hasDncPhone": bool(self.has_dnc_phone),
        }


@dataclass(frozen=True)
class CachedLookup:
    """One row of the homeowner lookup cache, keyed by `address_hash`."""

    address_hash: str
    street: str
    city: str
    state: str
    zip: str
    homeowner: HomeownerRecord
    lookup_successful: bool
    property_id: Optional[str] = None
    raw_response: Any = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class LookupRequest:
    street: str
    city: str
    state: str
    zip: str
    property_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LookupRequest":
        def _text(key: str) -> str:
            value = payload.get(key)
            return "" if value is None else str(value).strip()

        property_id = payload.get("propertyId") or payload.get("zpid")
        return cls(
            street=_text("street"),
            city=_text("city"),
            state=_text("state"),
            zip=_text("zip"),
            property_id=str(property_id).strip() if property_id else None,
        )


@dataclass(frozen=True)
class LookupOutcome:
    record: HomeownerRecord
    success: bool
    from_cache: bool
    cached_at: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["fromCache"] = self.from_cache
        if self.cached_at is not None:
            data["cachedAt"] = self.cached_at
        out: Dict[str, Any] = {"success": self.success, "data": data}
        if self.message is not None:
            out["message"] = self.message
        return out
