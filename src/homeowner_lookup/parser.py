"""Normalize BatchData responses into a `HomeownerRecord`.

The provider answers the same query in one of two shapes:

* skip-trace: ``results.persons[]``; the first person is authoritative.
* property lookup: ``results.owner`` (or top-level ``owner``) with ``names[]``.

Each shape has its own extractor. Extractors run in order and earlier ones
win for scalar fields; list fields are merged and de-duplicated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from homeowner_lookup.models import EmailAddress, HomeownerRecord, PhoneNumber


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def parse_score(value: Any) -> int:
    """Integer confidence score; missing or non-numeric values are 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return int(value)
        except (OverflowError, ValueError):
            return 0
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _is_litigator(source: Dict[str, Any]) -> bool:
    if source.get("litigator"):
        return True
    return bool(_as_dict(source.get("dnc")).get("tcpa"))


def _emails(source: Dict[str, Any]) -> List[EmailAddress]:
    out: List[EmailAddress] = []
    for item in _as_list(source.get("emails")):
        if isinstance(item, str):
            if item.strip():
                out.append(EmailAddress(email=item.strip()))
        elif isinstance(item, dict) and _text(item.get("email")):
            out.append(EmailAddress(email=_text(item["email"]), tested=bool(item.get("tested"))))
    for item in _as_list(source.get("enrichedEmails")):
        if isinstance(item, dict) and _text(item.get("email")):
            out.append(EmailAddress(email=_text(item["email"]), tested=bool(item.get("tested"))))
    return out


def _phones(source: Dict[str, Any]) -> List[PhoneNumber]:
    out: List[PhoneNumber] = []
    for item in _as_list(source.get("phoneNumbers")):
        if not isinstance(item, dict):
            continue
        number = _text(item.get("number"))
        if not number:
            continue
        out.append(
            PhoneNumber(
                number=number,
                type=_text(item.get("type")) or "Unknown",
                carrier=_text(item.get("carrier")) or "Unknown",
                score=parse_score(item.get("score")),
                reachable=bool(item.get("reachable")),
                dnc=bool(item.get("dnc")),
                tested=bool(item.get("tested")),
                first_reported_date=_text(item.get("firstReportedDate")),
                last_reported_date=_text(item.get("lastReportedDate")),
            )
        )
    return out


@dataclass
class PartialHomeowner:
    """What one response shape contributed."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    emails: List[EmailAddress] = field(default_factory=list)
    phone_numbers: List[PhoneNumber] = field(default_factory=list)
    is_litigator: bool = False
    person_count: int = 0


class SkipTraceExtractor:
    name = "skip_trace"

    def extract(self, payload: Dict[str, Any]) -> Optional[PartialHomeowner]:
        persons = _as_list(_as_dict(payload.get("results")).get("persons"))
        if not persons:
            return None
        person = _as_dict(persons[0])
        name = person.get("name")
        if isinstance(name, dict):
            first, last, full = _text(name.get("first")), _text(name.get("last")), _text(name.get("full"))
        else:
            first, last, full = None, None, _text(name)
        return PartialHomeowner(
            first_name=first,
            last_name=last,
            full_name=full or _text(person.get("fullName")),
            emails=_emails(person),
            phone_numbers=_phones(person),
            is_litigator=_is_litigator(person),
            person_count=len(persons),
        )


class PropertyLookupExtractor:
    name = "property_lookup"

    def extract(self, payload: Dict[str, Any]) -> Optional[PartialHomeowner]:
        owner = _as_dict(_as_dict(payload.get("results")).get("owner")) or _as_dict(
            payload.get("owner")
        )
        if not owner:
            return None
        names = _as_list(owner.get("names"))
        primary = _as_dict(names[0]) if names else {}
        return PartialHomeowner(
            first_name=_text(primary.get("first")),
            last_name=_text(primary.get("last")),
            full_name=_text(owner.get("fullName")) or _text(primary.get("full")),
            emails=_emails(owner),
            phone_numbers=_phones(owner),
            is_litigator=_is_litigator(owner),
        )


EXTRACTORS = (SkipTraceExtractor(), PropertyLookupExtractor())


@dataclass(frozen=True)
class ParsedResponse:
    record: HomeownerRecord
    success: bool


def match_count(payload: Dict[str, Any]) -> int:
    meta = _as_dict(payload.get("meta"))
    if "matchCount" in meta:
        return parse_score(meta.get("matchCount"))
    nested = _as_dict(_as_dict(_as_dict(payload.get("results")).get("meta")).get("results"))
    return parse_score(nested.get("matchCount"))


def merge_partials(partials: Sequence[PartialHomeowner]) -> HomeownerRecord:
    first_name = last_name = full_name = None
    emails: List[EmailAddress] = []
    seen_emails = set()
    phones: List[PhoneNumber] = []
    seen_phones = set()
    is_litigator = False

    for part in partials:
        first_name = first_name or part.first_name
        last_name = last_name or part.last_name
        full_name = full_name or part.full_name
        is_litigator = is_litigator or part.is_litigator
        for email in part.emails:
            if email.email not in seen_emails:
                seen_emails.add(email.email)
                emails.append(email)
        for phone in part.phone_numbers:
            if phone.number not in seen_phones:
                seen_phones.add(phone.number)
                phones.append(phone)

    if not full_name and (first_name or last_name):
        full_name = " ".join(n for n in (first_name, last_name) if n)

    # sorted() is stable, so equal scores keep provider order.
    phones = sorted(phones, key=lambda p: p.score, reverse=True)
    return HomeownerRecord(
        first_name=first_name,
        last_name=last_name,
        full_name=full_name,
        emails=emails,
        phone_numbers=phones,
        is_litigator=is_litigator,
        has_dnc_phone=any(p.dnc for p in phones),
    )


def parse_response(payload: Any, extractors=EXTRACTORS) -> ParsedResponse:
    if not isinstance(payload, dict):
        return ParsedResponse(record=HomeownerRecord(), success=False)

    partials = []
    for extractor in extractors:
        part = extractor.extract(payload)
        if part is not None:
            partials.append(part)

    record = merge_partials(partials)
    # The provider's matchCount is not reliable on its own.
    success = (
        match_count(payload) > 0
        or any(p.person_count > 0 for p in partials)
        or record.has_name
        or bool(record.phone_numbers)
        or bool(record.emails)
    )
    return ParsedResponse(record=record, success=success)
