import re
from typing import Any, Optional

from homeowner_lookup.parser import parse_score


_NON_DIGIT_RE = re.compile(r"\D")


def format_phone_number(number: Optional[str]) -> str:
    if not number:
        return ""
    digits = _NON_DIGIT_RE.sub("", number)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    elif len(digits) != 10:
        return number
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def score_tier(score: Any) -> str:
    value = parse_score(score)
    if value >= 80:
        return "high"
    if value >= 60:
        return "good"
    if value >= 40:
        return "fair"
    return "low"


def phone_type_kind(phone_type: Optional[str]) -> str:
    lowered = (phone_type or "").lower()
    if "mobile" in lowered:
        return "mobile"
    if "land" in lowered:
        return "landline"
    return "other"
