import hashlib
from typing import Optional


_KEY_LENGTH = 32
_DELIMITER = "|"


def normalize_field(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def address_hash(
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str],
) -> str:
    """Stable cache key for a street/city/state/zip tuple.

    Case and surrounding whitespace do not change the key. Empty fields still
    yield a key; callers validate before hashing.
    """
    seed = _DELIMITER.join(normalize_field(v) for v in (street, city, state, zip_code))
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:_KEY_LENGTH]
