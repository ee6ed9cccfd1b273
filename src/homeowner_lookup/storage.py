from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from homeowner_lookup.models import (
    CachedLookup,
    EmailAddress,
    HomeownerRecord,
    PhoneNumber,
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class HomeownerLookupSQLite:
    """SQLite persistence for skip-trace results.

    One row per address hash; writes are upserts so the last write wins.
    """

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS homeowner_lookups (
                address_hash TEXT PRIMARY KEY,
                property_id TEXT,
                address_street TEXT NOT NULL DEFAULT '',
                address_city TEXT NOT NULL DEFAULT '',
                address_state TEXT NOT NULL DEFAULT '',
                address_zip TEXT NOT NULL DEFAULT '',
                homeowner_first_name TEXT,
                homeowner_last_name TEXT,
                homeowner_full_name TEXT,
                emails_json TEXT NOT NULL DEFAULT '[]',
                phone_numbers_json TEXT NOT NULL DEFAULT '[]',
                is_litigator INTEGER NOT NULL DEFAULT 0,
                has_dnc_phone INTEGER NOT NULL DEFAULT 0,
                raw_response_json TEXT,
                lookup_successful INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_homeowner_lookups_property_id ON homeowner_lookups(property_id)"
        )
        self.conn.commit()

    @staticmethod
    def _load_list(raw: Optional[str]) -> List[Any]:
        if not raw:
            return []
        try:
            value = json.loads(raw)
        except ValueError:
            return []
        return value if isinstance(value, list) else []

    def _row_to_record(self, row: sqlite3.Row) -> CachedLookup:
        emails = [
            EmailAddress.from_dict(e)
            for e in self._load_list(row["emails_json"])
            if isinstance(e, dict)
        ]
        phones = [
            PhoneNumber.from_dict(p)
            for p in self._load_list(row["phone_numbers_json"])
            if isinstance(p, dict)
        ]
        raw_response = None
        if row["raw_response_json"]:
            try:
                raw_response = json.loads(row["raw_response_json"])
            except ValueError:
                raw_response = None
        homeowner = HomeownerRecord(
            first_name=row["homeowner_first_name"],
            last_name=row["homeowner_last_name"],
            full_name=row["homeowner_full_name"],
            emails=emails,
            phone_numbers=phones,
            is_litigator=bool(int(row["is_litigator"])),
            has_dnc_phone=bool(int(row["has_dnc_phone"])),
        )
        return CachedLookup(
            address_hash=str(row["address_hash"]),
            property_id=row["property_id"],
            street=str(row["address_street"] or ""),
            city=str(row["address_city"] or ""),
            state=str(row["address_state"] or ""),
            zip=str(row["address_zip"] or ""),
            homeowner=homeowner,
            lookup_successful=bool(int(row["lookup_successful"])),
            raw_response=raw_response,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get(self, address_hash: str) -> Optional[CachedLookup]:
        row = self.conn.execute(
            "SELECT * FROM homeowner_lookups WHERE address_hash=?",
            (address_hash,),
        ).fetchone()
        if not row:
            return None
        return self._row_to_record(row)

    def get_by_property_id(self, property_id: str) -> Optional[CachedLookup]:
        row = self.conn.execute(
            "SELECT * FROM homeowner_lookups WHERE property_id=? ORDER BY updated_at DESC LIMIT 1",
            (property_id,),
        ).fetchone()
        if not row:
            return None
        return self._row_to_record(row)

    def find(
        self, address_hash: str, property_id: Optional[str] = None
    ) -> Optional[CachedLookup]:
        if property_id:
            found = self.get_by_property_id(property_id)
            if found is not None and found.lookup_successful:
                return found
        return self.get(address_hash)

    def upsert(self, record: CachedLookup) -> None:
        now = record.updated_at or utc_now_iso()
        owner = record.homeowner
        self.conn.execute(
            """
            INSERT INTO homeowner_lookups (
                address_hash, property_id,
                address_street, address_city, address_state, address_zip,
                homeowner_first_name, homeowner_last_name, homeowner_full_name,
                emails_json, phone_numbers_json,
                is_litigator, has_dnc_phone,
                raw_response_json, lookup_successful,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(address_hash) DO UPDATE SET
                property_id=excluded.property_id,
                address_street=excluded.address_street,
                address_city=excluded.address_city,
                address_state=excluded.address_state,
                address_zip=excluded.address_zip,
                homeowner_first_name=excluded.homeowner_first_name,
                homeowner_last_name=excluded.homeowner_last_name,
                homeowner_full_name=excluded.homeowner_full_name,
                emails_json=excluded.emails_json,
                phone_numbers_json=excluded.phone_numbers_json,
                is_litigator=excluded.is_litigator,
                has_dnc_phone=excluded.has_dnc_phone,
                raw_response_json=excluded.raw_response_json,
                lookup_successful=excluded.lookup_successful,
                updated_at=excluded.updated_at
            """,
            (
                record.address_hash,
                record.property_id,
                record.street,
                record.city,
                record.state,
                record.zip,
                owner.first_name,
                owner.last_name,
                owner.full_name,
                json.dumps([e.to_dict() for e in owner.emails]),
                json.dumps([p.to_dict() for p in owner.phone_numbers]),
                1 if owner.is_litigator else 0,
                1 if owner.has_dnc_phone else 0,
                json.dumps(record.raw_response, default=str),
                1 if record.lookup_successful else 0,
                record.created_at or now,
                now,
            ),
        )
        self.conn.commit()

    def count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM homeowner_lookups").fetchone()
        return int(row[0])
