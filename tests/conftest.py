import os
import socket
import sys
import urllib.request
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from homeowner_lookup.config import Settings  # noqa: E402
from homeowner_lookup.storage import HomeownerLookupSQLite  # noqa: E402


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)
    monkeypatch.setattr(
        urllib.request,
        "urlopen",
        lambda *args, **kwargs: (_ for _ in ()).throw(
            RuntimeError("Network access blocked in tests")
        ),
    )


class FakeBatchDataClient:
    """Stands in for BatchDataClient and records every provider call."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls = []
        self.closed = False

    def skip_trace(self, street, city, state, zip_code):
        self.calls.append((street, city, state, zip_code))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "homeowner_lookups.sqlite")


@pytest.fixture()
def settings(db_path):
    return Settings(batch_data_api_key="test-key", db_path=db_path)


@pytest.fixture()
def store(db_path):
    s = HomeownerLookupSQLite(db_path)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def fake_client():
    return FakeBatchDataClient()
