import asyncio
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from connectors.pool_client import PoolClientError, SoloPoolClient

ENDPOINT = "https://pool.example/stats"


def _client(handler) -> SoloPoolClient:
    return SoloPoolClient(ENDPOINT, timeout=1.0, transport=httpx.MockTransport(handler))


def test_fetch_sends_address_and_parses_record() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(
            200,
            json={
                "address": "bc1qabc",
                "workers": 2,
                "hashrate5m": "1,200 GH/s",
                "bestshare": "123456.7",
                "difficulty": 83148355189239,
                "lastBlock": "now",
            },
        )

    record = asyncio.run(_client(handler).fetch("bc1qabc"))

    assert seen[0].params["address"] == "bc1qabc"
    assert record.address == "bc1qabc"
    assert record.hashrate_5m == "1,200 GH/s"
    assert record.best_share == 123456.7
    assert record.difficulty == 83148355189239.0
    assert record.last_block == "now"
    assert record.raw["workers"] == 2


def test_non_success_status_raises() -> None:
    client = _client(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(PoolClientError, match="HTTP error! status: 500"):
        asyncio.run(client.fetch("bc1qabc"))


def test_transport_failure_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PoolClientError, match="connection refused"):
        asyncio.run(_client(handler).fetch("bc1qabc"))


def test_malformed_body_raises() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(PoolClientError):
        asyncio.run(client.fetch("bc1qabc"))

    client = _client(lambda request: httpx.Response(200, json=[1, 2, 3]))
    with pytest.raises(PoolClientError, match="unexpected payload shape"):
        asyncio.run(client.fetch("bc1qabc"))
