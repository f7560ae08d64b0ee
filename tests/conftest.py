"""Shared test fixtures: an in-process Trails API and a fake wallet."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from basereg.protocol import SubmissionError
from basereg.protocol.types import EXPIRY_NODE_ID, PRICING_NODE_ID, ZERO_TX_HASH
from basereg.sdk.config import RegistrarConfig
from basereg.sdk.registrar import Registrar
from basereg.sdk.trails import TrailsClient
from basereg.sdk.wallet import WalletBase

WALLET_ADDRESS = "0xAbC0000000000000000000000000000000000001"
TX_HASH = "0x" + "ab" * 32
CONTRACT_ADDRESS = "0x4cCb0BB02FCABA27e82a56646E81d8c5bC4119a5"


def make_step(step_number: int, tx_hash: str = TX_HASH) -> dict[str, Any]:
    return {
        "stepNumber": step_number,
        "nodeId": None,
        "txHash": tx_hash,
        "txBlockTimestamp": None,
        "txBlockNumber": None,
        "createdAt": "2025-06-01T00:00:00.000Z",
    }


def make_execution(
    execution_id: str,
    updated_at: str = "2025-06-01T00:00:00.000Z",
    completed: tuple[int, ...] = (),
) -> dict[str, Any]:
    """Execution wire dict with the initial step 0 plus *completed* steps."""
    steps = [make_step(0, ZERO_TX_HASH)] + [make_step(n) for n in completed]
    return {
        "id": execution_id,
        "createdAt": "2025-06-01T00:00:00.000Z",
        "updatedAt": updated_at,
        "steps": steps,
    }


class FakeTrailsAPI:
    """Handler for ``httpx.MockTransport`` mimicking the Trails endpoints.

    Responses are configurable per test; every request is recorded as
    ``(path, json_body, headers)``.
    """

    def __init__(self) -> None:
        self.base = "1000000000000000000"
        self.premium = "500000000000000000"
        self.expiry: Any = "0"
        self.executions: list[dict[str, Any]] = []
        self.evaluation: dict[str, Any] = {
            "contractAddress": CONTRACT_ADDRESS,
            "callData": "0xc47f0027",
            "payableAmount": "1500000000000000000",
        }
        self.failures: dict[str, int] = {}  # path suffix -> status code
        self.requests: list[tuple[str, dict[str, Any], httpx.Headers]] = []

    def paths(self) -> list[str]:
        return [path for path, _, _ in self.requests]

    def requests_to(self, suffix: str) -> list[dict[str, Any]]:
        return [body for path, body, _ in self.requests if path.endswith(suffix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content or b"{}")
        self.requests.append((path, body, request.headers))

        for suffix, status in self.failures.items():
            if path.endswith(suffix):
                return httpx.Response(status)

        if path.endswith("/executions/query"):
            wallet = body["walletAddresses"][0]
            return httpx.Response(
                200,
                json={"walletExecutions": [{"walletAddress": wallet, "executions": self.executions}]},
            )
        if path.endswith(f"/nodes/{PRICING_NODE_ID}/read"):
            return httpx.Response(
                200,
                json={"outputs": {"arg_0": {"value": [{"value": self.base}, {"value": self.premium}]}}},
            )
        if path.endswith(f"/nodes/{EXPIRY_NODE_ID}/read"):
            return httpx.Response(200, json={"outputs": {"expiry": {"value": self.expiry}}})
        if path.endswith("/steps/1/evaluations"):
            return httpx.Response(200, json=self.evaluation)
        if path.endswith("/executions"):
            return httpx.Response(200, json={})
        return httpx.Response(404)


class FakeWallet(WalletBase):
    """Wallet that records submissions instead of signing them."""

    def __init__(self, tx_hash: str = TX_HASH, error: Exception | None = None) -> None:
        self._tx_hash = tx_hash
        self._error = error
        self.sent: list[tuple[str, str, int]] = []

    @property
    def address(self) -> str:
        return WALLET_ADDRESS

    async def send_transaction(self, to: str, data: str, value: int) -> str:
        self.sent.append((to, data, value))
        if self._error is not None:
            raise SubmissionError(f"Transaction failed: {self._error}") from self._error
        return self._tx_hash


@pytest.fixture()
def config(tmp_path, monkeypatch):
    """RegistrarConfig isolated from the caller's environment."""
    for var in ("WALLET_KEY", "HERD_API_URL", "BASE_RPC_URL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("BASEREG_HOME", str(tmp_path / ".basereg"))
    return RegistrarConfig(api_url="http://trails.test/v1")


@pytest.fixture()
def trails_api() -> FakeTrailsAPI:
    return FakeTrailsAPI()


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture()
async def trails_client(config, trails_api):
    """TrailsClient wired to the fake API via ``httpx.MockTransport``."""
    client = TrailsClient(config, WALLET_ADDRESS)

    # Override the httpx client to use the in-process handler
    client._client = httpx.AsyncClient(
        transport=httpx.MockTransport(trails_api.handler),
        base_url=config.api_url,
    )
    yield client
    await client.close()


@pytest.fixture()
def registrar(config, wallet, trails_client) -> Registrar:
    return Registrar(config, wallet=wallet, client=trails_client)
