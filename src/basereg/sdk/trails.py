"""Trails API client via httpx with connection pooling.

Wraps the five Trails endpoints the Basename flow needs: execution
query, two node reads (pricing, expiry), step evaluation, and execution
update.  Every call is a single POST round trip; a non-success status
raises :class:`TrailsAPIError` and nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from basereg.protocol import (
    ExecutionRef,
    ReportError,
    TrailsAPIError,
)
from basereg.protocol.models import (
    Execution,
    ExpiryInfo,
    PriceQuote,
    TransactionPayload,
)
from basereg.protocol.types import (
    EXPIRY_NODE_ID,
    NAME_INPUT_NODE_ID,
    PRICING_NODE_ID,
    REGISTER_NODE_ID,
    REGISTER_STEP_NUMBER,
    YEARS_INPUT_NODE_ID,
)
from basereg.sdk.config import RegistrarConfig

logger = logging.getLogger(__name__)


def _name_input(name: str) -> dict[str, Any]:
    return {NAME_INPUT_NODE_ID: {"inputs.request.name": {"value": name}}}


def _years_input(years: int) -> dict[str, Any]:
    return {YEARS_INPUT_NODE_ID: {"years": {"value": str(years)}}}


class TrailsClient:
    """Stateless client for one trail version of the Herd Trails API.

    A single ``httpx.AsyncClient`` is created in ``connect()`` and
    reused for all requests (connection pooling).  Call ``close()``
    to release it.
    """

    def __init__(self, config: RegistrarConfig, wallet_address: str) -> None:
        self._config = config
        self._wallet_address = wallet_address
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the shared httpx AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_url,
                headers={"Content-Type": "application/json"},
                timeout=self._config.timeout,
            )

    async def close(self) -> None:
        """Close the httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> TrailsClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        what: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("TrailsClient not connected. Call connect() first.")
        url = f"{self._config.trail_path}{path}"
        logger.debug("POST %s", url)
        try:
            resp = await self._client.post(url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise TrailsAPIError(f"Failed to {what}: {exc}") from exc
        if not resp.is_success:
            raise TrailsAPIError(
                f"Failed to {what}: {resp.reason_phrase or resp.status_code}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response, what: str) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as exc:
            raise TrailsAPIError(f"Failed to {what}: response is not JSON") from exc
        if not isinstance(data, dict):
            raise TrailsAPIError(f"Failed to {what}: unexpected response {data!r}")
        return data

    # -- Reads ---------------------------------------------------------------

    async def get_executions(self) -> list[Execution]:
        """Return every execution of this trail owned by the wallet."""
        what = "get executions"
        resp = await self._post(
            "/executions/query",
            {"walletAddresses": [self._wallet_address.lower()]},
            what,
        )
        data = self._json(resp, what)
        wallet = self._wallet_address.lower()
        for entry in data.get("walletExecutions") or []:
            if str(entry.get("walletAddress", "")).lower() == wallet:
                return [Execution.from_wire(e) for e in entry.get("executions") or []]
        return []

    async def get_pricing(self, name: str, years: int) -> PriceQuote:
        """Read the base and premium registration price of *name* for *years*."""
        what = "get pricing"
        resp = await self._post(
            f"/nodes/{PRICING_NODE_ID}/read",
            {
                "walletAddress": self._wallet_address,
                "userInputs": {**_name_input(name), **_years_input(years)},
                "execution": ExecutionRef.latest().to_wire(),
            },
            what,
        )
        return PriceQuote.from_wire(self._json(resp, what))

    async def get_name_expiry(self, name: str) -> ExpiryInfo:
        """Read the current expiry of *name* (0 when it was never registered)."""
        what = "get name expiry"
        resp = await self._post(
            f"/nodes/{EXPIRY_NODE_ID}/read",
            {
                "walletAddress": self._wallet_address,
                "userInputs": _name_input(name),
                "execution": ExecutionRef.latest().to_wire(),
            },
            what,
        )
        return ExpiryInfo.from_wire(self._json(resp, what))

    # -- Step evaluation and reporting ----------------------------------------

    async def evaluate_step(
        self, name: str, years: int, execution: ExecutionRef
    ) -> TransactionPayload:
        """Ask the API for the calldata of the registration step."""
        what = "get transaction calldata"
        user_inputs = _years_input(years)
        user_inputs[NAME_INPUT_NODE_ID] = {
            "inputs.request.name": {"value": name},
            "inputs.request.data": {"value": ""},
        }
        resp = await self._post(
            f"/steps/{REGISTER_STEP_NUMBER}/evaluations",
            {
                "walletAddress": self._wallet_address,
                "userInputs": user_inputs,
                "execution": execution.to_wire(),
            },
            what,
        )
        return TransactionPayload.from_wire(self._json(resp, what))

    async def update_execution(self, execution: ExecutionRef, tx_hash: str) -> None:
        """Record *tx_hash* as the registration step of *execution*.

        The transaction hash doubles as the idempotency key, so re-sending
        the same report is safe.  Failures raise :class:`ReportError`,
        which always names the transaction.
        """
        try:
            await self._post(
                "/executions",
                {
                    "nodeId": REGISTER_NODE_ID,
                    "transactionHash": tx_hash,
                    "walletAddress": self._wallet_address,
                    "execution": execution.to_wire(),
                },
                "update execution",
                headers={"Idempotency-Key": tx_hash},
            )
        except TrailsAPIError as exc:
            raise ReportError(str(exc), tx_hash=tx_hash, status_code=exc.status_code) from exc
