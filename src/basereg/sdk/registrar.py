"""Registrar -- the Basename registration workflow.

Sequences one registration attempt::

    CheckingAvailability -> ConfirmingWithUser -> ResolvingSession
        -> FetchingPayload -> Submitting -> Reporting -> Done

with the early stops ``AlreadyRegistered`` and ``Cancelled``.  Any error
ends the attempt and propagates to the caller; nothing is retried.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from basereg.protocol import ExecutionRef
from basereg.protocol.models import ExpiryInfo, PriceQuote, TransactionPayload
from basereg.protocol.types import tx_url
from basereg.sdk.config import RegistrarConfig
from basereg.sdk.resolver import ExecutionResolver
from basereg.sdk.trails import TrailsClient
from basereg.sdk.wallet import WalletBase, Web3Wallet

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[PriceQuote], Union[bool, Awaitable[bool]]]
StateCallback = Callable[["RegistrationResult"], None]


class RegistrationState(str, Enum):
    """States of a registration attempt."""

    CHECKING_AVAILABILITY = "checking_availability"
    CONFIRMING_WITH_USER = "confirming_with_user"
    RESOLVING_SESSION = "resolving_session"
    FETCHING_PAYLOAD = "fetching_payload"
    SUBMITTING = "submitting"
    REPORTING = "reporting"
    DONE = "done"
    ALREADY_REGISTERED = "already_registered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        RegistrationState.DONE,
        RegistrationState.ALREADY_REGISTERED,
        RegistrationState.CANCELLED,
    }
)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration attempt that did not raise."""

    name: str
    years: int
    state: RegistrationState
    quote: PriceQuote
    expiry: ExpiryInfo
    execution: Optional[ExecutionRef] = None
    payload: Optional[TransactionPayload] = None
    tx_hash: Optional[str] = None

    @property
    def execution_id(self) -> str | None:
        return self.execution.execution_id if self.execution else None


class Registrar:
    """Registers Basenames through the Herd Trails API.

    Usage::

        async with Registrar(RegistrarConfig()) as registrar:
            result = await registrar.register("alice", 1, confirm=lambda quote: True)

    Sync usage::

        result = Registrar(RegistrarConfig()).register_sync("alice", 1, confirm)
    """

    def __init__(
        self,
        config: RegistrarConfig | None = None,
        *,
        wallet: WalletBase | None = None,
        client: TrailsClient | None = None,
    ) -> None:
        """Create a Registrar.  No I/O happens here."""
        self._config = config or RegistrarConfig()
        if wallet is None:
            wallet = Web3Wallet(
                self._config.require_wallet_key(),
                rpc_url=self._config.rpc_url,
                chain_id=self._config.chain_id,
            )
        self._wallet = wallet
        self._client = client or TrailsClient(self._config, wallet.address)
        self._resolver = ExecutionResolver(self._client)

    @property
    def wallet_address(self) -> str:
        return self._wallet.address

    # -- Lifecycle -----------------------------------------------------------

    async def connect(self) -> None:
        await self._client.connect()

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> Registrar:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # -- Workflow ------------------------------------------------------------

    async def check_availability(self, name: str, years: int) -> tuple[PriceQuote, ExpiryInfo]:
        """Read price and expiry concurrently; the first failure propagates."""
        quote, expiry = await asyncio.gather(
            self._client.get_pricing(name, years),
            self._client.get_name_expiry(name),
        )
        return quote, expiry

    async def register(
        self,
        name: str,
        years: int,
        confirm: ConfirmCallback,
        *,
        on_state: StateCallback | None = None,
    ) -> RegistrationResult:
        """Run one registration attempt for *name* over *years*.

        *confirm* receives the price quote and returns (or resolves to)
        True to go ahead.  *on_state* is called with a snapshot of the
        attempt each time a new state is entered.

        Returns a result in ``DONE``, ``ALREADY_REGISTERED`` or
        ``CANCELLED``; every other outcome raises a ``RegistrarError``.
        """
        if not name:
            raise ValueError("Name must not be empty")
        if years < 1:
            raise ValueError("Years must be a positive integer")

        def enter(current: RegistrationResult, state: RegistrationState, **changes) -> RegistrationResult:
            current = replace(current, state=state, **changes)
            logger.info("Registration of %r: %s", name, state.value)
            if on_state is not None:
                on_state(current)
            return current

        logger.info("Registration of %r: %s", name, RegistrationState.CHECKING_AVAILABILITY.value)
        quote, expiry = await self.check_availability(name, years)
        result = RegistrationResult(
            name=name,
            years=years,
            state=RegistrationState.CHECKING_AVAILABILITY,
            quote=quote,
            expiry=expiry,
        )

        if expiry.is_registered:
            return enter(result, RegistrationState.ALREADY_REGISTERED)

        result = enter(result, RegistrationState.CONFIRMING_WITH_USER)
        answer = confirm(quote)
        if inspect.isawaitable(answer):
            answer = await answer
        if answer is not True:
            return enter(result, RegistrationState.CANCELLED)

        result = enter(result, RegistrationState.RESOLVING_SESSION)
        execution = await self._resolver.resolve()

        # The same reference is used for the evaluation and the report.
        result = enter(result, RegistrationState.FETCHING_PAYLOAD, execution=execution)
        payload = await self._client.evaluate_step(name, years, execution)

        result = enter(result, RegistrationState.SUBMITTING, payload=payload)
        tx_hash = await self._wallet.send_transaction(payload.to, payload.data, payload.value)

        logger.warning(
            "Submitted transaction %s (%s), recording it on execution %s",
            tx_hash,
            tx_url(tx_hash),
            execution,
        )
        result = enter(result, RegistrationState.REPORTING, tx_hash=tx_hash)
        await self._client.update_execution(execution, tx_hash)

        return enter(result, RegistrationState.DONE)

    # -- Sync wrappers -------------------------------------------------------

    def register_sync(
        self,
        name: str,
        years: int,
        confirm: ConfirmCallback,
        *,
        on_state: StateCallback | None = None,
    ) -> RegistrationResult:
        """Synchronous wrapper: connect, register, close.

        Must not be called from inside a running event loop.
        """
        return asyncio.run(self._register_once(name, years, confirm, on_state))

    async def _register_once(self, name, years, confirm, on_state) -> RegistrationResult:
        async with self:
            return await self.register(name, years, confirm, on_state=on_state)

