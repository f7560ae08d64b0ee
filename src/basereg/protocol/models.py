"""Frozen data objects for Trails API responses.

Every object here is a snapshot of one response: built once by a
``from_wire`` parser, used for a single registration attempt, and never
mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from basereg.protocol.errors import TrailsAPIError
from basereg.protocol.types import DEFAULT_GAS_ESTIMATE, ZERO_TX_HASH

_FRACTION = re.compile(r"\.(\d+)")


def _normalize_fraction(match: re.Match) -> str:
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as sent by the Trails API (``...Z`` suffix allowed)."""
    try:
        text = _FRACTION.sub(_normalize_fraction, value.replace("Z", "+00:00"), count=1)
        ts = datetime.fromisoformat(text)
    except (AttributeError, ValueError) as exc:
        raise TrailsAPIError(f"Malformed timestamp in response: {value!r}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _to_int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise TrailsAPIError(f"Malformed {what} in response: {value!r}") from exc


@dataclass(frozen=True)
class Step:
    """One step record of an execution."""

    step_number: int
    tx_hash: str
    created_at: str
    node_id: Optional[str] = None
    tx_block_timestamp: Optional[int] = None
    tx_block_number: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        """Step 0 is the initial sentinel; a zero hash means not executed yet."""
        return self.step_number > 0 and self.tx_hash.lower() != ZERO_TX_HASH

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Step:
        try:
            tx_hash = data["txHash"]
            if not isinstance(tx_hash, str):
                raise TypeError("txHash must be a string")
            return cls(
                step_number=int(data["stepNumber"]),
                tx_hash=tx_hash,
                created_at=data.get("createdAt", ""),
                node_id=data.get("nodeId"),
                tx_block_timestamp=data.get("txBlockTimestamp"),
                tx_block_number=data.get("txBlockNumber"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TrailsAPIError(f"Malformed execution step: {data!r}") from exc


@dataclass(frozen=True)
class Execution:
    """A server-tracked run of the trail for one wallet."""

    id: str
    created_at: datetime
    updated_at: datetime
    steps: tuple[Step, ...] = field(default_factory=tuple)

    @property
    def next_step_number(self) -> int:
        """1 if no step is completed, otherwise the highest completed step + 1."""
        completed = [step.step_number for step in self.steps if step.is_completed]
        if not completed:
            return 1
        return max(completed) + 1

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Execution:
        try:
            execution_id = data["id"]
            created_at = data["createdAt"]
            updated_at = data["updatedAt"]
        except (KeyError, TypeError) as exc:
            raise TrailsAPIError(f"Malformed execution: {data!r}") from exc
        return cls(
            id=execution_id,
            created_at=parse_timestamp(created_at),
            updated_at=parse_timestamp(updated_at),
            steps=tuple(Step.from_wire(s) for s in data.get("steps") or []),
        )


@dataclass(frozen=True)
class PriceQuote:
    """Registration price in wei."""

    base: int
    premium: int

    def __post_init__(self) -> None:
        if self.base < 0 or self.premium < 0:
            raise ValueError("Price amounts must be non-negative")

    @property
    def total(self) -> int:
        return self.base + self.premium

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> PriceQuote:
        """Parse a pricing node read: ``outputs.arg_0.value == [{value: base}, {value: premium}]``."""
        try:
            values = data["outputs"]["arg_0"]["value"]
            base, premium = values[0]["value"], values[1]["value"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TrailsAPIError(f"Malformed pricing response: {data!r}") from exc
        try:
            return cls(base=_to_int(base, "base price"), premium=_to_int(premium, "premium"))
        except ValueError as exc:
            raise TrailsAPIError(f"Malformed pricing response: {data!r}") from exc


@dataclass(frozen=True)
class ExpiryInfo:
    """Current expiry of a name, in seconds since the epoch (0 if never registered)."""

    expiry: int = 0

    @property
    def is_registered(self) -> bool:
        return self.expiry > 0

    @property
    def expires_at(self) -> datetime | None:
        """Expiry as a UTC datetime; None if unregistered or beyond the datetime range."""
        if not self.is_registered:
            return None
        try:
            return datetime.fromtimestamp(self.expiry, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ExpiryInfo:
        try:
            value = ((data.get("outputs") or {}).get("expiry") or {}).get("value")
        except AttributeError as exc:
            raise TrailsAPIError(f"Malformed expiry response: {data!r}") from exc
        if value in (None, ""):
            return cls(0)
        return cls(_to_int(value, "expiry"))


@dataclass(frozen=True)
class TransactionPayload:
    """Call to submit for a step, as evaluated by the Trails API."""

    to: str
    data: str
    value: int = 0
    gas_estimate: int = DEFAULT_GAS_ESTIMATE

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> TransactionPayload:
        try:
            to = data["contractAddress"]
            call_data = data["callData"]
        except (KeyError, TypeError) as exc:
            raise TrailsAPIError(f"Malformed evaluation response: {data!r}") from exc
        value = data.get("payableAmount") or 0
        return cls(to=to, data=call_data, value=_to_int(value, "payable amount"))
