"""Core types, constants, and utility functions for the Basename trail."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from web3 import Web3


# Basename registration trail on the Herd Trails API
TRAIL_ID = "01977985-e215-7b04-8141-009a1a68f631"
VERSION_ID = "01977985-e22c-76e0-9e1f-ead0222ff050"
DEFAULT_API_URL = "https://trails-api.herd.eco/v1"

# Trail graph node ids
PRICING_NODE_ID = "0197799c-6038-7037-a62a-8caae62e8a2e"
EXPIRY_NODE_ID = "01977e53-1e8a-7acb-83de-9d1abfa3f88a"
NAME_INPUT_NODE_ID = "01977986-60bf-7791-ac80-19f99c070fac"
YEARS_INPUT_NODE_ID = "01977e4e-2170-73ec-8829-bee089568bfc"

# Primary node of step 1, used when reporting the registration transaction
REGISTER_STEP_NUMBER = 1
REGISTER_NODE_ID = NAME_INPUT_NODE_ID

# Transaction hash of a step that has not been executed yet
ZERO_TX_HASH = "0x" + "0" * 64

DEFAULT_GAS_ESTIMATE = 21000

EXPLORER_URL = "https://herd.eco/base"


class ExecutionKind(str, Enum):
    """How the Trails API should pick the execution for a call.

    Using ``str, Enum`` so that ``ExecutionKind.LATEST == "latest"`` is True.
    """

    LATEST = "latest"
    NEW = "new"
    MANUAL = "manual"


@dataclass(frozen=True)
class ExecutionRef:
    """Reference to the execution an evaluation or report applies to.

    Build with :meth:`latest`, :meth:`new` or :meth:`manual`; only
    ``manual`` carries an execution id.
    """

    kind: ExecutionKind
    execution_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ExecutionKind.MANUAL and not self.execution_id:
            raise ValueError("A manual execution reference needs an execution id")
        if self.kind is not ExecutionKind.MANUAL and self.execution_id is not None:
            raise ValueError(f"A {self.kind.value!r} execution reference takes no execution id")

    @classmethod
    def latest(cls) -> ExecutionRef:
        return cls(ExecutionKind.LATEST)

    @classmethod
    def new(cls) -> ExecutionRef:
        return cls(ExecutionKind.NEW)

    @classmethod
    def manual(cls, execution_id: str) -> ExecutionRef:
        return cls(ExecutionKind.MANUAL, execution_id)

    def to_wire(self) -> dict[str, str]:
        """Return the ``execution`` field of a Trails API request body."""
        if self.kind is ExecutionKind.MANUAL:
            return {"type": "manual", "executionId": self.execution_id}
        return {"type": self.kind.value}

    @classmethod
    def from_wire(cls, data: str | dict) -> ExecutionRef:
        """Parse ``"latest"``, ``"new"`` or a ``{"type": ..., "executionId": ...}`` object."""
        if isinstance(data, str):
            return cls(ExecutionKind(data))
        kind = ExecutionKind(data["type"])
        return cls(kind, data.get("executionId") if kind is ExecutionKind.MANUAL else None)

    def __str__(self) -> str:
        if self.kind is ExecutionKind.MANUAL:
            return f"manual({self.execution_id})"
        return self.kind.value


def format_ether(wei: int) -> str:
    """Render a wei amount as a plain decimal ETH string (``1500000000000000000`` -> ``"1.5"``)."""
    value = Decimal(Web3.from_wei(wei, "ether"))
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def tx_url(tx_hash: str) -> str:
    return f"{EXPLORER_URL}/tx/{tx_hash}"


def wallet_url(address: str) -> str:
    return f"{EXPLORER_URL}/wallet/{address}"
