"""basereg protocol -- Trails API data types for the Basename trail.

Public API re-exports for ``basereg.protocol``.
"""

from basereg.protocol.types import (
    TRAIL_ID,
    VERSION_ID,
    DEFAULT_API_URL,
    ZERO_TX_HASH,
    REGISTER_STEP_NUMBER,
    ExecutionKind,
    ExecutionRef,
    format_ether,
    tx_url,
    wallet_url,
)

from basereg.protocol.errors import (
    RegistrarError,
    ConfigError,
    TrailsAPIError,
    ExecutionStateError,
    SubmissionError,
    ReportError,
)

from basereg.protocol.models import (
    Step,
    Execution,
    PriceQuote,
    ExpiryInfo,
    TransactionPayload,
)

__all__ = [
    # Types
    "TRAIL_ID",
    "VERSION_ID",
    "DEFAULT_API_URL",
    "ZERO_TX_HASH",
    "REGISTER_STEP_NUMBER",
    "ExecutionKind",
    "ExecutionRef",
    "format_ether",
    "tx_url",
    "wallet_url",
    # Errors
    "RegistrarError",
    "ConfigError",
    "TrailsAPIError",
    "ExecutionStateError",
    "SubmissionError",
    "ReportError",
    # Models
    "Step",
    "Execution",
    "PriceQuote",
    "ExpiryInfo",
    "TransactionPayload",
]
