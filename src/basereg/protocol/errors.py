"""basereg exception hierarchy.

All registrar-specific exceptions inherit from :class:`RegistrarError`.
"""

from __future__ import annotations


class RegistrarError(Exception):
    """Base exception for all basereg errors."""


class ConfigError(RegistrarError):
    """Raised when required configuration (e.g. the wallet key) is missing or invalid."""


class TrailsAPIError(RegistrarError):
    """Raised when a Trails API call returns a non-success status or a malformed body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExecutionStateError(RegistrarError):
    """Raised when the latest execution is not eligible for the requested step."""

    def __init__(self, next_step: int, expected: int = 1) -> None:
        super().__init__(
            f"Cannot proceed with registration. Next step is {next_step}, expected {expected}"
        )
        self.next_step = next_step
        self.expected = expected


class SubmissionError(RegistrarError):
    """Raised when the wallet or the chain rejects a transaction."""


class ReportError(TrailsAPIError):
    """Raised when a submitted transaction could not be recorded on its execution.

    The transaction already exists on-chain; ``tx_hash`` is needed to
    reconcile the execution by hand.
    """

    def __init__(self, message: str, tx_hash: str, status_code: int | None = None) -> None:
        super().__init__(
            f"{message} (transaction {tx_hash} was submitted but not recorded)",
            status_code=status_code,
        )
        self.tx_hash = tx_hash
