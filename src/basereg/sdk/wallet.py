"""Wallet capability: sign and broadcast a transaction on Base.

Two implementations:
- ``WalletBase``: abstract interface the registrar depends on
- ``Web3Wallet``: local private key signer sending over JSON-RPC (web3.py)
"""

from __future__ import annotations

import abc
import logging

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.providers import AsyncHTTPProvider

from basereg.protocol import ConfigError, RegistrarError, SubmissionError
from basereg.protocol.types import tx_url

logger = logging.getLogger(__name__)


class WalletBase(abc.ABC):
    """Opaque signing capability: sign and broadcast, return a transaction hash."""

    @property
    @abc.abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing account."""

    @abc.abstractmethod
    async def send_transaction(self, to: str, data: str, value: int) -> str:
        """Sign and broadcast a call, returning its ``0x``-prefixed hash.

        Raises:
            SubmissionError: If signing, funding or broadcasting fails.
        """


class Web3Wallet(WalletBase):
    """Sign locally with a private key and broadcast via ``AsyncHTTPProvider``.

    The web3 connection is created lazily on first send so that reads
    (and tests) never touch the RPC endpoint.
    """

    def __init__(self, private_key: str, rpc_url: str, chain_id: int) -> None:
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except Exception as exc:
            raise ConfigError(f"Invalid WALLET_KEY: {exc}") from exc
        self._rpc_url = rpc_url
        self._chain_id = chain_id
        self._w3: AsyncWeb3 | None = None  # Lazy init

    @property
    def address(self) -> str:
        return self._account.address

    def _get_web3(self) -> AsyncWeb3:
        if self._w3 is None:
            self._w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_url))
        return self._w3

    async def _build_transaction(self, to: str, data: str, value: int) -> dict:
        w3 = self._get_web3()
        tx = {
            "from": self.address,
            "to": Web3.to_checksum_address(to),
            "data": data,
            "value": value,
            "chainId": self._chain_id,
        }
        tx["nonce"] = await w3.eth.get_transaction_count(self.address, "pending")
        tx["gas"] = await w3.eth.estimate_gas(tx)

        # EIP-1559 fees: twice the current base fee plus the suggested tip
        block = await w3.eth.get_block("latest")
        priority_fee = await w3.eth.max_priority_fee
        tx["maxPriorityFeePerGas"] = priority_fee
        tx["maxFeePerGas"] = block["baseFeePerGas"] * 2 + priority_fee
        return tx

    async def send_transaction(self, to: str, data: str, value: int) -> str:
        try:
            tx = await self._build_transaction(to, data, value)
            signed = self._account.sign_transaction(tx)
            raw_hash = await self._get_web3().eth.send_raw_transaction(signed.raw_transaction)
        except RegistrarError:
            raise
        except Exception as exc:
            logger.error("Transaction failed: %s", exc)
            raise SubmissionError(f"Transaction failed: {exc}") from exc

        tx_hash = Web3.to_hex(raw_hash)
        logger.info("Transaction submitted: %s", tx_url(tx_hash))
        return tx_hash
