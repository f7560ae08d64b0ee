"""Registrar configuration via dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from basereg.protocol import ConfigError
from basereg.protocol.types import DEFAULT_API_URL, TRAIL_ID, VERSION_ID

logger = logging.getLogger(__name__)

_DEFAULT_RPC_URL = "https://mainnet.base.org"
_DEFAULT_CHAIN_ID = 8453  # Base mainnet


@dataclass
class RegistrarConfig:
    """Configuration for a Basename registrar.

    ``wallet_key``, ``api_url`` and ``rpc_url`` can be overridden via
    environment variables (``WALLET_KEY``, ``HERD_API_URL``,
    ``BASE_RPC_URL``) or constructor arguments.

    Priority (highest wins): constructor arg > env var > config.toml > default.
    """

    wallet_key: str | None = None
    api_url: str | None = None
    rpc_url: str | None = None
    chain_id: int = _DEFAULT_CHAIN_ID
    trail_id: str = TRAIL_ID
    version_id: str = VERSION_ID
    data_dir: Path | str | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.wallet_key is None:
            self.wallet_key = os.getenv("WALLET_KEY") or None

        # BASEREG_HOME env var overrides ~/.basereg (useful for testing / isolation).
        if self.data_dir is None:
            home = os.getenv("BASEREG_HOME")
            self.data_dir = Path(home) if home else Path.home() / ".basereg"
        else:
            self.data_dir = Path(self.data_dir)

        # Load optional config.toml (lowest priority -- only fills what env/args left unset)
        file_values: dict = {}
        config_path = Path(self.data_dir) / "config.toml"
        if config_path.exists():
            file_values = self._load_config_file(config_path)

        if self.api_url is None:
            self.api_url = os.getenv("HERD_API_URL") or file_values.get("api_url") or DEFAULT_API_URL
        self.api_url = self.api_url.rstrip("/")

        if self.rpc_url is None:
            self.rpc_url = os.getenv("BASE_RPC_URL") or file_values.get("rpc_url") or _DEFAULT_RPC_URL

    @property
    def trail_path(self) -> str:
        """URL path prefix of the trail version, relative to ``api_url``."""
        return f"/trails/{self.trail_id}/versions/{self.version_id}"

    def require_wallet_key(self) -> str:
        """Return the wallet key, raising :class:`ConfigError` if it is missing."""
        if not self.wallet_key:
            raise ConfigError("WALLET_KEY not found in environment variables")
        return self.wallet_key

    def _load_config_file(self, path: Path) -> dict:
        """Load optional config.toml and return its ``[registrar]`` section."""
        try:
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[no-redef]  # Python 3.10 fallback

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception:
            logger.warning("Failed to load config file %s", path, exc_info=True)
            return {}

        return data.get("registrar", {})
