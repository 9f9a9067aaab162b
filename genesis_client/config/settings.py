"""
Application settings for the Genesis client.

Typed settings (RPC URL, contract address, ABI, polling interval) with
environment default factories, validated in __post_init__.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from genesis_client.config import env
from genesis_client.core.exceptions import ConfigurationError

MIN_POLL_INTERVAL_SEC = 0.1


@dataclass
class ClientSettings:
    """Settings for the provider adapter and contract gateway (env or explicit)."""

    rpc_url: str = field(default_factory=env.get_rpc_url)
    contract_address: str = field(default_factory=env.get_contract_address)
    contract_abi: list[dict[str, Any]] = field(default_factory=env.get_contract_abi)
    poll_interval_seconds: float = field(default_factory=env.get_poll_interval)

    def __post_init__(self) -> None:
        self.rpc_url = self.rpc_url.strip()
        self.contract_address = self.contract_address.strip()
        if not self.contract_address:
            raise ConfigurationError(
                "GENESIS_CONTRACT_ADDRESS or GENESIS_CONTRACT_ADDRESS_FILE must be set"
            )
        if self.poll_interval_seconds < MIN_POLL_INTERVAL_SEC:
            self.poll_interval_seconds = env.DEFAULT_POLL_INTERVAL_SEC


def get_settings(**overrides: Any) -> ClientSettings:
    """
    Return client settings resolved from the environment.

    Keyword overrides take precedence over env values, e.g.
    get_settings(rpc_url="http://localhost:8545").
    """
    return ClientSettings(**overrides)
