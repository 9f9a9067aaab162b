"""
Capabilities the client depends on, as structural protocols.

WalletProvider stands in for an injected browser wallet (EIP-1193 style);
ContractHandle is a Genesis contract bound to a signer or read-only.
genesis_client.gateway.web3_provider implements both over web3.py; tests use fakes.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Protocol, Union

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"

# Handlers may be sync or async; accountsChanged receives list[str], chainChanged the chain id
EventHandler = Callable[[Any], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class WalletProvider(Protocol):
    @property
    def is_present(self) -> bool: ...

    async def request_accounts(self) -> list[str]:
        """Prompt the user for authorization; raises if declined."""
        ...

    async def get_authorized_accounts(self) -> list[str]:
        """Accounts already authorized, without prompting."""
        ...

    def subscribe(self, event: str, handler: EventHandler) -> Unsubscribe: ...

    def get_signer(self, account: str) -> Any: ...


class PendingTransaction(Protocol):
    tx_hash: str

    async def wait(self) -> Any:
        """Block until mined; return the receipt. Raises if the transaction reverted."""
        ...


class ContractHandle(Protocol):
    signer: str | None
    """Lowercase account the handle signs for; None for a read-only handle."""

    async def call(self, method: str, *args: Any) -> Any: ...

    async def transact(
        self, method: str, *args: Any, tx_params: dict[str, Any] | None = None
    ) -> PendingTransaction: ...


ContractFactory = Callable[[WalletProvider, Any], ContractHandle]
"""Build a handle from the provider and a signer (None for read-only)."""


async def invoke_handler(handler: EventHandler, payload: Any) -> None:
    """Call a sync or async event handler and await it if needed."""
    result = handler(payload)
    if asyncio.iscoroutine(result):
        await result
