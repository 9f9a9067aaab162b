"""
web3.py implementation of the wallet provider and contract handle capabilities.

- Web3WalletProvider talks JSON-RPC to a wallet-backed node (eth_requestAccounts,
  eth_accounts, eth_chainId). Signing stays with the node / wallet.
- There is no push channel over HTTP, so accountsChanged / chainChanged are
  produced by polling (poll_once / watch) and dispatched to subscribers.
- Web3ContractHandle issues functions.<name>(...).call() / .transact() and waits
  for receipts; a receipt with status 0 is a revert.
"""

from __future__ import annotations

import asyncio
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from genesis_client.core.exceptions import TransactionFailedError, WalletUnavailableError
from genesis_client.gateway.interfaces import (
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
    ContractFactory,
    ContractHandle,
    EventHandler,
    Unsubscribe,
    invoke_handler,
)
from genesis_client.genesis_logging import get_logger

logger = get_logger(__name__)

_EVENTS = (ACCOUNTS_CHANGED, CHAIN_CHANGED)


class Web3WalletProvider:
    """
    Wallet provider over an AsyncWeb3 JSON-RPC connection.

    Change notifications are detected by polling; start watch() as a task
    (or call poll_once() from your own loop) for subscribers to fire.
    """

    def __init__(self, rpc_url: str, *, poll_interval_sec: float = 2.0, w3: AsyncWeb3 | None = None) -> None:
        if poll_interval_sec <= 0:
            raise ValueError("poll_interval_sec must be positive")
        self._rpc_url = (rpc_url or "").strip()
        self._poll_interval = poll_interval_sec
        self._w3 = w3 if w3 is not None else (AsyncWeb3(AsyncHTTPProvider(self._rpc_url)) if self._rpc_url else None)
        self._handlers: dict[str, list[EventHandler]] = {e: [] for e in _EVENTS}
        self._last_accounts: list[str] | None = None
        self._last_chain_id: int | None = None
        self._stop_event = asyncio.Event()

    @property
    def is_present(self) -> bool:
        return self._w3 is not None

    @property
    def w3(self) -> AsyncWeb3:
        if self._w3 is None:
            raise WalletUnavailableError()
        return self._w3

    async def request_accounts(self) -> list[str]:
        accounts = await self.w3.manager.coro_request("eth_requestAccounts", [])
        return [str(a) for a in accounts or []]

    async def get_authorized_accounts(self) -> list[str]:
        return [str(a) for a in await self.w3.eth.accounts]

    async def get_chain_id(self) -> int:
        return int(await self.w3.eth.chain_id)

    def get_signer(self, account: str) -> str:
        """The node signs for its authorized accounts; the signer is the account itself."""
        return account.strip().lower()

    def subscribe(self, event: str, handler: EventHandler) -> Unsubscribe:
        if event not in self._handlers:
            raise ValueError(f"Unsupported provider event: {event!r}")
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                pass

        return unsubscribe

    async def _emit(self, event: str, payload: Any) -> None:
        for handler in list(self._handlers[event]):
            try:
                await invoke_handler(handler, payload)
            except Exception as e:
                logger.exception("provider_handler_failed", provider_event=event, error=str(e))

    async def poll_once(self) -> None:
        """Compare accounts and chain id with the previous poll and emit changes."""
        accounts = [a.lower() for a in await self.get_authorized_accounts()]
        chain_id = await self.get_chain_id()
        first_poll = self._last_accounts is None
        accounts_changed = not first_poll and accounts != self._last_accounts
        chain_changed = not first_poll and chain_id != self._last_chain_id
        self._last_accounts = accounts
        self._last_chain_id = chain_id
        if chain_changed:
            logger.info("provider_chain_changed", chain_id=chain_id)
            await self._emit(CHAIN_CHANGED, chain_id)
        if accounts_changed:
            logger.info("provider_accounts_changed", count=len(accounts))
            await self._emit(ACCOUNTS_CHANGED, accounts)

    async def watch(self) -> None:
        """Poll until stop() is called. RPC errors are logged and polling continues."""
        self._stop_event.clear()
        logger.info("provider_watch_started", rpc_url=self._rpc_url, interval_sec=self._poll_interval)
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("provider_poll_failed", error=str(e))
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
        logger.info("provider_watch_stopped")

    def stop(self) -> None:
        self._stop_event.set()


class Web3PendingTransaction:
    """A submitted transaction; wait() resolves to its receipt."""

    def __init__(self, w3: AsyncWeb3, raw_hash: Any, method: str) -> None:
        self._w3 = w3
        self._raw_hash = raw_hash
        self.method = method
        self.tx_hash = AsyncWeb3.to_hex(raw_hash)

    async def wait(self) -> Any:
        receipt = await self._w3.eth.wait_for_transaction_receipt(self._raw_hash)
        if receipt.get("status") == 0:
            raise TransactionFailedError(
                f"{self.method} reverted in block {receipt.get('blockNumber')}",
                method=self.method,
                tx_hash=self.tx_hash,
            )
        return receipt


class Web3ContractHandle:
    """Genesis contract bound to a signer account, or read-only when signer is None."""

    def __init__(self, w3: AsyncWeb3, contract: Any, signer: str | None = None) -> None:
        self._w3 = w3
        self._contract = contract
        self.signer = signer.lower() if signer else None

    @property
    def address(self) -> str:
        return self._contract.address

    def _function(self, method: str, args: tuple[Any, ...]) -> Any:
        return getattr(self._contract.functions, method)(*args)

    async def call(self, method: str, *args: Any) -> Any:
        return await self._function(method, args).call()

    async def transact(
        self, method: str, *args: Any, tx_params: dict[str, Any] | None = None
    ) -> Web3PendingTransaction:
        if self.signer is None:
            raise WalletUnavailableError("Read-only contract handle cannot send transactions.")
        params = dict(tx_params or {})
        params["from"] = AsyncWeb3.to_checksum_address(params.get("from") or self.signer)
        raw_hash = await self._function(method, args).transact(params)
        return Web3PendingTransaction(self._w3, raw_hash, method)


def web3_contract_factory(address: str, abi: list[dict[str, Any]]) -> ContractFactory:
    """Return a ContractFactory building Genesis handles at address for a Web3WalletProvider."""
    checksum = AsyncWeb3.to_checksum_address(address)

    def build(provider: Web3WalletProvider, signer: str | None) -> ContractHandle:
        contract = provider.w3.eth.contract(address=checksum, abi=abi)
        return Web3ContractHandle(provider.w3, contract, signer)

    return build
