"""
Client bootstrap: wires settings, provider, session store, session manager and gateway.

    client = GenesisClient.from_settings()
    await client.start()
    projects = client.store.projects

start() mirrors the dApp's page load: probe the wallet, pick up an existing
connection, subscribe to provider events, open a read-only handle for
browsing and load the project list. A chain change resets the store and
runs start() again.
"""

from __future__ import annotations

import asyncio
from typing import Any

from genesis_client.config import ClientSettings, get_settings
from genesis_client.gateway.contract import ContractGateway
from genesis_client.gateway.interfaces import ContractFactory, WalletProvider
from genesis_client.gateway.web3_provider import Web3WalletProvider, web3_contract_factory
from genesis_client.genesis_logging import get_logger
from genesis_client.session.manager import SessionManager
from genesis_client.session.notices import CollectingNotifier, Notifier
from genesis_client.session.state import SessionStore, get_session_store

logger = get_logger(__name__)


class GenesisClient:
    def __init__(
        self,
        provider: WalletProvider | None,
        contract_factory: ContractFactory,
        *,
        store: SessionStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.store = store if store is not None else get_session_store()
        self.notifier = notifier if notifier is not None else CollectingNotifier()
        self.session = SessionManager(provider, self.store, self.notifier, on_reload=self.start)
        self.gateway = ContractGateway(self.session, contract_factory, self.notifier)
        self._watch_task: asyncio.Task[Any] | None = None

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None, **kwargs: Any) -> "GenesisClient":
        settings = settings or get_settings()
        provider = Web3WalletProvider(settings.rpc_url, poll_interval_sec=settings.poll_interval_seconds)
        factory = web3_contract_factory(settings.contract_address, settings.contract_abi)
        logger.info("genesis_client_configured", rpc_url=settings.rpc_url, contract=settings.contract_address)
        return cls(provider, factory, **kwargs)

    async def start(self) -> None:
        self.session.probe_wallet()
        account = await self.session.check_existing_connection()
        self.session.watch()
        if account is None:
            self.gateway.open_read_only()
        self._start_polling()
        await self.gateway.load_projects()
        logger.info("genesis_client_started", account=account)

    def _start_polling(self) -> None:
        watch = getattr(self.session.provider, "watch", None)
        if watch is None or (self._watch_task is not None and not self._watch_task.done()):
            return
        self._watch_task = asyncio.ensure_future(watch())

    async def stop(self) -> None:
        self.session.unwatch()
        provider = self.session.provider
        if self._watch_task is not None:
            stop = getattr(provider, "stop", None)
            if stop is not None:
                stop()
            else:
                self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None
        logger.info("genesis_client_stopped")
