"""
Wallet session manager: provider detection, account authorization and change events.

The only writer of the connected account. Account changes drop a cached
signer-bound contract handle so the gateway rebuilds it for the new account;
chain changes are a hard reset of the session store followed by the
optional on_reload re-initialization.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from genesis_client.core.exceptions import ConnectionRejectedError, WalletUnavailableError
from genesis_client.gateway.interfaces import (
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
    EventHandler,
    Unsubscribe,
    WalletProvider,
)
from genesis_client.genesis_logging import get_logger
from genesis_client.session.notices import LogNotifier, NoticeLevel, Notifier
from genesis_client.session.state import SessionStore, StateKey, get_session_store

logger = get_logger(__name__)

CONNECT_WALLET_NOTICE = "Please connect wallet."


class SessionManager:
    """
    Tracks wallet availability, the connected account and provider events.

    provider may be None when no wallet is injected; every operation except
    the constructor then raises WalletUnavailableError.
    """

    def __init__(
        self,
        provider: WalletProvider | None,
        store: SessionStore | None = None,
        notifier: Notifier | None = None,
        *,
        on_reload: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._provider = provider
        self._store = store if store is not None else get_session_store()
        self._notifier = notifier if notifier is not None else LogNotifier()
        self._on_reload = on_reload
        self._watch_unsubscribe: Unsubscribe | None = None
        self._disconnect_handlers: list[Callable[[], None]] = []

    @property
    def provider(self) -> WalletProvider | None:
        return self._provider

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def connected_account(self) -> str | None:
        return self._store.connected_account

    def probe_wallet(self) -> WalletProvider:
        """Return the provider, or raise WalletUnavailableError if none is present."""
        if self._provider is None or not self._provider.is_present:
            err = WalletUnavailableError()
            logger.warning("wallet_unavailable")
            self._notifier.notify(NoticeLevel.ERROR, str(err))
            raise err
        return self._provider

    async def connect(self) -> str:
        """Prompt for authorization and store the first authorized account."""
        provider = self.probe_wallet()
        try:
            accounts = await provider.request_accounts()
        except Exception as e:
            logger.warning("wallet_connection_rejected", error=str(e))
            self._notifier.notify(NoticeLevel.ERROR, "Wallet connection was rejected.")
            raise ConnectionRejectedError(str(e) or "Wallet connection was rejected") from e
        if not accounts:
            logger.warning("wallet_connection_rejected", error="no accounts returned")
            self._notifier.notify(NoticeLevel.ERROR, "Wallet connection was rejected.")
            raise ConnectionRejectedError("Wallet returned no authorized account")
        account = self._set_account(accounts[0])
        logger.info("wallet_connected", account=account)
        return account

    async def check_existing_connection(self) -> str | None:
        """
        Pick up an already-authorized account without prompting.

        With no authorized account the session is left disconnected and a
        "please connect" notice is emitted; this is not an error.
        """
        provider = self.probe_wallet()
        try:
            accounts = await provider.get_authorized_accounts()
        except Exception as e:
            logger.error("wallet_accounts_query_failed", error=str(e))
            self._notifier.notify(NoticeLevel.ERROR, "Could not query wallet accounts.")
            raise WalletUnavailableError(f"Wallet accounts query failed: {e}") from e
        if not accounts:
            self._set_account(None)
            logger.info("wallet_not_connected")
            self._notifier.notify(NoticeLevel.INFO, CONNECT_WALLET_NOTICE)
            return None
        account = self._set_account(accounts[0])
        logger.debug("wallet_connection_found", account=account)
        return account

    def on_accounts_changed(self, handler: EventHandler) -> Unsubscribe:
        return self.probe_wallet().subscribe(ACCOUNTS_CHANGED, handler)

    def on_chain_changed(self, handler: EventHandler) -> Unsubscribe:
        return self.probe_wallet().subscribe(CHAIN_CHANGED, handler)

    def watch(self) -> Unsubscribe:
        """
        Install the session's own reactions to provider events.

        Returns an unsubscribe callable removing both handlers. Calling watch()
        again replaces the previous subscription.
        """
        self.unwatch()
        unsub_accounts = self.on_accounts_changed(self._handle_accounts_changed)
        unsub_chain = self.on_chain_changed(self._handle_chain_changed)

        def unsubscribe() -> None:
            unsub_accounts()
            unsub_chain()

        self._watch_unsubscribe = unsubscribe
        return unsubscribe

    def unwatch(self) -> None:
        if self._watch_unsubscribe is not None:
            self._watch_unsubscribe()
            self._watch_unsubscribe = None

    async def _handle_accounts_changed(self, accounts: list[str] | None) -> None:
        first = accounts[0] if accounts else None
        account = self._set_account(first)
        logger.info("wallet_accounts_changed", account=account)
        if await self.check_existing_connection() is None:
            self._notify_disconnect()

    def on_disconnect(self, handler: Callable[[], None]) -> Unsubscribe:
        """Run handler when an accounts change leaves the session without an account."""
        self._disconnect_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._disconnect_handlers:
                self._disconnect_handlers.remove(handler)

        return unsubscribe

    def _notify_disconnect(self) -> None:
        for handler in list(self._disconnect_handlers):
            try:
                handler()
            except Exception as e:
                logger.exception("disconnect_handler_failed", error=str(e))

    async def _handle_chain_changed(self, chain_id: Any) -> None:
        logger.info("wallet_chain_changed", chain_id=str(chain_id))
        self._store.reset()
        if self._on_reload is not None:
            await self._on_reload()

    def _set_account(self, raw: str | None) -> str | None:
        account = raw.strip().lower() if raw else None
        previous = self._store.connected_account
        self._store.set(StateKey.CONNECTED_ACCOUNT, account)
        handle = self._store.contract
        if account != previous and getattr(handle, "signer", None) is not None:
            # signer-bound handle belongs to the previous account
            self._store.set(StateKey.CONTRACT, None)
        return account
