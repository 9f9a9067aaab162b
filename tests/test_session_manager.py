"""
Tests for the wallet session manager: probing, connecting, existing connections
and provider change events.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from conftest import ALICE, BOB, FakeProvider
from genesis_client.core.exceptions import ConnectionRejectedError, WalletUnavailableError
from genesis_client.gateway.interfaces import ACCOUNTS_CHANGED, CHAIN_CHANGED
from genesis_client.session.manager import CONNECT_WALLET_NOTICE, SessionManager
from genesis_client.session.notices import CollectingNotifier, LogNotifier, NoticeLevel


def test_probe_wallet_without_provider(store, notifier):
    manager = SessionManager(None, store, notifier)
    with pytest.raises(WalletUnavailableError):
        manager.probe_wallet()
    notices = notifier.drain()
    assert notices and notices[0].level is NoticeLevel.ERROR


def test_probe_wallet_provider_not_present(store, notifier):
    manager = SessionManager(FakeProvider(present=False), store, notifier)
    with pytest.raises(WalletUnavailableError):
        asyncio.run(manager.connect())


def test_connect_stores_lowercase_first_account(store):
    manager = SessionManager(FakeProvider([ALICE, BOB]), store)
    account = asyncio.run(manager.connect())
    assert account == ALICE.lower()
    assert store.connected_account == ALICE.lower()


def test_connect_rejected(store, notifier):
    provider = FakeProvider([ALICE], reject=True)
    manager = SessionManager(provider, store, notifier)
    with pytest.raises(ConnectionRejectedError):
        asyncio.run(manager.connect())
    assert store.connected_account is None
    assert provider.request_calls == 1
    assert notifier.drain()[0].level is NoticeLevel.ERROR


def test_connect_with_no_accounts_is_rejected(store):
    manager = SessionManager(FakeProvider([]), store)
    with pytest.raises(ConnectionRejectedError):
        asyncio.run(manager.connect())


def test_check_existing_connection_found(session, store, provider):
    assert asyncio.run(session.check_existing_connection()) == ALICE.lower()
    assert store.connected_account == ALICE.lower()
    assert provider.request_calls == 0


def test_check_existing_connection_none_emits_notice(store, notifier):
    """Zero authorized accounts: stays disconnected, asks to connect, does not raise."""
    manager = SessionManager(FakeProvider([]), store, notifier)
    assert asyncio.run(manager.check_existing_connection()) is None
    assert store.connected_account is None
    notices = notifier.drain()
    assert [n.message for n in notices] == [CONNECT_WALLET_NOTICE]
    assert notices[0].level is NoticeLevel.INFO


def test_account_change_updates_session_and_drops_signer_handle(session, store, provider):
    class Handle:
        signer = ALICE.lower()

    async def scenario():
        await session.check_existing_connection()
        store.set("contract", Handle())
        session.watch()
        provider.authorized = [BOB]
        await provider.emit(ACCOUNTS_CHANGED, [BOB])

    asyncio.run(scenario())
    assert store.connected_account == BOB.lower()
    assert store.contract is None


def test_account_change_keeps_read_only_handle(store):
    class ReadOnly:
        signer = None

    provider = FakeProvider([])
    manager = SessionManager(provider, store)
    handle = ReadOnly()
    store.set("contract", handle)

    async def scenario():
        manager.watch()
        provider.authorized = [BOB]
        await provider.emit(ACCOUNTS_CHANGED, [BOB])

    asyncio.run(scenario())
    assert store.connected_account == BOB.lower()
    assert store.contract is handle


def test_chain_change_is_hard_reset(store, provider):
    reloads = []

    async def on_reload():
        reloads.append(store.projects)

    manager = SessionManager(provider, store, on_reload=on_reload)

    async def scenario():
        await manager.check_existing_connection()
        store.set("projects", ("p1", "p2"))
        manager.watch()
        await provider.emit(CHAIN_CHANGED, 5)

    asyncio.run(scenario())
    assert store.get("projects") is None
    assert store.connected_account is None
    assert reloads == [None]


def test_watch_unsubscribe_removes_handlers(session, provider):
    session.watch()
    assert len(provider.handlers[ACCOUNTS_CHANGED]) == 1
    assert len(provider.handlers[CHAIN_CHANGED]) == 1
    session.watch()
    assert len(provider.handlers[ACCOUNTS_CHANGED]) == 1
    session.unwatch()
    assert provider.handlers[ACCOUNTS_CHANGED] == []
    assert provider.handlers[CHAIN_CHANGED] == []


def test_on_chain_changed_custom_handler(session, provider):
    seen = []
    unsubscribe = session.on_chain_changed(seen.append)
    asyncio.run(provider.emit(CHAIN_CHANGED, 31337))
    unsubscribe()
    asyncio.run(provider.emit(CHAIN_CHANGED, 1))
    assert seen == [31337]


def test_disconnect_handlers_run_only_when_account_lost(session, provider):
    calls = []
    unsubscribe = session.on_disconnect(lambda: calls.append(session.connected_account))

    async def scenario():
        await session.check_existing_connection()
        session.watch()
        provider.authorized = [BOB]
        await provider.emit(ACCOUNTS_CHANGED, [BOB])
        provider.authorized = []
        await provider.emit(ACCOUNTS_CHANGED, [])
        unsubscribe()
        await provider.emit(ACCOUNTS_CHANGED, [])

    asyncio.run(scenario())
    assert calls == [None]


def test_empty_collecting_notifier_receives_notices(store):
    notifier = CollectingNotifier()
    assert len(notifier) == 0
    manager = SessionManager(FakeProvider([]), store, notifier)
    asyncio.run(manager.check_existing_connection())
    assert [n.message for n in notifier.drain()] == [CONNECT_WALLET_NOTICE]


def test_log_notifier_uses_matching_log_level():
    with patch("genesis_client.session.notices.logger") as log:
        notifier = LogNotifier()
        notifier.notify(NoticeLevel.WARNING, "stale")
        notifier.notify(NoticeLevel.ERROR, "failed")
        notifier.notify(NoticeLevel.SUCCESS, "done")
    log.warning.assert_called_once_with("user_notice", notice_level="warning", notice="stale")
    log.error.assert_called_once_with("user_notice", notice_level="error", notice="failed")
    log.info.assert_called_once_with("user_notice", notice_level="success", notice="done")
