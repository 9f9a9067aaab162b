"""
Pytest fixtures for Genesis client tests.

FakeProvider stands in for the injected wallet; FakeLedger / FakeHandle simulate
the Genesis contract in memory (transactions take effect when wait() is awaited,
like a mined block). Each test gets a fresh process-wide session store.
"""

from __future__ import annotations

import asyncio
import itertools

import pytest

from genesis_client.core.exceptions import WalletUnavailableError
from genesis_client.gateway.contract import ContractGateway
from genesis_client.gateway.interfaces import ACCOUNTS_CHANGED, CHAIN_CHANGED, invoke_handler
from genesis_client.session.manager import SessionManager
from genesis_client.session.notices import CollectingNotifier
from genesis_client.session.state import get_session_store, reset_session_store_for_test

ALICE = "0xABCDEF0123456789ABCDEF0123456789ABCDEF01"
BOB = "0x1111111111111111111111111111111111111111"
WEI = 10**18


class FakeProvider:
    def __init__(self, accounts=None, *, present=True, reject=False):
        self.is_present = present
        self.authorized = list(accounts or [])
        self.reject = reject
        self.request_calls = 0
        self.handlers = {ACCOUNTS_CHANGED: [], CHAIN_CHANGED: []}

    async def request_accounts(self):
        self.request_calls += 1
        if self.reject:
            raise RuntimeError("User rejected the request.")
        return list(self.authorized)

    async def get_authorized_accounts(self):
        return list(self.authorized)

    def subscribe(self, event, handler):
        self.handlers[event].append(handler)
        return lambda: self.handlers[event].remove(handler)

    def get_signer(self, account):
        return account

    async def emit(self, event, payload):
        for handler in list(self.handlers[event]):
            await invoke_handler(handler, payload)


class FakeLedger:
    """In-memory Genesis contract. Records are dicts keyed by ABI names, ints in wei / seconds."""

    def __init__(self):
        self.projects = []
        self.backers = {}
        self.calls = []
        self.transactions = []
        self.failing_calls = set()
        self.rejected = set()
        self.reverted = set()
        self.now = 1_700_000_000
        self._hashes = itertools.count(1)

    def add_project(self, owner=ALICE, cost=2 * WEI, expires_at=1_735_689_600, title="Solar farm"):
        pid = len(self.projects)
        self.projects.append(
            {
                "id": pid,
                "owner": owner,
                "title": title,
                "description": "desc",
                "imageURL": "https://example.com/p.png",
                "cost": cost,
                "raised": 0,
                "timestamp": self.now,
                "expiresAt": expires_at,
                "backers": 0,
                "status": 0,
            }
        )
        self.backers[pid] = []
        return pid

    def stats(self):
        total_backing = sum(len(b) for b in self.backers.values())
        donations = sum(b["contribution"] for bs in self.backers.values() for b in bs)
        return (len(self.projects), total_backing, donations)

    def apply(self, method, args, tx_params, signer):
        sender = (tx_params or {}).get("from") or signer
        if method == "createProject":
            title, description, image_url, cost, expires_at = args
            pid = self.add_project(owner=sender, cost=cost, expires_at=expires_at, title=title)
            self.projects[pid].update(description=description, imageURL=image_url)
        elif method == "updateProject":
            pid, title, description, image_url, expires_at = args
            self.projects[pid].update(title=title, description=description, imageURL=image_url, expiresAt=expires_at)
        elif method == "deleteProject":
            self.projects[args[0]]["status"] = 3
        elif method == "backProject":
            pid = args[0]
            value = tx_params["value"]
            self.backers[pid].append({"owner": sender, "contribution": value, "timestamp": self.now, "refunded": False})
            self.projects[pid]["raised"] += value
            self.projects[pid]["backers"] += 1
        elif method == "payOutProject":
            self.projects[args[0]]["status"] = 4
        self.now += 60


class FakePending:
    def __init__(self, ledger, method, args, tx_params, signer):
        self._ledger = ledger
        self._method = method
        self._args = args
        self._tx_params = tx_params
        self._signer = signer
        self.tx_hash = f"0x{next(ledger._hashes):064x}"

    async def wait(self):
        await asyncio.sleep(0)
        if self._method in self._ledger.reverted:
            raise RuntimeError("execution reverted")
        self._ledger.apply(self._method, self._args, self._tx_params, self._signer)
        return {"status": 1, "transactionHash": self.tx_hash}


class FakeHandle:
    def __init__(self, ledger, signer):
        self._ledger = ledger
        self.signer = signer.lower() if signer else None

    async def call(self, method, *args):
        self._ledger.calls.append((method, args))
        await asyncio.sleep(0)
        if method in self._ledger.failing_calls:
            raise RuntimeError(f"{method}: connection refused")
        if method == "getProjects":
            return [dict(p) for p in self._ledger.projects]
        if method == "getProject":
            return dict(self._ledger.projects[args[0]])
        if method == "getBackers":
            return [dict(b) for b in self._ledger.backers[args[0]]]
        if method == "stats":
            return self._ledger.stats()
        raise AttributeError(method)

    async def transact(self, method, *args, tx_params=None):
        if self.signer is None:
            raise WalletUnavailableError("Read-only contract handle cannot send transactions.")
        self._ledger.transactions.append((method, args, tx_params))
        if method in self._ledger.rejected:
            raise RuntimeError("MetaMask Tx Signature: User denied transaction signature.")
        return FakePending(self._ledger, method, args, tx_params, self.signer)


@pytest.fixture
def store():
    """Fresh process-wide session store."""
    reset_session_store_for_test()
    yield get_session_store()
    reset_session_store_for_test()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def provider():
    return FakeProvider([ALICE])


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def factory(ledger):
    built = []

    def build(provider, signer):
        handle = FakeHandle(ledger, signer)
        built.append(handle)
        return handle

    build.built = built
    return build


@pytest.fixture
def session(provider, store, notifier):
    return SessionManager(provider, store, notifier)


@pytest.fixture
def gateway(session, factory, notifier):
    return ContractGateway(session, factory, notifier)
