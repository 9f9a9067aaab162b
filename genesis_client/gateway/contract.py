"""
Genesis contract gateway: write and read operations against the ledger.

Every write converts user input first (so malformed amounts and dates never
reach the network), resolves a handle, submits the transaction, waits for
confirmation and reloads the affected slice of session state. Reads fetch
raw records, normalize them and replace the state entry wholesale.

No retries and no idempotency: a duplicate call is a duplicate transaction.
Overlapping calls race on the session store; the last reload wins.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

from genesis_client.core.exceptions import (
    ContractCallError,
    GenesisError,
    InvalidDateError,
    RecordFormatError,
    TransactionFailedError,
    WalletUnavailableError,
)
from genesis_client.gateway.interfaces import ContractFactory, ContractHandle, WalletProvider
from genesis_client.genesis_logging import get_logger
from genesis_client.ledger import units
from genesis_client.ledger.models import Backer, Project, Stats
from genesis_client.ledger.normalizer import normalize_backers, normalize_project, normalize_projects, normalize_stats
from genesis_client.session.manager import SessionManager
from genesis_client.session.notices import LogNotifier, NoticeLevel, Notifier
from genesis_client.session.state import StateKey

logger = get_logger(__name__)

T = TypeVar("T")

PROJECT_CREATED_NOTICE = "Project created successfully, will reflect in 30sec."
PROJECT_UPDATED_NOTICE = "Project updated successfully, will reflect in 30sec."
PROJECT_DELETED_NOTICE = "Project deleted successfully, will reflect in 30sec."
PROJECT_BACKED_NOTICE = "Thanks for backing this project!"
PROJECT_PAID_OUT_NOTICE = "Project payout completed."
STALE_STATE_NOTICE = "Transaction confirmed, but refreshing the data failed."


def _reported(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Log and report gateway failures as user notices, then re-raise."""

    @functools.wraps(fn)
    async def wrapper(self: "ContractGateway", *args: Any, **kwargs: Any) -> T:
        try:
            return await fn(self, *args, **kwargs)
        except GenesisError as e:
            # bad user input goes back to the caller without a notice
            if isinstance(e, ValueError) and not isinstance(e, RecordFormatError):
                raise
            logger.error("gateway_operation_failed", operation=fn.__name__, error_type=type(e).__name__, error=str(e))
            self._notifier.notify(NoticeLevel.ERROR, str(e))
            raise

    return wrapper


def _expiry_seconds(value: Any) -> int:
    """Unix seconds for a deadline given as a date / datetime / ISO string, or already in seconds."""
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise InvalidDateError(f"Expiry must not be before the epoch, got {value}")
        return value
    return units.date_to_epoch_seconds(value)


class ContractGateway:
    """Genesis contract operations bound to one wallet session."""

    def __init__(
        self,
        session: SessionManager,
        contract_factory: ContractFactory,
        notifier: Notifier | None = None,
    ) -> None:
        self._session = session
        self._factory = contract_factory
        self._store = session.store
        self._notifier = notifier if notifier is not None else LogNotifier()
        session.on_disconnect(self._reopen_read_only)

    # Handles

    def _require_provider(self) -> WalletProvider:
        provider = self._session.provider
        if provider is None or not provider.is_present:
            raise WalletUnavailableError()
        return provider

    def resolve_handle(self) -> ContractHandle:
        """
        Signer-bound handle for the connected account, else the cached read-only one.

        Raises WalletUnavailableError when no account is connected and no
        read-only handle has been opened.
        """
        account = self._store.connected_account
        cached = self._store.contract
        if account:
            if cached is not None and getattr(cached, "signer", None) == account:
                return cached
            provider = self._require_provider()
            handle = self._factory(provider, provider.get_signer(account))
            self._store.set(StateKey.CONTRACT, handle)
            logger.debug("contract_handle_built", account=account, read_only=False)
            return handle
        if cached is not None and getattr(cached, "signer", None) is None:
            return cached
        raise WalletUnavailableError("No contract handle available; connect a wallet first.")

    def open_read_only(self) -> ContractHandle:
        """Build and cache a read-only handle for browsing without a connected account."""
        provider = self._require_provider()
        handle = self._factory(provider, None)
        self._store.set(StateKey.CONTRACT, handle)
        logger.debug("contract_handle_built", read_only=True)
        return handle

    def _reopen_read_only(self) -> None:
        """Keep browsing available after the wallet disconnects."""
        cached = self._store.contract
        if cached is not None and getattr(cached, "signer", None) is None:
            return
        provider = self._session.provider
        if provider is None or not provider.is_present:
            return
        self.open_read_only()
        logger.info("contract_handle_reopened_read_only")

    # Call / transaction lifecycle

    async def _call(self, handle: ContractHandle, method: str, *args: Any) -> Any:
        try:
            return await handle.call(method, *args)
        except GenesisError:
            raise
        except Exception as e:
            logger.error("contract_call_failed", method=method, error=str(e))
            raise ContractCallError(f"{method} failed: {e}", method=method) from e

    async def _submit(self, method: str, *args: Any, tx_params: dict[str, Any] | None = None) -> Any:
        handle = self.resolve_handle()
        log = logger.bind(method=method, account=handle.signer)
        tx_hash = None
        try:
            pending = await handle.transact(method, *args, tx_params=tx_params)
            tx_hash = pending.tx_hash
            log.info("transaction_submitted", tx_hash=tx_hash)
            receipt = await pending.wait()
        except GenesisError:
            raise
        except Exception as e:
            log.error("transaction_failed", tx_hash=tx_hash, error=str(e))
            raise TransactionFailedError(f"{method} failed: {e}", method=method, tx_hash=tx_hash) from e
        log.info("transaction_confirmed", tx_hash=tx_hash)
        return receipt

    async def _reload(self, reload: Callable[..., Awaitable[Any]], *args: Any) -> None:
        """Refresh state after a confirmed write. The write stands even if this fails."""
        try:
            await reload(*args)
        except GenesisError as e:
            logger.warning("reload_after_write_failed", reload=reload.__name__, error=str(e))
            self._notifier.notify(NoticeLevel.WARNING, STALE_STATE_NOTICE)

    def _require_account(self, action: str) -> str:
        account = self._store.connected_account
        if not account:
            raise WalletUnavailableError(f"Connect a wallet account to {action}.")
        return account

    # Writes

    @_reported
    async def create_project(
        self,
        title: str,
        description: str,
        image_url: str,
        cost: Any,
        expires_at: Any,
    ) -> Any:
        cost_wei = units.decimal_to_fixed_point(cost)
        expires = _expiry_seconds(expires_at)
        self._require_provider()
        receipt = await self._submit("createProject", title, description, image_url, cost_wei, expires)
        self._notifier.notify(NoticeLevel.SUCCESS, PROJECT_CREATED_NOTICE)
        await self._reload(self._load_projects)
        return receipt

    @_reported
    async def update_project(
        self,
        project_id: int,
        title: str,
        description: str,
        image_url: str,
        expires_at: Any,
    ) -> Any:
        expires = _expiry_seconds(expires_at)
        self._require_provider()
        receipt = await self._submit("updateProject", int(project_id), title, description, image_url, expires)
        self._notifier.notify(NoticeLevel.SUCCESS, PROJECT_UPDATED_NOTICE)
        await self._reload(self._load_project, project_id)
        return receipt

    @_reported
    async def delete_project(self, project_id: int) -> Any:
        self._require_provider()
        receipt = await self._submit("deleteProject", int(project_id))
        self._notifier.notify(NoticeLevel.SUCCESS, PROJECT_DELETED_NOTICE)
        await self._reload(self._load_project, project_id)
        return receipt

    @_reported
    async def back_project(self, project_id: int, amount: Any) -> Any:
        value = units.decimal_to_fixed_point(amount)
        self._require_provider()
        account = self._require_account("back a project")
        receipt = await self._submit(
            "backProject", int(project_id), tx_params={"from": account, "value": value}
        )
        logger.info("project_backed", account=account, project_id=int(project_id), value_wei=value)
        self._notifier.notify(NoticeLevel.SUCCESS, PROJECT_BACKED_NOTICE)
        await self._reload(self._get_backers, project_id)
        return receipt

    @_reported
    async def payout_project(self, project_id: int) -> Any:
        self._require_provider()
        account = self._require_account("pay out a project")
        receipt = await self._submit("payOutProject", int(project_id), tx_params={"from": account})
        self._notifier.notify(NoticeLevel.SUCCESS, PROJECT_PAID_OUT_NOTICE)
        await self._reload(self._get_backers, project_id)
        return receipt

    # Reads

    @_reported
    async def load_projects(self) -> tuple[Project, ...]:
        """Refresh the project list and the platform stats together."""
        return await self._load_projects()

    @_reported
    async def load_project(self, project_id: int) -> Project:
        return await self._load_project(project_id)

    @_reported
    async def get_backers(self, project_id: int) -> tuple[Backer, ...]:
        return await self._get_backers(project_id)

    # Unreported reads, shared by the public reads and the post-write reload

    async def _load_projects(self) -> tuple[Project, ...]:
        self._require_provider()
        handle = self.resolve_handle()
        raw_projects = await self._call(handle, "getProjects")
        raw_stats = await self._call(handle, "stats")
        projects = normalize_projects(raw_projects)
        stats: Stats = normalize_stats(raw_stats)
        self._store.set(StateKey.STATS, stats)
        self._store.set(StateKey.PROJECTS, projects)
        logger.info("projects_loaded", count=len(projects), total_projects=stats.total_projects)
        return projects

    async def _load_project(self, project_id: int) -> Project:
        self._require_provider()
        handle = self.resolve_handle()
        project = normalize_project(await self._call(handle, "getProject", int(project_id)))
        self._store.set(StateKey.PROJECT, project)
        logger.debug("project_loaded", project_id=project.id, status=project.status.value)
        return project

    async def _get_backers(self, project_id: int) -> tuple[Backer, ...]:
        self._require_provider()
        handle = self.resolve_handle()
        backers = normalize_backers(await self._call(handle, "getBackers", int(project_id)))
        self._store.set(StateKey.BACKERS, backers)
        logger.debug("backers_loaded", project_id=int(project_id), count=len(backers))
        return backers
