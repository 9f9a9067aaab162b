"""
Ledger record normalizer: raw contract results to application snapshots.

Pure functions, no I/O: lowercase addresses, 18-decimal fixed point to
Decimal, int-like fields to int, ledger seconds to UTC datetimes. Collections
come back from the contract in insertion order and are reversed so the most
recent item is first. Expiry is not assigned here; it depends on the clock
and is computed at render time (see genesis_client.presentation).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from genesis_client.core.exceptions import InvalidAmountError, RecordFormatError
from genesis_client.ledger import units
from genesis_client.ledger.models import (
    Backer,
    Project,
    ProjectStatus,
    RawBacker,
    RawProject,
    RawStats,
    Stats,
)


def _int_field(record: str, name: str, raw: Any) -> int:
    try:
        value = units.to_int(raw)
    except InvalidAmountError as e:
        raise RecordFormatError(f"{record}.{name}: {e}") from e
    if value < 0:
        raise RecordFormatError(f"{record}.{name} must be non-negative, got {value}")
    return value


def _amount_field(record: str, name: str, raw: Any):
    return units.fixed_point_to_decimal(_int_field(record, name, raw))


def _address(record: str, raw: str) -> str:
    address = (raw or "").strip().lower()
    if not address:
        raise RecordFormatError(f"{record}.owner is empty")
    return address


def normalize_project(item: Any) -> Project:
    raw = RawProject.from_ledger(item)
    expires_seconds = _int_field("project", "expiresAt", raw.expires_at)
    created_at = None
    if raw.timestamp is not None:
        created_at = units.epoch_seconds_to_datetime(_int_field("project", "timestamp", raw.timestamp))
    return Project(
        id=_int_field("project", "id", raw.id),
        owner=_address("project", raw.owner),
        title=raw.title,
        description=raw.description,
        image_url=raw.image_url,
        created_at=created_at,
        expires_at=units.epoch_seconds_to_datetime(expires_seconds),
        cost=_amount_field("project", "cost", raw.cost),
        raised=_amount_field("project", "raised", raw.raised),
        backer_count=_int_field("project", "backers", raw.backers),
        status=ProjectStatus.from_ordinal(_int_field("project", "status", raw.status)),
        date_label=units.epoch_millis_to_date_label(expires_seconds * 1000),
    )


def normalize_projects(items: Iterable[Any]) -> tuple[Project, ...]:
    """Normalize getProjects() output, newest project first."""
    return tuple(normalize_project(item) for item in reversed(list(items)))


def normalize_backer(item: Any) -> Backer:
    raw = RawBacker.from_ledger(item)
    return Backer(
        owner=_address("backer", raw.owner),
        contribution=_amount_field("backer", "contribution", raw.contribution),
        refunded=raw.refunded,
        timestamp=units.epoch_seconds_to_datetime(_int_field("backer", "timestamp", raw.timestamp)),
    )


def normalize_backers(items: Iterable[Any]) -> tuple[Backer, ...]:
    """Normalize getBackers() output, latest contribution first."""
    return tuple(normalize_backer(item) for item in reversed(list(items)))


def normalize_stats(item: Any) -> Stats:
    raw = RawStats.from_ledger(item)
    return Stats(
        total_projects=_int_field("stats", "totalProjects", raw.total_projects),
        total_backing=_int_field("stats", "totalBacking", raw.total_backing),
        total_donations=_amount_field("stats", "totalDonations", raw.total_donations),
    )
