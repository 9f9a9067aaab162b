"""
Ledger record schemas and application shapes.

Raw* models are the normalizer's input contract: one per Genesis struct, in
ABI field order, accepting dicts, attribute objects, or positional tuples
(as web3 decodes structs). Values stay in wire form (ints, hex or decimal
strings); unit conversion happens in the normalizer.

Project, Backer and Stats are the immutable application snapshots stored in
the session store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from genesis_client.core.exceptions import RecordFormatError


class ProjectStatus(str, Enum):
    """Genesis statusEnum, in ledger ordinal order."""

    OPEN = "Open"
    ACCEPTED = "Accepted"
    REVERTED = "Reverted"
    DELETED = "Deleted"
    PAID = "Paid"

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "ProjectStatus":
        members = list(cls)
        if not 0 <= ordinal < len(members):
            raise RecordFormatError(f"Unknown project status ordinal: {ordinal}")
        return members[ordinal]


def _as_mapping(item: Any, field_order: tuple[str, ...]) -> dict[str, Any]:
    """Flatten a dict, named tuple, plain tuple or attribute object into a dict keyed by ABI names."""
    if isinstance(item, BaseModel):
        return item.model_dump(by_alias=True)
    if isinstance(item, Mapping):
        return dict(item)
    if hasattr(item, "_asdict"):
        return dict(item._asdict())
    if isinstance(item, (tuple, list)):
        if len(item) != len(field_order):
            raise RecordFormatError(
                f"Expected {len(field_order)} positional fields, got {len(item)}"
            )
        return dict(zip(field_order, item))
    out = {name: getattr(item, name) for name in field_order if hasattr(item, name)}
    if not out:
        raise RecordFormatError(f"Unsupported ledger record type: {type(item).__name__}")
    return out


class _RawRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True, arbitrary_types_allowed=True)

    FIELD_ORDER: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_ledger(cls, item: Any):
        """Validate one record as returned by the contract."""
        if isinstance(item, cls):
            return item
        try:
            return cls.model_validate(_as_mapping(item, cls.FIELD_ORDER))
        except ValidationError as e:
            raise RecordFormatError(f"Invalid {cls.__name__}: {e}") from e


class RawProject(_RawRecord):
    """projectStruct as returned by getProject / getProjects."""

    FIELD_ORDER: ClassVar[tuple[str, ...]] = (
        "id",
        "owner",
        "title",
        "description",
        "imageURL",
        "cost",
        "raised",
        "timestamp",
        "expiresAt",
        "backers",
        "status",
    )

    id: Any
    owner: str
    title: str = ""
    description: str = ""
    image_url: str = Field("", alias="imageURL")
    cost: Any
    raised: Any
    timestamp: Any = None
    """Creation time, Unix seconds."""
    expires_at: Any = Field(..., alias="expiresAt")
    """Deadline, Unix seconds."""
    backers: Any
    status: Any


class RawBacker(_RawRecord):
    """backerStruct as returned by getBackers."""

    FIELD_ORDER: ClassVar[tuple[str, ...]] = ("owner", "contribution", "timestamp", "refunded")

    owner: str
    contribution: Any
    timestamp: Any
    refunded: bool = False


class RawStats(_RawRecord):
    """statsStruct as returned by the public stats() getter."""

    FIELD_ORDER: ClassVar[tuple[str, ...]] = ("totalProjects", "totalBacking", "totalDonations")

    total_projects: Any = Field(..., alias="totalProjects")
    total_backing: Any = Field(..., alias="totalBacking")
    total_donations: Any = Field(..., alias="totalDonations")


@dataclass(frozen=True)
class Project:
    """Read-only snapshot of a Genesis project."""

    id: int
    owner: str
    """Lowercase owner address."""
    title: str
    description: str
    image_url: str
    created_at: datetime | None
    """UTC; None when the ledger record carries no timestamp."""
    expires_at: datetime
    """UTC deadline. Expiry is computed at render time, never stored."""
    cost: Decimal
    """Funding goal in ether."""
    raised: Decimal
    """Amount raised in ether."""
    backer_count: int
    status: ProjectStatus
    date_label: str
    """YYYY-MM-DD label of expires_at in the host calendar."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "title": self.title,
            "description": self.description,
            "imageURL": self.image_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "expiresAt": self.expires_at.isoformat(),
            "date": self.date_label,
            "cost": str(self.cost),
            "raised": str(self.raised),
            "backers": self.backer_count,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Backer:
    """One contribution to a project."""

    owner: str
    contribution: Decimal
    refunded: bool
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "contribution": str(self.contribution),
            "refunded": self.refunded,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Stats:
    """Platform-wide aggregates."""

    total_projects: int
    total_backing: int
    total_donations: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProjects": self.total_projects,
            "totalBacking": self.total_backing,
            "totalDonations": str(self.total_donations),
        }
