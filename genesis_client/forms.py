"""
Create-project form model.

Validates what the create form collects before anything is sent: all fields
required, cost of at least 0.01 ETH, an http(s) image URL and an expiry date
no earlier than today.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from genesis_client.core.exceptions import InvalidAmountError, InvalidDateError
from genesis_client.ledger import units

MIN_COST_ETH = Decimal("0.01")


class ProjectDraftError(ValueError):
    """One or more form fields are invalid; `errors` maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class ProjectDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    title: str = Field(..., min_length=1, description="Project title")
    description: str = Field(..., min_length=1, description="Project description")
    image_url: str = Field(..., min_length=1, description="Cover image URL (http or https)")
    cost: str = Field(..., min_length=1, description="Funding goal in ETH, as typed")
    expires: date = Field(..., description="Last day of the campaign")

    @field_validator("image_url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return v

    @field_validator("cost")
    @classmethod
    def _check_cost(cls, v: str) -> str:
        try:
            wei = units.decimal_to_fixed_point(v)
        except InvalidAmountError as e:
            raise ValueError(str(e)) from e
        if units.fixed_point_to_decimal(wei) < MIN_COST_ETH:
            raise ValueError(f"must be at least {MIN_COST_ETH} ETH")
        return v

    @field_validator("expires", mode="before")
    @classmethod
    def _parse_expires(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return date.fromisoformat(v.strip())
            except ValueError as e:
                raise ValueError(f"unparsable date {v!r}") from e
        return v

    @classmethod
    def parse(cls, today: date | None = None, **fields: Any) -> "ProjectDraft":
        """Validate form input; raises ProjectDraftError listing every bad field."""
        try:
            draft = cls(**fields)
        except ValidationError as e:
            errors = {".".join(str(p) for p in err["loc"]): err["msg"] for err in e.errors()}
            raise ProjectDraftError(errors) from e
        if draft.expires < (today or date.today()):
            raise InvalidDateError(f"Expiry {draft.expires.isoformat()} is in the past")
        return draft

    def as_create_params(self) -> dict[str, Any]:
        """Keyword arguments for ContractGateway.create_project."""
        return {
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "cost": self.cost,
            "expires_at": self.expires.isoformat(),
        }
