"""Pydantic schemas for SimpleFIN items and accounts."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, model_validator


class SimplefinItemCreate(BaseModel):
    """Request body for linking a SimpleFIN item.

    At most one of ``access_url`` or ``setup_token`` may be given; with
    neither, the configured SIMPLEFIN_ACCESS_URL is used.
    """

    name: Optional[str] = None
    access_url: Optional[str] = None
    setup_token: Optional[str] = None

    @model_validator(mode="after")
    def require_one_credential(self) -> "SimplefinItemCreate":
        if self.access_url and self.setup_token:
            raise ValueError("Provide only one of access_url or setup_token")
        return self


class SimplefinItemResponse(BaseModel):
    """Response schema for a SimpleFIN item (access URL is never returned)."""

    id: str
    name: Optional[str] = None
    status: str
    last_synced_at: Optional[datetime] = None
    last_sync_error: Optional[str] = None
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    institution_url: Optional[str] = None
    account_count: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SimplefinAccountResponse(BaseModel):
    """Response schema for a SimpleFIN account."""

    id: str
    account_id: str
    name: Optional[str] = None
    currency: Optional[str] = None
    balance: Optional[Decimal] = None
    available_balance: Optional[Decimal] = None
    balance_date: Optional[datetime] = None
    transaction_count: int = 0
    raw_transactions_payload: Optional[list[dict[str, Any]]] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
