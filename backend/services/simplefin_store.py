"""Snapshot store - persistence operations used by the SimpleFIN importer.

Every write is flushed but never committed; the caller owns the transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from integrations.parsing_utils import parse_decimal, parse_unix_timestamp
from models import SimplefinAccount, SimplefinItem, SimplefinItemStatus

logger = logging.getLogger(__name__)


@dataclass
class NormalizedInstitution:
    """Institution data derived from a SimpleFIN ``org`` object."""

    id: str | None
    name: str
    url: str | None
    raw_org_data: dict[str, Any]


class SimplefinStore:
    """Upsert and find-or-create operations over SimpleFIN records."""

    def __init__(self, db: Session):
        self.db = db

    def upsert_item_snapshot(self, item: SimplefinItem, payload: dict[str, Any]) -> None:
        """Replace the item's raw ``/accounts`` snapshot."""
        item.raw_payload = payload
        self.db.flush()

    def upsert_institution_snapshot(
        self, item: SimplefinItem, institution: NormalizedInstitution
    ) -> None:
        """Link the item to an institution, replacing any previous snapshot."""
        item.institution_id = institution.id
        item.institution_name = institution.name
        item.institution_url = institution.url
        item.raw_institution_payload = institution.raw_org_data
        self.db.flush()

    def find_or_create_account(
        self, item: SimplefinItem, account_id: str
    ) -> tuple[SimplefinAccount, bool]:
        """Return the item's account with this external ID, creating it if absent.

        Returns:
            Tuple of (account, created).
        """
        existing = (
            self.db.query(SimplefinAccount)
            .filter_by(simplefin_item_id=item.id, account_id=account_id)
            .first()
        )
        if existing:
            return existing, False

        account = SimplefinAccount(simplefin_item_id=item.id, account_id=account_id)
        self.db.add(account)
        self.db.flush()  # Ensure the new account gets an ID
        return account, True

    def upsert_account_snapshot(
        self, account: SimplefinAccount, payload: dict[str, Any]
    ) -> None:
        """Replace the account snapshot and its denormalized columns.

        ``payload`` must not contain transactions; they are written by
        :meth:`update_account_transactions` only.
        """
        account.raw_payload = payload
        account.name = payload.get("name")
        account.currency = payload.get("currency") or None
        account.balance = parse_decimal(payload.get("balance"))
        account.available_balance = parse_decimal(payload.get("available-balance"))
        account.balance_date = parse_unix_timestamp(payload.get("balance-date"))
        self.db.flush()

    def update_account_transactions(
        self, account: SimplefinAccount, transactions: list[dict[str, Any]]
    ) -> None:
        account.raw_transactions_payload = transactions
        self.db.flush()

    def mark_requires_update(self, item: SimplefinItem, message: str) -> None:
        """Flag the item for reauthentication."""
        item.status = SimplefinItemStatus.REQUIRES_UPDATE.value
        item.last_sync_error = message
        self.db.flush()

    def mark_synced(self, item: SimplefinItem, synced_at: datetime) -> None:
        item.last_synced_at = synced_at
        item.last_sync_error = None
        self.db.flush()

    def record_sync_error(self, item: SimplefinItem, message: str) -> None:
        item.last_sync_error = message
        self.db.flush()
