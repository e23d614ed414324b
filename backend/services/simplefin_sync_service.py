"""Sync service - runs SimpleFIN imports with transaction handling."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from integrations.exceptions import ProviderError
from integrations.provider_protocol import SimplefinProvider
from integrations.simplefin_client import SimpleFINClient
from models import SimplefinItem, SimplefinItemStatus
from services.simplefin_importer import SimplefinImporter
from services.simplefin_store import SimplefinStore

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """Outcome counts of a :meth:`SimplefinSyncService.sync_all` run."""

    synced: list[str] = field(default_factory=list)
    requires_update: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class SimplefinSyncService:
    """Service for syncing SimpleFIN items one at a time."""

    # Class-level lock shared across all instances to prevent concurrent syncs
    # of the same item within this process. Multi-process deployments must
    # serialize per item themselves.
    _sync_lock = threading.Lock()

    def __init__(self, provider: Optional[SimplefinProvider] = None):
        """Initialize with optional provider for dependency injection.

        Args:
            provider: SimpleFIN provider. If None, a SimpleFINClient is
                      created on first use.
        """
        self._provider = provider

    @classmethod
    def is_sync_in_progress(cls) -> bool:
        """Check if a sync operation is currently in progress."""
        acquired = cls._sync_lock.acquire(blocking=False)
        if acquired:
            cls._sync_lock.release()
            return False
        return True

    @property
    def provider(self) -> SimplefinProvider:
        """Get the provider, creating the default client if not provided."""
        if self._provider is None:
            self._provider = SimpleFINClient()
        return self._provider

    def sync_item(self, db: Session, item: SimplefinItem) -> SimplefinItem:
        """Import one item and commit.

        On any failure the partial import is rolled back, the error is
        recorded on the item and the exception is re-raised.

        Raises:
            ValueError: Another sync is already in progress.
            ProviderError: The import failed (including SimplefinError).
            SQLAlchemyError: The import could not be written.
        """
        if not self._sync_lock.acquire(blocking=False):
            raise ValueError("Sync already in progress")
        try:
            return self._sync_item_locked(db, item)
        finally:
            self._sync_lock.release()

    def _sync_item_locked(self, db: Session, item: SimplefinItem) -> SimplefinItem:
        item_id = item.id
        logger.info("Syncing SimpleFIN item %s", item_id)
        try:
            SimplefinImporter(self.provider).import_item(db, item)
            db.commit()
        except Exception as e:
            db.rollback()
            if isinstance(e, ProviderError):
                logger.warning("SimpleFIN item %s sync failed: %s", item_id, e)
            else:
                logger.exception("SimpleFIN item %s sync failed", item_id)
            SimplefinStore(db).record_sync_error(item, str(e))
            db.commit()
            raise

        db.refresh(item)
        if item.requires_update:
            logger.info("SimpleFIN item %s flagged requires_update", item_id)
        else:
            logger.info("SimpleFIN item %s synced", item_id)
        return item

    def sync_all(self, db: Session) -> SyncSummary:
        """Sync every active item, continuing past individual failures."""
        summary = SyncSummary()
        items = (
            db.query(SimplefinItem)
            .filter(SimplefinItem.status == SimplefinItemStatus.ACTIVE.value)
            .order_by(SimplefinItem.created_at)
            .all()
        )
        logger.info("Syncing %d active SimpleFIN items", len(items))

        for item in items:
            item_id = item.id
            try:
                self.sync_item(db, item)
            except Exception as e:
                summary.failed[item_id] = str(e)
                continue
            if item.requires_update:
                summary.requires_update.append(item_id)
            else:
                summary.synced.append(item_id)

        logger.info(
            "SimpleFIN sync complete: %d synced, %d require update, %d failed",
            len(summary.synced), len(summary.requires_update), len(summary.failed),
        )
        return summary
