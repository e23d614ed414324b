"""SimpleFIN API endpoints.

Links SimpleFIN items (from an access URL or a one-time setup token),
lists items and their accounts, and triggers per-item syncs.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.helpers import get_or_404
from config import settings
from database import get_db
from integrations.exceptions import ProviderAuthError, ProviderError, SimplefinError
from integrations.simplefin_client import SimpleFINClient
from models import SimplefinAccount, SimplefinItem
from schemas.simplefin import (
    SimplefinAccountResponse,
    SimplefinItemCreate,
    SimplefinItemResponse,
)
from services.simplefin_sync_service import SimplefinSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/simplefin", tags=["simplefin"])

# Dependency injection for testing
_sync_service_override: Optional[SimplefinSyncService] = None


def get_sync_service() -> SimplefinSyncService:
    """Get SimplefinSyncService instance, allowing for test overrides."""
    if _sync_service_override is not None:
        return _sync_service_override
    return SimplefinSyncService()


def _get_simplefin_client() -> SimpleFINClient:
    """Dependency for injecting the SimpleFIN client (overridable in tests)."""
    return SimpleFINClient()


def _item_response(item: SimplefinItem) -> SimplefinItemResponse:
    response = SimplefinItemResponse.model_validate(item)
    response.account_count = len(item.accounts)
    return response


def _account_response(account: SimplefinAccount) -> SimplefinAccountResponse:
    response = SimplefinAccountResponse.model_validate(account)
    response.transaction_count = len(account.raw_transactions_payload or [])
    return response


@router.post("/items", response_model=SimplefinItemResponse, status_code=201)
def create_item(
    body: SimplefinItemCreate,
    db: Session = Depends(get_db),
    client: SimpleFINClient = Depends(_get_simplefin_client),
):
    """Link a new SimpleFIN item.

    A setup token is claimed immediately; it cannot be reused afterwards.
    """
    access_url = body.access_url or settings.SIMPLEFIN_ACCESS_URL
    if body.setup_token:
        try:
            access_url = client.claim_access_url(body.setup_token)
        except ProviderAuthError as e:
            logger.warning("SimpleFIN setup token claim failed: %s", e)
            raise HTTPException(status_code=400, detail="Failed to claim setup token")

    if not access_url:
        raise HTTPException(status_code=400, detail="No access_url or setup_token provided")
    if not access_url.startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="access_url must be an http(s) URL")

    item = SimplefinItem(name=body.name, access_url=access_url)
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Created SimpleFIN item %s", item.id)
    return _item_response(item)


@router.get("/items", response_model=list[SimplefinItemResponse])
def list_items(db: Session = Depends(get_db)):
    """List all linked SimpleFIN items."""
    items = db.query(SimplefinItem).order_by(SimplefinItem.created_at.desc()).all()
    return [_item_response(item) for item in items]


@router.get("/items/{item_id}", response_model=SimplefinItemResponse)
def get_item(item_id: str, db: Session = Depends(get_db)):
    item = get_or_404(db, SimplefinItem, item_id, detail="SimpleFIN item not found")
    return _item_response(item)


@router.get("/items/{item_id}/accounts", response_model=list[SimplefinAccountResponse])
def list_item_accounts(item_id: str, db: Session = Depends(get_db)):
    """List the accounts imported for an item."""
    item = get_or_404(db, SimplefinItem, item_id, detail="SimpleFIN item not found")
    return [_account_response(account) for account in item.accounts]


@router.post("/items/{item_id}/sync", response_model=SimplefinItemResponse)
def sync_item(
    item_id: str,
    db: Session = Depends(get_db),
    sync_service: SimplefinSyncService = Depends(get_sync_service),
):
    """Run one import for an item.

    A reauthentication request is not an error: the response is 200 with
    ``status`` set to ``requires_update``.

    Raises:
        HTTPException:
            - 404 Not Found: Unknown item
            - 409 Conflict: Sync is already in progress
            - 502 Bad Gateway: Provider error
    """
    item = get_or_404(db, SimplefinItem, item_id, detail="SimpleFIN item not found")

    if sync_service.is_sync_in_progress():
        raise HTTPException(
            status_code=409,
            detail="Sync already in progress. Please wait for the current sync to complete.",
        )

    try:
        item = sync_service.sync_item(db, item)
    except ValueError as e:
        if "already in progress" in str(e).lower():
            raise HTTPException(
                status_code=409,
                detail="Sync already in progress. Please wait for the current sync to complete.",
            )
        raise
    except SimplefinError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ProviderAuthError as e:
        raise HTTPException(
            status_code=502,
            detail=(
                f"Provider authentication failed for {e.provider_name}. "
                "Check the item's access URL and try again."
            ),
        )
    except ProviderError:
        raise HTTPException(
            status_code=502,
            detail="A provider error occurred during sync. Check the logs for details.",
        )

    return _item_response(item)


@router.delete("/items/{item_id}")
def remove_item(item_id: str, db: Session = Depends(get_db)):
    """Remove an item and its accounts."""
    item = get_or_404(db, SimplefinItem, item_id, detail="SimpleFIN item not found")
    db.delete(item)
    db.commit()
    logger.info("Deleted SimpleFIN item %s", item_id)
    return {"status": "ok", "item_id": item_id}
