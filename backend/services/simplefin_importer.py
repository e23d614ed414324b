"""SimpleFIN importer - one synchronization pass for a single item.

Fetches ``/accounts`` for the item's fetch window, then stores the raw
response on the item, one snapshot per account, the account transactions
and (once per item) the institution metadata. Provider-reported errors either
flag the item for reauthentication or raise :class:`SimplefinError`.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from config import settings
from integrations.exceptions import SimplefinError
from integrations.parsing_utils import ensure_utc
from integrations.provider_protocol import SimplefinProvider
from integrations.simplefin_schemas import SimplefinAccountData, SimplefinOrganizationData
from models import SimplefinAccount, SimplefinItem
from services.simplefin_store import NormalizedInstitution, SimplefinStore

logger = logging.getLogger(__name__)

# SimpleFIN has no structured error codes; reauthentication requests are
# recognised by this word in the error text.
REAUTHENTICATE_KEYWORD = "reauthenticate"

UNKNOWN_INSTITUTION_NAME = "Unknown Institution"


def determine_sync_start_date(
    last_synced_at: datetime | None,
    now: datetime,
    initial_lookback_days: int | None = None,
    buffer_days: int | None = None,
) -> datetime:
    """Return the start-date bound for the next ``/accounts`` request.

    A first sync looks back ``initial_lookback_days`` (364 by default; the
    bridge caps history at 365 days). Later syncs start ``buffer_days``
    (7 by default) before the last sync so late-posting transactions are
    picked up again.

    Args:
        last_synced_at: When the item last synced successfully, or None.
        now: The current time.
        initial_lookback_days: Override for SIMPLEFIN_INITIAL_LOOKBACK_DAYS.
        buffer_days: Override for SIMPLEFIN_SYNC_BUFFER_DAYS.
    """
    if last_synced_at is None:
        if initial_lookback_days is None:
            initial_lookback_days = settings.SIMPLEFIN_INITIAL_LOOKBACK_DAYS
        return ensure_utc(now) - timedelta(days=initial_lookback_days)

    if buffer_days is None:
        buffer_days = settings.SIMPLEFIN_SYNC_BUFFER_DAYS
    return ensure_utc(last_synced_at) - timedelta(days=buffer_days)


def is_reauthentication_error(message: str) -> bool:
    """Classify provider error text as a reauthentication request.

    Case-sensitive substring match on :data:`REAUTHENTICATE_KEYWORD`.
    This couples us to SimpleFIN's wording and is the one place to change
    if the bridge ever exposes structured error codes.
    """
    return REAUTHENTICATE_KEYWORD in message


def extract_domain_name(domain: str | None) -> str:
    """Derive a display name from a domain, e.g. ``mybank.com`` -> ``Mybank``."""
    if not domain or not domain.strip():
        return UNKNOWN_INSTITUTION_NAME
    return domain.strip().split(".")[0].capitalize()


def normalize_organization(org: SimplefinOrganizationData) -> NormalizedInstitution:
    """Build institution fields from an ``org`` object.

    The identifier and URL prefer ``domain`` and fall back to ``sfin-url``;
    the name prefers ``name`` and falls back to one derived from the domain.
    """
    # An empty string counts as present; only absent fields fall back
    identifier = org.domain if org.domain is not None else org.sfin_url
    return NormalizedInstitution(
        id=identifier,
        name=org.name if org.name is not None else extract_domain_name(org.domain),
        url=identifier,
        raw_org_data=org.raw(),
    )


class SimplefinImporter:
    """Imports one SimpleFIN item per call.

    The importer flushes but never commits. Writes are not rolled back if a
    later account fails; re-running the import converges to the same state.
    Concurrent imports of the same item must be serialized by the caller.
    """

    def __init__(self, provider: SimplefinProvider):
        """Initialize with the provider used to fetch ``/accounts``.

        Args:
            provider: Any object implementing :class:`SimplefinProvider`.
        """
        self.provider = provider

    def import_item(
        self, db: Session, item: SimplefinItem, now: datetime | None = None
    ) -> None:
        """Run one synchronization pass for ``item``.

        Args:
            db: Database session
            item: The item to import
            now: Current time (defaults to UTC now)

        Raises:
            ProviderError: The provider call failed (propagated unchanged).
            SimplefinError: The provider reported a non-reauthentication error.
            ProviderDataError: An account entry has no usable id.
        """
        now = now or datetime.now(timezone.utc)
        store = SimplefinStore(db)

        start_date = determine_sync_start_date(item.last_synced_at, now)
        logger.info(
            "SimpleFIN item %s: fetching accounts since %s",
            item.id, start_date.date().isoformat(),
        )

        accounts_data = self.provider.get_accounts(item.access_url, start_date=start_date)

        if accounts_data.has_errors:
            self.handle_errors(db, item, accounts_data.errors)
            return

        accounts = accounts_data.parse_accounts()
        store.upsert_item_snapshot(item, accounts_data.raw_payload())

        for account_data in accounts:
            self.import_account(db, item, account_data)

        store.mark_synced(item, now)
        logger.info(
            "SimpleFIN item %s: imported %d accounts",
            item.id, len(accounts),
        )

    def import_account(
        self, db: Session, item: SimplefinItem, account_data: SimplefinAccountData
    ) -> SimplefinAccount:
        """Import a single account entry.

        The account snapshot is written first without transactions; a
        non-empty transactions list is then stored separately so that a
        later payload omitting transactions never erases earlier ones.

        Returns:
            The created or updated SimplefinAccount.
        """
        logger.debug("SimpleFIN account_data: %r", account_data)
        store = SimplefinStore(db)

        if account_data.org is not None and not item.has_institution:
            self.import_organization(db, item, account_data.org)

        account, created = store.find_or_create_account(item, account_data.id)

        transactions = account_data.transactions

        store.upsert_account_snapshot(account, account_data.snapshot_payload())

        if transactions:
            store.update_account_transactions(account, transactions)

        logger.debug(
            "SimpleFIN account %s %s (%d transactions)",
            account_data.id,
            "created" if created else "updated",
            len(transactions or []),
        )
        return account

    def import_organization(
        self, db: Session, item: SimplefinItem, org_data: SimplefinOrganizationData
    ) -> None:
        institution = normalize_organization(org_data)
        SimplefinStore(db).upsert_institution_snapshot(item, institution)
        logger.info(
            "SimpleFIN item %s: linked institution %s (%s)",
            item.id, institution.name, institution.id,
        )

    def handle_errors(self, db: Session, item: SimplefinItem, errors: list[str]) -> None:
        """Route provider-reported errors.

        Reauthentication requests flag the item ``requires_update`` and
        return normally; anything else raises.

        Raises:
            SimplefinError: With ``error_type="api_error"``.
        """
        error_messages = ", ".join(errors)

        if is_reauthentication_error(error_messages):
            logger.warning(
                "SimpleFIN item %s requires reauthentication: %s",
                item.id, error_messages,
            )
            SimplefinStore(db).mark_requires_update(item, error_messages)
            return

        raise SimplefinError(
            f"SimpleFin API errors: {error_messages}",
            error_type="api_error",
        )
