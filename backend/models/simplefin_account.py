"""SimplefinAccount model - one account under a SimpleFIN item."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class SimplefinAccount(Base):
    """A financial account reported by SimpleFIN.

    ``account_id`` is the provider's identifier and is unique within an item.
    The account snapshot (``raw_payload``) never contains transactions; those
    live in ``raw_transactions_payload`` and are only written when the
    provider returns a non-empty collection.
    """

    __tablename__ = "simplefin_accounts"
    __table_args__ = (
        UniqueConstraint(
            "simplefin_item_id", "account_id", name="uix_simplefin_item_account"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    simplefin_item_id = Column(
        String(36),
        ForeignKey("simplefin_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id = Column(String, nullable=False)  # SimpleFIN's account ID
    name = Column(String, nullable=True)
    currency = Column(String, nullable=True)
    balance = Column(Numeric(18, 4), nullable=True)
    available_balance = Column(Numeric(18, 4), nullable=True)
    balance_date = Column(DateTime, nullable=True)  # Provider-reported balance date
    raw_payload = Column(JSON, nullable=True)
    raw_transactions_payload = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    simplefin_item = relationship("SimplefinItem", back_populates="accounts")
