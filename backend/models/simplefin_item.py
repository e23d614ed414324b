"""SimplefinItem model - one linked SimpleFIN connection (access URL)."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class SimplefinItemStatus(str, Enum):
    """Connection state of a SimpleFIN item."""

    ACTIVE = "active"
    REQUIRES_UPDATE = "requires_update"


class SimplefinItem(Base):
    """A SimpleFIN connection covering one or more accounts.

    The access URL embeds the credentials issued by the SimpleFIN bridge.
    Institution fields stay empty until the first account carrying
    organization data is imported.
    """

    __tablename__ = "simplefin_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=True)
    access_url = Column(String, nullable=False)
    status = Column(String, nullable=False, default=SimplefinItemStatus.ACTIVE.value)
    last_synced_at = Column(DateTime, nullable=True)
    last_sync_error = Column(Text, nullable=True)
    raw_payload = Column(JSON, nullable=True)  # Full /accounts response

    # Institution snapshot (from the first account's "org" object)
    institution_id = Column(String, nullable=True)
    institution_name = Column(String, nullable=True)
    institution_url = Column(String, nullable=True)
    raw_institution_payload = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    accounts = relationship(
        "SimplefinAccount",
        back_populates="simplefin_item",
        cascade="all, delete-orphan",
        order_by="SimplefinAccount.created_at",
    )

    @property
    def has_institution(self) -> bool:
        """True once an institution has been linked to this item."""
        return bool(self.institution_id and self.institution_id.strip())

    @property
    def requires_update(self) -> bool:
        return self.status == SimplefinItemStatus.REQUIRES_UPDATE.value
