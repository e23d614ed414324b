"""SQLAlchemy ORM models."""

from .simplefin_account import SimplefinAccount
from .simplefin_item import SimplefinItem, SimplefinItemStatus
from .utils import generate_uuid

__all__ = ["SimplefinAccount", "SimplefinItem", "SimplefinItemStatus", "generate_uuid"]
