"""External API integrations.

This package contains:
- Provider protocol: the interface the importer consumes
- SimpleFIN client: HTTP integration with the SimpleFIN bridge
- SimpleFIN schemas: validated ``/accounts`` payload types
"""

from integrations.provider_protocol import SimplefinProvider
from integrations.simplefin_client import SimpleFINClient
from integrations.simplefin_schemas import (
    SimplefinAccountData,
    SimplefinAccountsResponse,
    SimplefinOrganizationData,
)

__all__ = [
    "SimpleFINClient",
    "SimplefinAccountData",
    "SimplefinAccountsResponse",
    "SimplefinOrganizationData",
    "SimplefinProvider",
]
