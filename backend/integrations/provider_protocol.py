"""Provider protocol for the SimpleFIN importer.

The importer only depends on this interface, so tests and scripts can
substitute any object with a matching ``get_accounts``.
"""

from datetime import datetime
from typing import Protocol

from integrations.simplefin_schemas import SimplefinAccountsResponse


class SimplefinProvider(Protocol):
    """Source of SimpleFIN ``/accounts`` payloads."""

    @property
    def provider_name(self) -> str:
        """Return the provider name used in errors and logs."""
        ...

    def get_accounts(
        self, access_url: str, start_date: datetime
    ) -> SimplefinAccountsResponse:
        """Fetch accounts (with transactions since ``start_date``) for one item.

        Provider-reported problems come back in ``errors``; transport
        failures raise a :class:`~integrations.exceptions.ProviderError`.
        """
        ...
