"""SimpleFIN API client wrapper.

SimpleFIN is a protocol for sharing read-only financial data, and SimpleFIN Bridge
is a service that connects to banks and credit unions. Each linked item holds
an access URL with embedded credentials; ``GET {access_url}/accounts`` returns
every account with its balances, transactions and ``org`` block.
"""

import logging
from datetime import datetime

import httpx
import simplefin
from pydantic import ValidationError

from config import settings
from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
)
from integrations.simplefin_schemas import SimplefinAccountsResponse

logger = logging.getLogger(__name__)

PROVIDER_NAME = "SimpleFIN"


def _check_access_url(access_url: str | None) -> str:
    """Raise an error if the access URL is missing or is really a setup token."""
    if not access_url:
        raise ProviderAuthError(
            "SimpleFIN access URL not configured. "
            "Run 'python -m scripts.setup_simplefin' to link a SimpleFIN item.",
            provider_name=PROVIDER_NAME,
        )
    # Check if the caller accidentally passed the setup token instead of access URL
    if not access_url.startswith(("http://", "https://")):
        raise ProviderAuthError(
            "SimpleFIN access URL appears to be a setup token (base64), not an access URL. "
            "Claim it first with 'python -m scripts.setup_simplefin'.",
            provider_name=PROVIDER_NAME,
        )
    return access_url


class SimpleFINClient:
    """Wrapper around the SimpleFIN ``/accounts`` endpoint.

    Note: We make direct HTTP requests rather than using the simplefin library
    because the importer needs the complete raw response (including the
    ``errors`` list and ``org`` blocks), not the library's reduced view.
    The library is only used to claim setup tokens.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize the client.

        Args:
            timeout: HTTP timeout in seconds (defaults to settings)
        """
        self._timeout = timeout or settings.SIMPLEFIN_TIMEOUT_SECONDS

    @property
    def provider_name(self) -> str:
        """Return the provider name used in errors and logs."""
        return PROVIDER_NAME

    def get_accounts(
        self, access_url: str, start_date: datetime
    ) -> SimplefinAccountsResponse:
        """Fetch accounts and transactions posted on or after ``start_date``.

        Without start-date, SimpleFIN may omit the transactions array, so it
        is always sent.

        Args:
            access_url: The item's SimpleFIN access URL.
            start_date: Lower bound for transactions.

        Returns:
            The validated response, including any provider-reported errors.

        Raises:
            ProviderAuthError: Missing access URL or HTTP 401/403.
            ProviderAPIError: Any other HTTP error status.
            ProviderConnectionError: Connection failure or timeout.
            ProviderDataError: Body is not JSON or does not match the schema.
        """
        access_url = _check_access_url(access_url)
        params = {"start-date": str(int(start_date.timestamp()))}

        try:
            with httpx.Client(base_url=access_url, timeout=self._timeout) as client:
                response = client.get("/accounts", params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in (401, 403):
                raise ProviderAuthError(
                    f"SimpleFIN authentication failed (HTTP {status})",
                    provider_name=PROVIDER_NAME,
                ) from exc
            raise ProviderAPIError(
                f"SimpleFIN API error (HTTP {status})",
                provider_name=PROVIDER_NAME,
                status_code=status,
            ) from exc
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ProviderConnectionError(
                f"SimpleFIN connection failed: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc
        except ValueError as exc:
            raise ProviderDataError(
                f"SimpleFIN returned a non-JSON response: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc

        try:
            result = SimplefinAccountsResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderDataError(
                f"SimpleFIN response did not match the expected shape: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc

        logger.info(
            "SimpleFIN: data fetched (%d accounts, %d errors)",
            len(result.accounts), len(result.errors),
        )
        return result

    @staticmethod
    def claim_access_url(setup_token: str) -> str:
        """Exchange a one-time setup token for a permanent access URL.

        Raises:
            ProviderAuthError: The token is empty, already used or invalid.
        """
        setup_token = (setup_token or "").strip()
        if not setup_token:
            raise ProviderAuthError(
                "No SimpleFIN setup token provided", provider_name=PROVIDER_NAME
            )
        try:
            access_url = simplefin.SimpleFINClient.get_access_url(setup_token)
        except Exception as exc:
            raise ProviderAuthError(
                f"SimpleFIN setup token could not be claimed: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc
        logger.info("SimpleFIN: setup token claimed")
        return access_url
