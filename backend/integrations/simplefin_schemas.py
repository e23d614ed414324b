"""Pydantic schemas for SimpleFIN ``/accounts`` responses.

Only the fields the importer reads are declared. Every model allows extra
fields so balances, holdings and anything else the bridge adds survive
into the stored snapshots unchanged.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from integrations.exceptions import ProviderDataError


class SimplefinOrganizationData(BaseModel):
    """The institution behind an account (SimpleFIN ``org`` object)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = None
    domain: str | None = None
    sfin_url: str | None = Field(default=None, alias="sfin-url")
    url: str | None = None
    id: str | None = None

    def raw(self) -> dict[str, Any]:
        """Return the organization exactly as the provider sent it."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class SimplefinAccountData(BaseModel):
    """A single account entry. Transactions are kept opaque."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    name: str | None = None
    org: SimplefinOrganizationData | None = None
    transactions: list[dict[str, Any]] | None = None

    def snapshot_payload(self) -> dict[str, Any]:
        """Return the account payload without its transactions."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_unset=True,
            exclude={"transactions"},
        )


class SimplefinAccountsResponse(BaseModel):
    """Top-level ``/accounts`` payload."""

    model_config = ConfigDict(extra="allow")

    # Kept unvalidated until errors have been checked
    accounts: list[Any] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @field_validator("accounts", mode="before")
    @classmethod
    def none_as_empty_accounts(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("errors", mode="before")
    @classmethod
    def coerce_errors(cls, v: Any) -> list[str]:
        """Accept a missing list and non-string entries as plain messages."""
        if v is None:
            return []
        if isinstance(v, (str, bytes)) or not isinstance(v, list):
            v = [v]
        return [str(e) for e in v]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def parse_accounts(self) -> list[SimplefinAccountData]:
        """Validate the account entries.

        Raises:
            ProviderDataError: An entry is not an account object with an id.
        """
        try:
            return [SimplefinAccountData.model_validate(a) for a in self.accounts]
        except ValidationError as exc:
            raise ProviderDataError(
                f"SimpleFIN account did not match the expected shape: {exc}",
                provider_name="SimpleFIN",
            ) from exc

    def raw_payload(self) -> dict[str, Any]:
        """Return the whole response in its wire form for the item snapshot."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
