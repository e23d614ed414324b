"""Application configuration using pydantic-settings."""

from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Load credential fields from the system keychain via ``keyring``.

    Only fields whose uppercase name appears in
    :data:`~services.credential_manager.CREDENTIAL_KEYS` are looked up.
    All other fields return ``None`` so the next source in the chain
    handles them.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        env_name = field_name.upper()
        if env_name not in CREDENTIAL_KEYS:
            return None, field_name, False
        value = get_credential(env_name)
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, is_complex = self.get_field_value(field_info, field_name)
            if value is not None:
                d[key] = value
        return d


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Database
    DATABASE_URL: str = "sqlite:///./simplefin.db"

    # Default SimpleFIN access URL, used when an item is created without one
    SIMPLEFIN_ACCESS_URL: str = ""
    SIMPLEFIN_TIMEOUT_SECONDS: float = 30.0

    # Fetch window. The SimpleFIN bridge rejects requests for more than
    # 365 days of history.
    SIMPLEFIN_INITIAL_LOOKBACK_DAYS: int = 364
    SIMPLEFIN_SYNC_BUFFER_DAYS: int = 7

    @field_validator("SIMPLEFIN_INITIAL_LOOKBACK_DAYS")
    @classmethod
    def validate_lookback(cls, v: int) -> int:
        """Keep the first-sync lookback inside the provider's 365-day cap."""
        if not 0 < v < 365:
            raise ValueError(
                f"SIMPLEFIN_INITIAL_LOOKBACK_DAYS must be between 1 and 364, got {v}"
            )
        return v

    @field_validator("SIMPLEFIN_SYNC_BUFFER_DAYS")
    @classmethod
    def validate_buffer(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"SIMPLEFIN_SYNC_BUFFER_DAYS must be >= 0, got {v}")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
