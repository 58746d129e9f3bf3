# src/reiops/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Input defaults applied by the normalizer
    DEFAULT_PROVINCE: str = Field(default="ON")
    DEFAULT_INTEREST_RATE: float = Field(default=5.5)
    DEFAULT_AMORTIZATION_YEARS: int = Field(default=25)
    DEFAULT_PROPERTY_TYPE: str = Field(default="single_family")

    # Borrower qualification
    DEFAULT_HEATING_MONTHLY: float = Field(default=150.0)

    model_config = SettingsConfigDict(
        env_prefix="REIOPS_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("DEFAULT_INTEREST_RATE", "DEFAULT_HEATING_MONTHLY", mode="before")
    @classmethod
    def _to_non_negative(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "").replace("$", "").replace(",", "")
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("value must be numeric or percent-like") from err
        if f < 0:
            raise ValueError("value must be non-negative")
        return f

    @field_validator("DEFAULT_AMORTIZATION_YEARS", mode="before")
    @classmethod
    def _amortization_positive(cls, v: Any) -> Any:
        n = int(float(v))
        if n <= 0:
            raise ValueError("DEFAULT_AMORTIZATION_YEARS must be > 0")
        return n

    @field_validator("DEFAULT_PROVINCE", mode="before")
    @classmethod
    def _province_upper(cls, v: Any) -> Any:
        return str(v).strip().upper()


config = AppConfig()
