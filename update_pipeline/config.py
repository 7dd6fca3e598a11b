"""Pipeline settings supplied by the operator for one chain."""

from decimal import Decimal
from typing import Any, Mapping, Optional

import pydantic
from pydantic import BaseModel, field_validator, model_validator

from chain_client.rest import BROADCAST_MODE_SYNC
from param_policy.builder import DEFAULT_ADDRESS_PREFIX
from param_policy.policy import ValidationError, validate_account_address
from wallet_core.models import INITIA_COIN_TYPE, DerivationPath, FeeConfig

_BROADCAST_MODES = ("BROADCAST_MODE_SYNC", "BROADCAST_MODE_ASYNC")


class PipelineSettings(BaseModel):
    rest_url: str
    authority_address: str
    address_prefix: str = DEFAULT_ADDRESS_PREFIX
    chain_id: Optional[str] = None
    gas_prices: str = "0GAS"
    gas_limit: Optional[int] = None
    gas_adjustment: Decimal = Decimal("1.75")
    memo: str = ""
    coin_type: int = INITIA_COIN_TYPE
    account_index: int = 0
    address_index: int = 0
    request_timeout: float = 30.0
    broadcast_mode: str = BROADCAST_MODE_SYNC

    @field_validator("rest_url")
    @classmethod
    def _check_rest_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("rest_url must be an http(s) URL.")
        return value.rstrip("/")

    @field_validator("gas_adjustment")
    @classmethod
    def _check_gas_adjustment(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("gas_adjustment must be positive.")
        return value

    @field_validator("broadcast_mode")
    @classmethod
    def _check_broadcast_mode(cls, value: str) -> str:
        if value not in _BROADCAST_MODES:
            raise ValueError(f"broadcast_mode must be one of {', '.join(_BROADCAST_MODES)}.")
        return value

    @model_validator(mode="after")
    def _check_authority(self) -> "PipelineSettings":
        validate_account_address(self.authority_address, self.address_prefix)
        return self

    def fee_config(self) -> FeeConfig:
        return FeeConfig(
            gas_prices=self.gas_prices,
            gas_limit=self.gas_limit,
            gas_adjustment=self.gas_adjustment,
        )

    def derivation_path(self) -> DerivationPath:
        return DerivationPath(
            coin_type=self.coin_type,
            account=self.account_index,
            address_index=self.address_index,
        )


def load_settings(data: Mapping[str, Any]) -> PipelineSettings:
    try:
        return PipelineSettings.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid pipeline settings: {exc}") from exc
