"""Domain models for EVM module parameter payloads."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Tuple, Union

from pydantic import BaseModel, StrictBool

RATIO_SCALE = 10**18


class CustomTokenPolicyKind(Enum):
    DISABLED = "DISABLED"
    ALLOW_ALL = "ALLOW_ALL"
    ALLOW_LIST = "ALLOW_LIST"


@dataclass(frozen=True)
class CustomTokenPolicy:
    """Which custom ERC20 tokens the chain accepts.

    Only ALLOW_LIST carries addresses, and it always carries at least one.
    """

    kind: CustomTokenPolicyKind
    addresses: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind == CustomTokenPolicyKind.ALLOW_LIST:
            if not self.addresses:
                raise ValueError("ALLOW_LIST policy requires at least one address.")
        elif self.addresses:
            raise ValueError(f"{self.kind.value} policy must not carry addresses.")

    @property
    def allow_custom_erc20(self) -> bool:
        return self.kind != CustomTokenPolicyKind.DISABLED

    @property
    def allowed_custom_erc20s(self) -> Tuple[str, ...]:
        return self.addresses


@dataclass(frozen=True)
class ParameterSet:
    extra_eips: Tuple[int, ...]
    allowed_publishers: Tuple[str, ...]
    custom_token_policy: CustomTokenPolicy
    fee_denom: str
    # numerator over RATIO_SCALE
    gas_refund_ratio: int
    num_retain_block_hashes: int

    @property
    def gas_refund_ratio_decimal(self) -> Decimal:
        return Decimal(self.gas_refund_ratio) / Decimal(RATIO_SCALE)


class RawParameterFields(BaseModel):
    extra_eips: List[Union[int, str]] = []
    allowed_publishers: List[str] = []
    allow_custom_erc20: StrictBool
    allowed_custom_erc20s: List[str] = []
    fee_denom: str
    gas_refund_ratio: Union[int, str, Decimal]
    num_retain_block_hashes: int = 0
