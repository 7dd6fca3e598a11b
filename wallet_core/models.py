"""Domain models for the wallet core."""

import hashlib
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from execution_adapter.initia.models import AuthorityEnvelope

INITIA_COIN_TYPE = 60


@dataclass(frozen=True)
class DerivationPath:
    """BIP44-style derivation path components."""

    purpose: int = 44
    coin_type: int = INITIA_COIN_TYPE
    account: int = 0
    change: int = 0
    address_index: int = 0

    def to_string(self) -> str:
        return (
            f"m/{self.purpose}'/{self.coin_type}'/"
            f"{self.account}'/{self.change}/{self.address_index}"
        )


@dataclass(frozen=True)
class FeeConfig:
    """Fee inputs; gas is estimated by simulation when gas_limit is unset."""

    gas_prices: str = "0GAS"
    gas_limit: Optional[int] = None
    gas_adjustment: Decimal = Decimal("1.75")


@dataclass(frozen=True)
class FeeCoin:
    denom: str
    amount: int


@dataclass(frozen=True)
class UnsignedTransaction:
    messages: Tuple[AuthorityEnvelope, ...]
    fee_config: FeeConfig
    memo: str = ""


@dataclass(frozen=True)
class SignedTransaction:
    unsigned: UnsignedTransaction
    chain_id: str
    account_number: int
    sequence: int
    gas_limit: int
    fee: Tuple[FeeCoin, ...]
    signature: bytes
    tx_bytes: bytes

    @property
    def tx_hash(self) -> str:
        return hashlib.sha256(self.tx_bytes).hexdigest().upper()

    def to_hex(self) -> str:
        return self.tx_bytes.hex()
