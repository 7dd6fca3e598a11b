from .keys import KeyMaterialError, MnemonicSecret, SigningIdentity
from .models import (
    DerivationPath,
    FeeCoin,
    FeeConfig,
    SignedTransaction,
    UnsignedTransaction,
)
from .signer import SigningSession, compute_fee, parse_gas_price

__all__ = [
    "DerivationPath",
    "FeeCoin",
    "FeeConfig",
    "KeyMaterialError",
    "MnemonicSecret",
    "SignedTransaction",
    "SigningIdentity",
    "SigningSession",
    "UnsignedTransaction",
    "compute_fee",
    "parse_gas_price",
]
