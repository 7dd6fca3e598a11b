"""Custom-token policy resolution and field-level validation rules."""

import logging
import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Iterable, Tuple, Union

from bip_utils import Bech32ChecksumError, Bech32Decoder, EthAddrDecoder

from .models import RATIO_SCALE, CustomTokenPolicy, CustomTokenPolicyKind

logger = logging.getLogger(__name__)

_DENOM_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9/:._-]{2,127}$")
_EIP_PATTERN = re.compile(r"^(?:EIP-?)?(\d{1,19})$", re.IGNORECASE)
_RATIO_DECIMALS = 18
_RATIO_MAX_DIGITS = len(str(RATIO_SCALE))
_MAX_INT64 = 2**63 - 1
_MAX_UINT64 = 2**64 - 1
_ACCOUNT_ADDRESS_LENGTHS = (20, 32)


class ValidationError(ValueError):
    """Raised when an update request is rejected before any network call."""


def resolve_custom_token_policy(allow: bool, addresses: Iterable[str]) -> CustomTokenPolicy:
    listed = _ordered_unique(addresses)
    if not allow:
        if listed:
            logger.debug(
                "Custom ERC20s disabled; ignoring %d listed address(es).", len(listed)
            )
        return CustomTokenPolicy(kind=CustomTokenPolicyKind.DISABLED)
    if not listed:
        return CustomTokenPolicy(kind=CustomTokenPolicyKind.ALLOW_ALL)
    return CustomTokenPolicy(kind=CustomTokenPolicyKind.ALLOW_LIST, addresses=listed)


def validate_denom(denom: str) -> str:
    if not denom:
        raise ValidationError("fee_denom must be non-empty.")
    if not _DENOM_PATTERN.match(denom):
        raise ValidationError(f"fee_denom {denom!r} is not a valid denomination.")
    return denom


def parse_gas_refund_ratio(value: Union[int, str, Decimal]) -> int:
    """Return the ratio as a numerator over 10**18.

    Integers and digit strings are taken as the numerator itself
    ("500000000000000000" is 0.5). Decimals and strings containing a
    decimal point are taken as the fraction ("0.5").
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError("gas_refund_ratio must be an integer, string or Decimal.")

    if isinstance(value, int):
        numerator = value
    elif isinstance(value, Decimal):
        numerator = _fraction_to_numerator(value)
    elif isinstance(value, str):
        text = value.strip()
        if "." in text:
            try:
                numerator = _fraction_to_numerator(Decimal(text))
            except InvalidOperation as exc:
                raise ValidationError(f"gas_refund_ratio {value!r} is not a number.") from exc
        elif re.fullmatch(r"-?\d+", text):
            if len(text.lstrip("-").lstrip("0")) > _RATIO_MAX_DIGITS:
                raise ValidationError("gas_refund_ratio is out of range.")
            numerator = int(text)
        else:
            raise ValidationError(f"gas_refund_ratio {value!r} is not a number.")
    else:
        raise ValidationError("gas_refund_ratio must be an integer, string or Decimal.")

    if numerator < 0:
        raise ValidationError("gas_refund_ratio must not be negative.")
    if numerator > RATIO_SCALE:
        raise ValidationError("gas_refund_ratio must not exceed 1.0.")
    return numerator


def validate_retain_count(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("num_retain_block_hashes must be an integer.")
    if value < 0:
        raise ValidationError("num_retain_block_hashes must not be negative.")
    if value > _MAX_UINT64:
        raise ValidationError("num_retain_block_hashes does not fit in uint64.")
    return value


def parse_eip(value: Union[int, str]) -> int:
    if isinstance(value, bool):
        raise ValidationError("EIP identifiers must be numbers or EIP names.")
    if isinstance(value, int):
        number = value
    else:
        match = _EIP_PATTERN.match(value.strip())
        if match is None:
            raise ValidationError(f"{value!r} is not an EIP identifier.")
        number = int(match.group(1))
    if number <= 0:
        raise ValidationError(f"EIP number must be positive, got {number}.")
    if number > _MAX_INT64:
        raise ValidationError(f"EIP number {number} does not fit in int64.")
    return number


def validate_address(address: str, prefix: str) -> str:
    """Accept a bech32 account address with the chain prefix or a 0x address."""
    if not address:
        raise ValidationError("Address must be non-empty.")
    if address.lower().startswith("0x"):
        try:
            EthAddrDecoder.DecodeAddr(address, skip_chksum_enc=True)
        except ValueError as exc:
            raise ValidationError(f"{address!r} is not a valid hex address.") from exc
        return address
    return validate_account_address(address, prefix)


def validate_account_address(address: str, prefix: str) -> str:
    try:
        decoded = Bech32Decoder.Decode(prefix, address)
    except (Bech32ChecksumError, ValueError) as exc:
        raise ValidationError(
            f"{address!r} is not a valid {prefix} account address."
        ) from exc
    if len(decoded) not in _ACCOUNT_ADDRESS_LENGTHS:
        raise ValidationError(f"{address!r} has an unexpected address length.")
    return address


def _fraction_to_numerator(value: Decimal) -> int:
    if not value.is_finite():
        raise ValidationError("gas_refund_ratio must be finite.")
    if value < 0:
        raise ValidationError("gas_refund_ratio must not be negative.")
    if value > 1:
        raise ValidationError("gas_refund_ratio must not exceed 1.0.")
    # Enough precision that scaling never rounds.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + _RATIO_DECIMALS)
        scaled = value.scaleb(_RATIO_DECIMALS)
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"gas_refund_ratio has more than {_RATIO_DECIMALS} decimal places."
        )
    return int(scaled)


def _ordered_unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(values)))
