"""Build validated EVM parameter payloads from raw request fields."""

from typing import Any, Mapping, Union

import pydantic

from .models import ParameterSet, RawParameterFields
from .policy import (
    ValidationError,
    parse_eip,
    parse_gas_refund_ratio,
    resolve_custom_token_policy,
    validate_address,
    validate_denom,
    validate_retain_count,
)

DEFAULT_ADDRESS_PREFIX = "init"


def build_parameter_set(
    raw: Union[RawParameterFields, Mapping[str, Any]],
    address_prefix: str = DEFAULT_ADDRESS_PREFIX,
) -> ParameterSet:
    fields = _coerce_raw(raw)

    fee_denom = validate_denom(fields.fee_denom)
    gas_refund_ratio = parse_gas_refund_ratio(fields.gas_refund_ratio)
    retain_count = validate_retain_count(fields.num_retain_block_hashes)
    extra_eips = tuple(sorted({parse_eip(item) for item in fields.extra_eips}))
    publishers = tuple(
        sorted({validate_address(item, address_prefix) for item in fields.allowed_publishers})
    )

    # Listed tokens are only checked when they take effect.
    listed = fields.allowed_custom_erc20s
    if fields.allow_custom_erc20:
        listed = [validate_address(item, address_prefix) for item in listed]
    policy = resolve_custom_token_policy(fields.allow_custom_erc20, listed)

    return ParameterSet(
        extra_eips=extra_eips,
        allowed_publishers=publishers,
        custom_token_policy=policy,
        fee_denom=fee_denom,
        gas_refund_ratio=gas_refund_ratio,
        num_retain_block_hashes=retain_count,
    )


def _coerce_raw(raw: Union[RawParameterFields, Mapping[str, Any]]) -> RawParameterFields:
    if isinstance(raw, RawParameterFields):
        return raw
    try:
        return RawParameterFields.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid parameter fields: {exc}") from exc
