from .builder import DEFAULT_ADDRESS_PREFIX, build_parameter_set
from .models import (
    RATIO_SCALE,
    CustomTokenPolicy,
    CustomTokenPolicyKind,
    ParameterSet,
    RawParameterFields,
)
from .policy import (
    ValidationError,
    parse_gas_refund_ratio,
    resolve_custom_token_policy,
    validate_account_address,
    validate_address,
    validate_denom,
)

__all__ = [
    "CustomTokenPolicy",
    "CustomTokenPolicyKind",
    "DEFAULT_ADDRESS_PREFIX",
    "ParameterSet",
    "RATIO_SCALE",
    "RawParameterFields",
    "ValidationError",
    "build_parameter_set",
    "parse_gas_refund_ratio",
    "resolve_custom_token_policy",
    "validate_account_address",
    "validate_address",
    "validate_denom",
]
