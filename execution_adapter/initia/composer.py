"""Wrap parameter payloads in the opchild authority execution envelope."""

from param_policy.builder import DEFAULT_ADDRESS_PREFIX
from param_policy.models import ParameterSet
from param_policy.policy import ValidationError, validate_account_address

from .models import AuthorityEnvelope, PrivilegedCommand


class MessageComposer:
    """Builds envelopes whose acting account is the signer's own address."""

    def __init__(self, signer_address: str, address_prefix: str = DEFAULT_ADDRESS_PREFIX) -> None:
        self._signer_address = signer_address
        self._address_prefix = address_prefix

    def compose(
        self,
        authority_address: str,
        parameters: ParameterSet,
        acting_account: str,
    ) -> AuthorityEnvelope:
        validate_account_address(authority_address, self._address_prefix)
        ensure_acting_account(acting_account, self._signer_address)

        command = PrivilegedCommand(
            authority_address=authority_address,
            parameters=parameters,
        )
        return AuthorityEnvelope(acting_account=acting_account, inner_commands=(command,))


def ensure_acting_account(acting_account: str, signer_address: str) -> None:
    if acting_account != signer_address:
        raise ValidationError(
            f"Acting account {acting_account} does not match signer {signer_address}."
        )
