"""Validate, compose, sign and broadcast one EVM params update."""

import logging
from typing import Any, Mapping, Optional, Union

from broadcaster.broadcaster import Broadcaster
from broadcaster.models import BroadcastResult
from chain_client.rest import ChainRestClient, NodeRejectedError
from execution_adapter.initia.composer import MessageComposer
from param_policy.builder import build_parameter_set
from param_policy.models import RawParameterFields
from wallet_core.keys import MnemonicSecret, SigningIdentity
from wallet_core.models import SignedTransaction
from wallet_core.signer import SigningSession

from .config import PipelineSettings

logger = logging.getLogger(__name__)

OPCHILD_MODULE = "opchild"

RawFields = Union[RawParameterFields, Mapping[str, Any]]


class ParameterUpdatePipeline:
    """Single-shot update pipeline; each call derives and disposes its own key."""

    def __init__(self, settings: PipelineSettings, client: ChainRestClient) -> None:
        self._settings = settings
        self._client = client

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    async def sign(
        self,
        raw: RawFields,
        secret: MnemonicSecret,
        acting_account: Optional[str] = None,
    ) -> SignedTransaction:
        settings = self._settings
        parameters = build_parameter_set(raw, settings.address_prefix)

        with SigningIdentity.from_mnemonic(
            secret, settings.derivation_path(), settings.address_prefix
        ) as identity:
            composer = MessageComposer(identity.address, settings.address_prefix)
            envelope = composer.compose(
                settings.authority_address,
                parameters,
                acting_account or identity.address,
            )
            logger.info(
                "Composed EVM params update for %s (fee_denom=%s, custom ERC20 policy=%s).",
                settings.authority_address,
                parameters.fee_denom,
                parameters.custom_token_policy.kind.value,
            )
            session = SigningSession(identity, self._client, chain_id=settings.chain_id)
            return await session.create_and_sign(
                [envelope], settings.fee_config(), memo=settings.memo
            )

    async def run(
        self,
        raw: RawFields,
        secret: MnemonicSecret,
        acting_account: Optional[str] = None,
    ) -> BroadcastResult:
        try:
            tx = await self.sign(raw, secret, acting_account=acting_account)
        except NodeRejectedError as exc:
            logger.warning(
                "Node rejected simulation: code=%s codespace=%s %s",
                exc.code,
                exc.codespace,
                exc.message,
            )
            return BroadcastResult(
                accepted=False,
                node_error_code=exc.code,
                node_error_message=exc.message,
                codespace=exc.codespace or None,
            )
        broadcaster = Broadcaster(self._client, self._settings.broadcast_mode)
        return await broadcaster.submit(tx)


async def resolve_authority_address(
    client: ChainRestClient, module_name: str = OPCHILD_MODULE
) -> str:
    """Look up the module account that must receive privileged commands."""
    address = await client.fetch_module_account_address(module_name)
    logger.info("Resolved %s module authority %s.", module_name, address)
    return address
