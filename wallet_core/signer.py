"""Assemble and sign SIGN_MODE_DIRECT transactions for authority envelopes."""

import logging
import re
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Optional, Sequence, Tuple

from chain_client.rest import ChainRestClient
from execution_adapter.initia import wire
from execution_adapter.initia.composer import ensure_acting_account
from execution_adapter.initia.models import AuthorityEnvelope
from param_policy.policy import ValidationError

from .keys import KeyMaterialError, SigningIdentity
from .models import FeeCoin, FeeConfig, SignedTransaction, UnsignedTransaction

logger = logging.getLogger(__name__)

_GAS_PRICE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


class SigningSession:
    """Signs transactions for one identity against one chain."""

    def __init__(
        self,
        identity: SigningIdentity,
        client: ChainRestClient,
        chain_id: Optional[str] = None,
    ) -> None:
        self._identity = identity
        self._client = client
        self._chain_id = chain_id

    async def create_and_sign(
        self,
        envelopes: Sequence[AuthorityEnvelope],
        fee_config: FeeConfig,
        memo: str = "",
    ) -> SignedTransaction:
        unsigned = self.prepare(envelopes, fee_config, memo)

        account = await self._client.fetch_account(self._identity.address)
        chain_id = self._chain_id or await self._client.fetch_chain_id()
        gas_limit = fee_config.gas_limit
        if gas_limit is None:
            gas_limit = await self._estimate_gas(unsigned, account.sequence)

        return self.sign(
            unsigned,
            chain_id=chain_id,
            account_number=account.account_number,
            sequence=account.sequence,
            gas_limit=gas_limit,
        )

    def prepare(
        self,
        envelopes: Sequence[AuthorityEnvelope],
        fee_config: FeeConfig,
        memo: str = "",
    ) -> UnsignedTransaction:
        if not envelopes:
            raise ValidationError("A transaction needs at least one envelope.")
        for envelope in envelopes:
            ensure_acting_account(envelope.acting_account, self._identity.address)
        if self._identity.disposed:
            raise KeyMaterialError("Signing identity has been disposed.")
        parse_gas_price(fee_config.gas_prices)
        if fee_config.gas_limit is not None and fee_config.gas_limit <= 0:
            raise ValidationError("gas_limit must be positive.")
        return UnsignedTransaction(messages=tuple(envelopes), fee_config=fee_config, memo=memo)

    def sign(
        self,
        unsigned: UnsignedTransaction,
        chain_id: str,
        account_number: int,
        sequence: int,
        gas_limit: int,
    ) -> SignedTransaction:
        """Sign with explicit chain state; equal inputs give identical bytes."""
        fee = compute_fee(unsigned.fee_config.gas_prices, gas_limit)
        body_bytes = self._body_bytes(unsigned)
        auth_info_bytes = self._auth_info_bytes(sequence, gas_limit, fee)
        sign_doc = wire.SignDoc(
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            chain_id=chain_id,
            account_number=account_number,
        )
        signature = self._identity.sign(wire.serialize(sign_doc))
        tx_raw = wire.TxRaw(
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            signatures=[signature],
        )
        logger.info(
            "Signed transaction for %s on %s (sequence %d, gas %d).",
            self._identity.address,
            chain_id,
            sequence,
            gas_limit,
        )
        return SignedTransaction(
            unsigned=unsigned,
            chain_id=chain_id,
            account_number=account_number,
            sequence=sequence,
            gas_limit=gas_limit,
            fee=fee,
            signature=signature,
            tx_bytes=wire.serialize(tx_raw),
        )

    async def _estimate_gas(self, unsigned: UnsignedTransaction, sequence: int) -> int:
        tx_raw = wire.TxRaw(
            body_bytes=self._body_bytes(unsigned),
            auth_info_bytes=self._auth_info_bytes(sequence, 0, ()),
            signatures=[b""],
        )
        gas_used = await self._client.simulate(wire.serialize(tx_raw))
        adjusted = Decimal(gas_used) * unsigned.fee_config.gas_adjustment
        gas_limit = int(adjusted.to_integral_value(rounding=ROUND_CEILING))
        logger.info("Estimated gas %d (simulated %d).", gas_limit, gas_used)
        return gas_limit

    def _body_bytes(self, unsigned: UnsignedTransaction) -> bytes:
        body = wire.TxBody(
            messages=[wire.envelope_to_any(envelope) for envelope in unsigned.messages],
            memo=unsigned.memo,
        )
        return wire.serialize(body)

    def _auth_info_bytes(
        self, sequence: int, gas_limit: int, fee: Tuple[FeeCoin, ...]
    ) -> bytes:
        signer_info = wire.SignerInfo(
            public_key=wire.public_key_to_any(self._identity.public_key),
            sequence=sequence,
        )
        signer_info.mode_info.single.mode = wire.SIGN_MODE_DIRECT
        auth_info = wire.AuthInfo(
            signer_infos=[signer_info],
            fee=wire.Fee(
                amount=[wire.Coin(denom=coin.denom, amount=str(coin.amount)) for coin in fee],
                gas_limit=gas_limit,
            ),
        )
        return wire.serialize(auth_info)


def parse_gas_price(gas_prices: str) -> Tuple[Decimal, str]:
    match = _GAS_PRICE_PATTERN.match(gas_prices.strip())
    if match is None:
        raise ValidationError(f"Gas price {gas_prices!r} must look like '0.15uinit'.")
    try:
        return Decimal(match.group(1)), match.group(2)
    except InvalidOperation as exc:
        raise ValidationError(f"Gas price {gas_prices!r} is not a number.") from exc


def compute_fee(gas_prices: str, gas_limit: int) -> Tuple[FeeCoin, ...]:
    """Fee for gas_limit at the given price; zero fees produce no coins."""
    price, denom = parse_gas_price(gas_prices)
    amount = int((price * gas_limit).to_integral_value(rounding=ROUND_CEILING))
    if amount == 0:
        return ()
    return (FeeCoin(denom=denom, amount=amount),)
