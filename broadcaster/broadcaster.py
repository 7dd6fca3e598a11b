"""Submit signed transactions and classify the node's answer."""

import logging
from typing import Any, Dict

from chain_client.rest import BROADCAST_MODE_SYNC, ChainRestClient
from wallet_core.models import SignedTransaction

from .models import BroadcastResult

logger = logging.getLogger(__name__)


class Broadcaster:
    """Performs exactly one broadcast call per submit; never retries."""

    def __init__(self, client: ChainRestClient, mode: str = BROADCAST_MODE_SYNC) -> None:
        self._client = client
        self._mode = mode

    async def submit(self, tx: SignedTransaction) -> BroadcastResult:
        logger.info("Sending transaction: %s", tx.to_hex())
        response = await self._client.broadcast(tx.tx_bytes, self._mode)
        result = interpret_response(response, fallback_hash=tx.tx_hash)
        if result.accepted:
            logger.info("Transaction %s accepted into the mempool.", result.transaction_hash)
        else:
            logger.warning(
                "Node rejected transaction %s: code=%s codespace=%s %s",
                tx.tx_hash,
                result.node_error_code,
                result.codespace,
                result.node_error_message,
            )
        return result


def interpret_response(response: Dict[str, Any], fallback_hash: str = "") -> BroadcastResult:
    code = int(response.get("code") or 0)
    tx_hash = response.get("txhash") or fallback_hash or None
    if code == 0:
        return BroadcastResult(accepted=True, transaction_hash=tx_hash)
    return BroadcastResult(
        accepted=False,
        transaction_hash=tx_hash,
        node_error_code=code,
        node_error_message=response.get("raw_log", ""),
        codespace=response.get("codespace") or None,
    )
