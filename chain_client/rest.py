"""Async REST client for the chain node's LCD endpoints."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from .models import AccountInfo

logger = logging.getLogger(__name__)

BROADCAST_MODE_SYNC = "BROADCAST_MODE_SYNC"


class ChainQueryError(RuntimeError):
    """Raised when account or chain data cannot be fetched from the node."""


class TransportError(RuntimeError):
    """Raised when a broadcast request never reaches a processing node."""


class NodeRejectedError(ChainQueryError):
    """Raised when a simulation is refused with a node error code."""

    def __init__(self, code: int, message: str = "", codespace: str = "") -> None:
        super().__init__(f"Node rejected transaction: code={code} codespace={codespace} {message}")
        self.code = code
        self.message = message
        self.codespace = codespace


class ChainRestClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ChainRestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_account(self, address: str) -> AccountInfo:
        data = await self._query("GET", f"/cosmos/auth/v1beta1/accounts/{address}")
        account = data.get("account")
        if not isinstance(account, dict):
            raise ChainQueryError(f"Account {address} not found on chain.")
        # Vesting and module accounts nest the base account.
        base = account.get("base_account", account)
        try:
            return AccountInfo(
                address=base.get("address", address),
                account_number=int(base.get("account_number", 0)),
                sequence=int(base.get("sequence", 0)),
            )
        except (TypeError, ValueError) as exc:
            raise ChainQueryError(f"Malformed account response for {address}.") from exc

    async def fetch_chain_id(self) -> str:
        data = await self._query("GET", "/cosmos/base/tendermint/v1beta1/node_info")
        network = (data.get("default_node_info") or {}).get("network")
        if not network:
            raise ChainQueryError("Node info did not include a chain id.")
        return network

    async def fetch_module_account_address(self, name: str) -> str:
        data = await self._query("GET", f"/cosmos/auth/v1beta1/module_accounts/{name}")
        account = data.get("account") or {}
        address = (account.get("base_account") or {}).get("address") or account.get("address")
        if not address:
            raise ChainQueryError(f"Module account {name!r} not found on chain.")
        return address

    async def simulate(self, tx_bytes: bytes) -> int:
        data = await self._query(
            "POST",
            "/cosmos/tx/v1beta1/simulate",
            json={"tx_bytes": _b64encode(tx_bytes)},
            node_errors=True,
        )
        try:
            return int(data["gas_info"]["gas_used"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainQueryError("Simulation response did not include gas usage.") from exc

    async def broadcast(self, tx_bytes: bytes, mode: str = BROADCAST_MODE_SYNC) -> Dict[str, Any]:
        """Submit signed bytes and return the node's tx response.

        Gateway errors that carry a node status code are returned in the
        same shape as a tx response so the caller sees them verbatim.
        """
        try:
            response = await self._client.post(
                "/cosmos/tx/v1beta1/txs",
                json={"tx_bytes": _b64encode(tx_bytes), "mode": mode},
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Broadcast to {self.base_url} failed: {exc}") from exc

        if response.status_code >= 500:
            raise TransportError(
                f"Broadcast to {self.base_url} failed with HTTP {response.status_code}."
            )
        payload = _json_or_none(response)
        if payload is None:
            raise TransportError(f"Broadcast response from {self.base_url} was not JSON.")

        if response.is_success:
            tx_response = payload.get("tx_response")
            if not isinstance(tx_response, dict):
                raise TransportError("Broadcast response did not include tx_response.")
            return tx_response

        if "code" not in payload:
            raise TransportError(
                f"Broadcast to {self.base_url} failed with HTTP {response.status_code}."
            )
        return {
            "code": payload.get("code"),
            "raw_log": payload.get("message", ""),
            "codespace": payload.get("codespace", ""),
            "txhash": "",
        }

    async def _query(
        self, method: str, path: str, node_errors: bool = False, **kwargs: Any
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _json_or_none(exc.response) or {}
            code = detail.get("code")
            if node_errors and exc.response.is_client_error and isinstance(code, int):
                raise NodeRejectedError(
                    code,
                    detail.get("message", ""),
                    detail.get("codespace", ""),
                ) from exc
            raise ChainQueryError(
                f"{method} {path} returned HTTP {exc.response.status_code}: "
                f"{detail.get('message', exc.response.reason_phrase)}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ChainQueryError(f"{method} {path} failed: {exc}") from exc

        payload = _json_or_none(response)
        if payload is None:
            raise ChainQueryError(f"{method} {path} returned a non-JSON body.")
        logger.debug("%s %s -> HTTP %s", method, path, response.status_code)
        return payload


def _json_or_none(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")
