"""End-to-end pipeline tests against a mocked chain node."""

import logging
import unittest

import httpx
from bip_utils import Bech32Encoder

from broadcaster.models import BroadcastResult
from chain_client.rest import ChainQueryError, ChainRestClient, TransportError
from param_policy.policy import ValidationError
from update_pipeline.config import PipelineSettings
from update_pipeline.pipeline import ParameterUpdatePipeline, resolve_authority_address
from wallet_core.keys import KeyMaterialError, MnemonicSecret

MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
AUTHORITY = Bech32Encoder.Encode("init", bytes([1]) * 20)
FEE_DENOM = "evm/" + "A" * 38 + "CC"


def _raw(**overrides) -> dict:
    fields = {
        "extra_eips": [],
        "allowed_publishers": [],
        "allow_custom_erc20": True,
        "allowed_custom_erc20s": [],
        "fee_denom": FEE_DENOM,
        "gas_refund_ratio": "500000000000000000",
        "num_retain_block_hashes": 0,
    }
    fields.update(overrides)
    return fields


class MockNode:
    def __init__(
        self,
        tx_response=None,
        queries_up: bool = True,
        broadcast_up: bool = True,
        simulate_rejection=None,
    ) -> None:
        self.tx_response = tx_response or {"code": 0, "txhash": "A1B2C3", "raw_log": ""}
        self.simulate_rejection = simulate_rejection
        self.queries_up = queries_up
        self.broadcast_up = broadcast_up
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/cosmos/tx/v1beta1/txs":
            if not self.broadcast_up:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json={"tx_response": self.tx_response})
        if not self.queries_up:
            raise httpx.ConnectError("network down", request=request)
        if path.startswith("/cosmos/auth/v1beta1/accounts/"):
            return httpx.Response(
                200,
                json={"account": {"account_number": "9", "sequence": "21"}},
            )
        if path == "/cosmos/base/tendermint/v1beta1/node_info":
            return httpx.Response(200, json={"default_node_info": {"network": "minievm-1"}})
        if path == "/cosmos/tx/v1beta1/simulate":
            if self.simulate_rejection is not None:
                return httpx.Response(400, json=self.simulate_rejection)
            return httpx.Response(200, json={"gas_info": {"gas_used": "120000"}})
        if path == "/cosmos/auth/v1beta1/module_accounts/opchild":
            return httpx.Response(
                200, json={"account": {"base_account": {"address": AUTHORITY}, "name": "opchild"}}
            )
        return httpx.Response(404, json={"code": 5, "message": "not found"})

    @property
    def broadcasts(self):
        return [r for r in self.requests if r.url.path == "/cosmos/tx/v1beta1/txs"]


class ParameterUpdatePipelineTests(unittest.IsolatedAsyncioTestCase):
    def _pipeline(self, node: MockNode, **settings) -> ParameterUpdatePipeline:
        self.client = ChainRestClient("http://node.test", transport=httpx.MockTransport(node))
        config = PipelineSettings(rest_url="http://node.test", authority_address=AUTHORITY, **settings)
        return ParameterUpdatePipeline(config, self.client)

    async def asyncTearDown(self) -> None:
        await self.client.aclose()

    async def test_accepting_node(self) -> None:
        node = MockNode()
        pipeline = self._pipeline(node)

        signed = await pipeline.sign(_raw(), MnemonicSecret(MNEMONIC))
        self.assertEqual((signed.chain_id, signed.account_number, signed.sequence), ("minievm-1", 9, 21))
        self.assertEqual(signed.gas_limit, 210_000)
        self.assertEqual(node.broadcasts, [])

        result = await pipeline.run(_raw(), MnemonicSecret(MNEMONIC))
        self.assertTrue(result.accepted)
        self.assertEqual(result.transaction_hash, "A1B2C3")
        self.assertEqual(len(node.broadcasts), 1)

    async def test_insufficient_fee_rejection(self) -> None:
        node = MockNode(
            tx_response={
                "code": 13,
                "codespace": "sdk",
                "txhash": "A1B2C3",
                "raw_log": "insufficient fee",
            }
        )
        result = await self._pipeline(node).run(_raw(), MnemonicSecret(MNEMONIC))

        self.assertIsInstance(result, BroadcastResult)
        self.assertFalse(result.accepted)
        self.assertEqual(result.node_error_code, 13)
        self.assertEqual(result.node_error_message, "insufficient fee")

    async def test_empty_fee_denom_makes_no_network_calls(self) -> None:
        node = MockNode()
        with self.assertRaises(ValidationError):
            await self._pipeline(node).run(_raw(fee_denom=""), MnemonicSecret(MNEMONIC))
        self.assertEqual(node.requests, [])

    async def test_eip_beyond_int64_makes_no_network_calls(self) -> None:
        node = MockNode()
        with self.assertRaises(ValidationError):
            await self._pipeline(node).run(_raw(extra_eips=[2**63]), MnemonicSecret(MNEMONIC))
        self.assertEqual(node.requests, [])

    async def test_simulation_rejection_is_node_result(self) -> None:
        node = MockNode(
            simulate_rejection={
                "code": 2,
                "codespace": "sdk",
                "message": "failed to execute message; message index: 0: invalid authority: unauthorized",
                "details": [],
            }
        )
        result = await self._pipeline(node).run(_raw(), MnemonicSecret(MNEMONIC))

        self.assertIsInstance(result, BroadcastResult)
        self.assertFalse(result.accepted)
        self.assertEqual(result.node_error_code, 2)
        self.assertEqual(result.codespace, "sdk")
        self.assertIn("unauthorized", result.node_error_message)
        self.assertIsNone(result.transaction_hash)
        self.assertEqual(node.broadcasts, [])

    async def test_chain_query_failure_prevents_broadcast(self) -> None:
        node = MockNode(queries_up=False)
        with self.assertRaises(ChainQueryError):
            await self._pipeline(node).run(_raw(), MnemonicSecret(MNEMONIC))
        self.assertEqual(node.broadcasts, [])

    async def test_transport_failure_on_broadcast(self) -> None:
        node = MockNode(broadcast_up=False)
        with self.assertRaises(TransportError):
            await self._pipeline(node, gas_limit=300_000).run(_raw(), MnemonicSecret(MNEMONIC))

    async def test_invalid_secret_makes_no_network_calls(self) -> None:
        node = MockNode()
        with self.assertRaises(KeyMaterialError):
            await self._pipeline(node).run(_raw(), MnemonicSecret("not a real mnemonic"))
        self.assertEqual(node.requests, [])

    async def test_mismatched_acting_account_makes_no_network_calls(self) -> None:
        node = MockNode()
        other = Bech32Encoder.Encode("init", bytes([5]) * 20)
        with self.assertRaises(ValidationError):
            await self._pipeline(node).run(_raw(), MnemonicSecret(MNEMONIC), acting_account=other)
        self.assertEqual(node.requests, [])

    async def test_configured_chain_and_gas_skip_lookups(self) -> None:
        node = MockNode()
        pipeline = self._pipeline(node, chain_id="fixed-1", gas_limit=250_000, memo="params")
        signed = await pipeline.sign(_raw(), MnemonicSecret(MNEMONIC))

        self.assertEqual(signed.chain_id, "fixed-1")
        self.assertEqual(signed.unsigned.memo, "params")
        self.assertEqual(
            [r.url.path.split("/")[-2] for r in node.requests], ["accounts"]
        )

    async def test_secret_never_logged(self) -> None:
        node = MockNode()
        with self.assertLogs(level=logging.DEBUG) as logs:
            await self._pipeline(node).run(_raw(), MnemonicSecret(MNEMONIC))
        self.assertFalse(any("abandon" in line for line in logs.output))
        self.assertTrue(any("Sending transaction" in line for line in logs.output))

    async def test_resolve_authority_address(self) -> None:
        node = MockNode()
        self._pipeline(node)
        self.assertEqual(await resolve_authority_address(self.client), AUTHORITY)


if __name__ == "__main__":
    unittest.main()
