"""Protobuf encoding tests for the params update messages."""

import unittest

from bip_utils import Bech32Encoder

from execution_adapter.initia import wire
from execution_adapter.initia.composer import MessageComposer
from param_policy.builder import build_parameter_set

AUTHORITY = Bech32Encoder.Encode("init", bytes([1]) * 20)
SIGNER = Bech32Encoder.Encode("init", bytes([2]) * 20)
TOKEN = "0x137fDE729e22c911331EA5B3ACaaf476B93E93cA"
PUBLISHER = "0x9D9c32921575Fd98e67E27C0189ED4b750Cb17C5"


def _envelope(**overrides):
    fields = {
        "extra_eips": ["EIP3855"],
        "allowed_publishers": [PUBLISHER],
        "allow_custom_erc20": True,
        "allowed_custom_erc20s": [],
        "fee_denom": "evm/137fDE729e22c911331EA5B3ACaaf476B93E93cA",
        "gas_refund_ratio": "500000000000000000",
        "num_retain_block_hashes": 256,
    }
    fields.update(overrides)
    params = build_parameter_set(fields)
    return MessageComposer(SIGNER).compose(AUTHORITY, params, SIGNER)


def _decode(envelope):
    packed = wire.envelope_to_any(envelope)
    execute = wire.MsgExecuteMessages.FromString(packed.value)
    update = wire.MsgUpdateParams.FromString(execute.messages[0].value)
    return packed, execute, update


class WireEncodingTests(unittest.TestCase):
    def test_envelope_nesting(self) -> None:
        packed, execute, update = _decode(_envelope())

        self.assertEqual(packed.type_url, wire.MSG_EXECUTE_MESSAGES_TYPE_URL)
        self.assertEqual(execute.sender, SIGNER)
        self.assertEqual(len(execute.messages), 1)
        self.assertEqual(execute.messages[0].type_url, wire.MSG_UPDATE_PARAMS_TYPE_URL)
        self.assertEqual(update.authority, AUTHORITY)

    def test_params_fields(self) -> None:
        _, _, update = _decode(_envelope())
        params = update.params

        self.assertEqual(list(params.extra_eips), [3855])
        self.assertEqual(list(params.allowed_publishers), [PUBLISHER])
        self.assertTrue(params.allow_custom_erc20)
        self.assertEqual(list(params.allowed_custom_erc20s), [])
        self.assertEqual(params.fee_denom, "evm/137fDE729e22c911331EA5B3ACaaf476B93E93cA")
        self.assertEqual(params.gas_refund_ratio, "500000000000000000")
        self.assertEqual(params.num_retain_block_hashes, 256)

    def test_policy_variants_on_wire(self) -> None:
        _, _, allow_list = _decode(_envelope(allowed_custom_erc20s=[TOKEN]))
        self.assertTrue(allow_list.params.allow_custom_erc20)
        self.assertEqual(list(allow_list.params.allowed_custom_erc20s), [TOKEN])

        _, _, disabled = _decode(
            _envelope(allow_custom_erc20=False, allowed_custom_erc20s=[TOKEN])
        )
        self.assertFalse(disabled.params.allow_custom_erc20)
        self.assertEqual(list(disabled.params.allowed_custom_erc20s), [])

    def test_encoding_is_deterministic(self) -> None:
        first = wire.serialize(wire.envelope_to_any(_envelope()))
        second = wire.serialize(wire.envelope_to_any(_envelope()))
        self.assertEqual(first, second)

    def test_public_key_any(self) -> None:
        packed = wire.public_key_to_any(b"\x02" + b"\x11" * 32)
        self.assertEqual(packed.type_url, wire.SECP256K1_PUBKEY_TYPE_URL)
        self.assertEqual(wire.PubKey.FromString(packed.value).key, b"\x02" + b"\x11" * 32)


if __name__ == "__main__":
    unittest.main()
