"""Protobuf wire schema for the EVM params update and its Cosmos transaction.

Only the messages and fields this pipeline emits are declared. The
descriptors live in a private pool so they never clash with generated
modules loaded elsewhere in the process.
"""

from typing import Iterable, Sequence

from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory

from param_policy.models import ParameterSet

from .models import AuthorityEnvelope, PrivilegedCommand

MSG_UPDATE_PARAMS_TYPE_URL = "/minievm.evm.v1.MsgUpdateParams"
MSG_EXECUTE_MESSAGES_TYPE_URL = "/opinit.opchild.v1.MsgExecuteMessages"
SECP256K1_PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"

SIGN_MODE_DIRECT = 1

_FIELD = descriptor_pb2.FieldDescriptorProto
_ANY = ".google.protobuf.Any"
_POOL = descriptor_pool.DescriptorPool()


def _field(name: str, number: int, kind: int, repeated: bool = False, type_name: str = ""):
    field = _FIELD(
        name=name,
        number=number,
        type=kind,
        label=_FIELD.LABEL_REPEATED if repeated else _FIELD.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name
    return field


def _message(name: str, fields: Iterable[_FIELD], nested: Sequence = ()):
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    message.nested_type.extend(nested)
    return message


def _add_file(name: str, package: str, messages=(), dependencies=(), enums=()) -> None:
    proto = descriptor_pb2.FileDescriptorProto(name=name, package=package, syntax="proto3")
    proto.dependency.extend(dependencies)
    proto.message_type.extend(messages)
    proto.enum_type.extend(enums)
    _POOL.AddSerializedFile(proto.SerializeToString())


def _register_schema() -> None:
    any_file = descriptor_pb2.FileDescriptorProto()
    any_pb2.DESCRIPTOR.CopyToProto(any_file)
    _POOL.AddSerializedFile(any_file.SerializeToString())

    _add_file(
        "cosmos/base/v1beta1/coin.proto",
        "cosmos.base.v1beta1",
        messages=[
            _message(
                "Coin",
                [
                    _field("denom", 1, _FIELD.TYPE_STRING),
                    _field("amount", 2, _FIELD.TYPE_STRING),
                ],
            )
        ],
    )
    _add_file(
        "cosmos/crypto/secp256k1/keys.proto",
        "cosmos.crypto.secp256k1",
        messages=[_message("PubKey", [_field("key", 1, _FIELD.TYPE_BYTES)])],
    )
    _add_file(
        "cosmos/tx/signing/v1beta1/signing.proto",
        "cosmos.tx.signing.v1beta1",
        enums=[
            descriptor_pb2.EnumDescriptorProto(
                name="SignMode",
                value=[
                    descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_UNSPECIFIED", number=0),
                    descriptor_pb2.EnumValueDescriptorProto(
                        name="SIGN_MODE_DIRECT", number=SIGN_MODE_DIRECT
                    ),
                ],
            )
        ],
    )
    _add_file(
        "cosmos/tx/v1beta1/tx.proto",
        "cosmos.tx.v1beta1",
        dependencies=[
            "google/protobuf/any.proto",
            "cosmos/base/v1beta1/coin.proto",
            "cosmos/tx/signing/v1beta1/signing.proto",
        ],
        messages=[
            _message(
                "TxBody",
                [
                    _field("messages", 1, _FIELD.TYPE_MESSAGE, repeated=True, type_name=_ANY),
                    _field("memo", 2, _FIELD.TYPE_STRING),
                    _field("timeout_height", 3, _FIELD.TYPE_UINT64),
                ],
            ),
            _message(
                "ModeInfo",
                [
                    _field(
                        "single",
                        1,
                        _FIELD.TYPE_MESSAGE,
                        type_name=".cosmos.tx.v1beta1.ModeInfo.Single",
                    )
                ],
                nested=[
                    _message(
                        "Single",
                        [
                            _field(
                                "mode",
                                1,
                                _FIELD.TYPE_ENUM,
                                type_name=".cosmos.tx.signing.v1beta1.SignMode",
                            )
                        ],
                    )
                ],
            ),
            _message(
                "SignerInfo",
                [
                    _field("public_key", 1, _FIELD.TYPE_MESSAGE, type_name=_ANY),
                    _field(
                        "mode_info", 2, _FIELD.TYPE_MESSAGE, type_name=".cosmos.tx.v1beta1.ModeInfo"
                    ),
                    _field("sequence", 3, _FIELD.TYPE_UINT64),
                ],
            ),
            _message(
                "Fee",
                [
                    _field(
                        "amount",
                        1,
                        _FIELD.TYPE_MESSAGE,
                        repeated=True,
                        type_name=".cosmos.base.v1beta1.Coin",
                    ),
                    _field("gas_limit", 2, _FIELD.TYPE_UINT64),
                    _field("payer", 3, _FIELD.TYPE_STRING),
                    _field("granter", 4, _FIELD.TYPE_STRING),
                ],
            ),
            _message(
                "AuthInfo",
                [
                    _field(
                        "signer_infos",
                        1,
                        _FIELD.TYPE_MESSAGE,
                        repeated=True,
                        type_name=".cosmos.tx.v1beta1.SignerInfo",
                    ),
                    _field("fee", 2, _FIELD.TYPE_MESSAGE, type_name=".cosmos.tx.v1beta1.Fee"),
                ],
            ),
            _message(
                "SignDoc",
                [
                    _field("body_bytes", 1, _FIELD.TYPE_BYTES),
                    _field("auth_info_bytes", 2, _FIELD.TYPE_BYTES),
                    _field("chain_id", 3, _FIELD.TYPE_STRING),
                    _field("account_number", 4, _FIELD.TYPE_UINT64),
                ],
            ),
            _message(
                "TxRaw",
                [
                    _field("body_bytes", 1, _FIELD.TYPE_BYTES),
                    _field("auth_info_bytes", 2, _FIELD.TYPE_BYTES),
                    _field("signatures", 3, _FIELD.TYPE_BYTES, repeated=True),
                ],
            ),
        ],
    )
    _add_file(
        "minievm/evm/v1/types.proto",
        "minievm.evm.v1",
        messages=[
            _message(
                "Params",
                [
                    _field("extra_eips", 1, _FIELD.TYPE_INT64, repeated=True),
                    _field("allowed_publishers", 2, _FIELD.TYPE_STRING, repeated=True),
                    _field("allow_custom_erc20", 3, _FIELD.TYPE_BOOL),
                    _field("allowed_custom_erc20s", 4, _FIELD.TYPE_STRING, repeated=True),
                    _field("fee_denom", 5, _FIELD.TYPE_STRING),
                    _field("gas_refund_ratio", 6, _FIELD.TYPE_STRING),
                    _field("num_retain_block_hashes", 7, _FIELD.TYPE_UINT64),
                ],
            )
        ],
    )
    _add_file(
        "minievm/evm/v1/tx.proto",
        "minievm.evm.v1",
        dependencies=["minievm/evm/v1/types.proto"],
        messages=[
            _message(
                "MsgUpdateParams",
                [
                    _field("authority", 1, _FIELD.TYPE_STRING),
                    _field("params", 2, _FIELD.TYPE_MESSAGE, type_name=".minievm.evm.v1.Params"),
                ],
            )
        ],
    )
    _add_file(
        "opinit/opchild/v1/tx.proto",
        "opinit.opchild.v1",
        dependencies=["google/protobuf/any.proto"],
        messages=[
            _message(
                "MsgExecuteMessages",
                [
                    _field("sender", 1, _FIELD.TYPE_STRING),
                    _field("messages", 2, _FIELD.TYPE_MESSAGE, repeated=True, type_name=_ANY),
                ],
            )
        ],
    )


def _message_class(full_name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(full_name))


_register_schema()

Any = _message_class("google.protobuf.Any")
Coin = _message_class("cosmos.base.v1beta1.Coin")
PubKey = _message_class("cosmos.crypto.secp256k1.PubKey")
TxBody = _message_class("cosmos.tx.v1beta1.TxBody")
SignerInfo = _message_class("cosmos.tx.v1beta1.SignerInfo")
Fee = _message_class("cosmos.tx.v1beta1.Fee")
AuthInfo = _message_class("cosmos.tx.v1beta1.AuthInfo")
SignDoc = _message_class("cosmos.tx.v1beta1.SignDoc")
TxRaw = _message_class("cosmos.tx.v1beta1.TxRaw")
EvmParams = _message_class("minievm.evm.v1.Params")
MsgUpdateParams = _message_class("minievm.evm.v1.MsgUpdateParams")
MsgExecuteMessages = _message_class("opinit.opchild.v1.MsgExecuteMessages")


def serialize(message) -> bytes:
    return message.SerializeToString(deterministic=True)


def pack_any(type_url: str, message):
    return Any(type_url=type_url, value=serialize(message))


def params_to_proto(parameters: ParameterSet):
    policy = parameters.custom_token_policy
    return EvmParams(
        extra_eips=list(parameters.extra_eips),
        allowed_publishers=list(parameters.allowed_publishers),
        allow_custom_erc20=policy.allow_custom_erc20,
        allowed_custom_erc20s=list(policy.allowed_custom_erc20s),
        fee_denom=parameters.fee_denom,
        gas_refund_ratio=str(parameters.gas_refund_ratio),
        num_retain_block_hashes=parameters.num_retain_block_hashes,
    )


def command_to_any(command: PrivilegedCommand):
    message = MsgUpdateParams(
        authority=command.authority_address,
        params=params_to_proto(command.parameters),
    )
    return pack_any(MSG_UPDATE_PARAMS_TYPE_URL, message)


def envelope_to_any(envelope: AuthorityEnvelope):
    message = MsgExecuteMessages(
        sender=envelope.acting_account,
        messages=[command_to_any(command) for command in envelope.inner_commands],
    )
    return pack_any(MSG_EXECUTE_MESSAGES_TYPE_URL, message)


def public_key_to_any(compressed_key: bytes):
    return pack_any(SECP256K1_PUBKEY_TYPE_URL, PubKey(key=compressed_key))
