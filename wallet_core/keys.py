"""In-memory signing identity derived from an operator mnemonic."""

from typing import Optional

from bip_utils import (
    AtomAddrEncoder,
    Bip32Slip10Secp256k1,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
)
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from .models import DerivationPath

_SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class KeyMaterialError(ValueError):
    """Raised when a secret cannot produce usable signing key material."""


class MnemonicSecret:
    """Short-lived holder for a mnemonic phrase.

    The phrase is never shown by repr/str and is dropped on dispose().
    """

    def __init__(self, phrase: str) -> None:
        self._phrase: Optional[str] = " ".join(phrase.split())

    def __repr__(self) -> str:
        state = "disposed" if self._phrase is None else "***"
        return f"MnemonicSecret({state})"

    __str__ = __repr__

    def __enter__(self) -> "MnemonicSecret":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    @property
    def disposed(self) -> bool:
        return self._phrase is None

    def reveal(self) -> str:
        if self._phrase is None:
            raise KeyMaterialError("Mnemonic secret has been disposed.")
        return self._phrase

    def dispose(self) -> None:
        self._phrase = None


class SigningIdentity:
    """secp256k1 key pair held only for the duration of a run."""

    def __init__(self, private_key: bytes, public_key: bytes, address: str) -> None:
        self._private_key: Optional[bytearray] = bytearray(private_key)
        self._public_key = public_key
        self._address = address

    @classmethod
    def from_mnemonic(
        cls,
        secret: MnemonicSecret,
        derivation_path: Optional[DerivationPath] = None,
        address_prefix: str = "init",
    ) -> "SigningIdentity":
        phrase = secret.reveal()
        if not Bip39MnemonicValidator().IsValid(phrase):
            raise KeyMaterialError("Secret is not a valid BIP39 mnemonic.")
        path = (derivation_path or DerivationPath()).to_string()
        try:
            seed = Bip39SeedGenerator(phrase).Generate()
            node = Bip32Slip10Secp256k1.FromSeedAndPath(seed, path)
        except ValueError as exc:
            raise KeyMaterialError(f"Unable to derive key at {path}.") from exc

        public_key = node.PublicKey().RawCompressed().ToBytes()
        return cls(
            private_key=node.PrivateKey().Raw().ToBytes(),
            public_key=public_key,
            address=AtomAddrEncoder.EncodeKey(public_key, hrp=address_prefix),
        )

    def __repr__(self) -> str:
        return f"SigningIdentity(address={self._address!r})"

    def __enter__(self) -> "SigningIdentity":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    @property
    def address(self) -> str:
        return self._address

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def disposed(self) -> bool:
        return self._private_key is None

    def sign(self, payload: bytes) -> bytes:
        """Sign SHA-256(payload); returns the 64-byte low-S r||s signature."""
        raw = self._require_key()
        key = ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())
        der = key.sign(payload, ec.ECDSA(hashes.SHA256(), deterministic_signing=True))
        r, s = decode_dss_signature(der)
        if s > _SECP256K1_ORDER // 2:
            s = _SECP256K1_ORDER - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def dispose(self) -> None:
        if self._private_key is not None:
            for index in range(len(self._private_key)):
                self._private_key[index] = 0
        self._private_key = None

    def _require_key(self) -> bytearray:
        if self._private_key is None:
            raise KeyMaterialError("Signing identity has been disposed.")
        return self._private_key
