"""
Ed25519 identities for signing Sui transactions.
"""

import base64
import hashlib
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from momentx.core.exceptions import ConfigurationError

ED25519_FLAG = 0x00

# Intent scope TransactionData, version V0, app id Sui
TRANSACTION_INTENT = bytes([0, 0, 0])

ADDRESS_LENGTH = 20

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


def derive_address(public_key_bytes: bytes) -> str:
    """SHA3-256 of flag || public key, truncated to 20 bytes."""
    digest = hashlib.sha3_256(bytes([ED25519_FLAG]) + public_key_bytes).digest()
    return "0x" + digest[:ADDRESS_LENGTH].hex()


class SuiKeypair:
    """
    An Ed25519 keypair and its Sui address.

    Example:
        keypair = SuiKeypair.from_hex(os.environ["ADMIN_KEY_PAIR_SEED"])
        signature = keypair.sign_transaction(tx_bytes)
    """

    def __init__(self, private_key: Ed25519PrivateKey, label: Optional[str] = None):
        self._private_key = private_key
        self.label = label
        self.public_key_bytes = private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )
        self.address = derive_address(self.public_key_bytes)

    @classmethod
    def from_secret_key(cls, secret: bytes, label: Optional[str] = None) -> "SuiKeypair":
        """
        Build a keypair from a 32-byte seed or a 64-byte secret key.

        A 64-byte secret key is the seed followed by the public key; the
        public half must match the one derived from the seed.
        """
        if len(secret) not in (SEED_LENGTH, SECRET_KEY_LENGTH):
            raise ConfigurationError(
                f"Invalid key length for {label or 'keypair'}: expected 32 or 64 bytes, got {len(secret)}",
                details={"label": label, "length": len(secret)},
            )

        keypair = cls(Ed25519PrivateKey.from_private_bytes(secret[:SEED_LENGTH]), label=label)

        if len(secret) == SECRET_KEY_LENGTH and secret[SEED_LENGTH:] != keypair.public_key_bytes:
            raise ConfigurationError(
                f"Secret key for {label or 'keypair'} does not match its public key",
                details={"label": label},
            )
        return keypair

    @classmethod
    def from_hex(cls, value: str, label: Optional[str] = None) -> "SuiKeypair":
        """Build a keypair from hex-encoded secret material (``0x`` prefix optional)."""
        text = (value or "").strip()
        if text.startswith(("0x", "0X")):
            text = text[2:]
        try:
            secret = bytes.fromhex(text)
        except ValueError:
            raise ConfigurationError(
                f"Key seed for {label or 'keypair'} is not valid hex", details={"label": label}
            )
        return cls.from_secret_key(secret, label=label)

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """
        Sign transaction bytes prefixed with the transaction intent.

        The intent message itself is signed; Ed25519 hashes it internally.

        Returns:
            Base64 of flag || signature || public key, as the node expects it
        """
        signature = self.sign(TRANSACTION_INTENT + tx_bytes)
        return base64.b64encode(bytes([ED25519_FLAG]) + signature + self.public_key_bytes).decode(
            "ascii"
        )

    def verify_transaction(self, tx_bytes: bytes, serialized_signature: str) -> bool:
        """Check a serialized signature produced by ``sign_transaction``."""
        raw = base64.b64decode(serialized_signature)
        if len(raw) != 97 or raw[0] != ED25519_FLAG or raw[65:] != self.public_key_bytes:
            return False
        try:
            Ed25519PublicKey.from_public_bytes(self.public_key_bytes).verify(
                raw[1:65], TRANSACTION_INTENT + tx_bytes
            )
        except InvalidSignature:
            return False
        return True

    def __repr__(self) -> str:
        return f"SuiKeypair(label={self.label!r}, address={self.address!r})"


class Identities:
    """The admin, merchant and user identities of a run."""

    def __init__(self, admin: SuiKeypair, merchant: SuiKeypair, user: SuiKeypair):
        self.admin = admin
        self.merchant = merchant
        self.user = user

    @classmethod
    def from_config(cls, keys) -> "Identities":
        """Load all three identities from a KeyConfig."""
        missing = [
            name
            for name, value in (
                ("ADMIN_KEY_PAIR_SEED", keys.admin_seed),
                ("MERCHANT_KEY_PAIR_SEED", keys.merchant_seed),
                ("USER_KEY_PAIR_SEED", keys.user_seed),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing key seeds: {', '.join(missing)}", details={"missing": missing}
            )
        return cls(
            admin=SuiKeypair.from_hex(keys.admin_seed, label="admin"),
            merchant=SuiKeypair.from_hex(keys.merchant_seed, label="merchant"),
            user=SuiKeypair.from_hex(keys.user_seed, label="user"),
        )

    def addresses(self) -> dict:
        return {
            "admin": self.admin.address,
            "merchant": self.merchant.address,
            "user": self.user.address,
        }
