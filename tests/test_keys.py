"""Tests for Ed25519 identities and transaction signing."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from factories import ADMIN_SEED, MERCHANT_SEED, USER_SEED
from momentx.core.config import KeyConfig
from momentx.core.exceptions import ConfigurationError
from momentx.data.keys import TRANSACTION_INTENT, Identities, SuiKeypair


class TestSuiKeypair:
    """Test keypair loading and address derivation."""

    def test_address_is_deterministic(self):
        """Same seed yields the same address."""
        first = SuiKeypair.from_hex(ADMIN_SEED)
        second = SuiKeypair.from_hex("0x" + ADMIN_SEED)

        assert first.address == second.address

    def test_address_format(self):
        """Addresses are 0x followed by 40 hex characters (20 bytes)."""
        address = SuiKeypair.from_hex(ADMIN_SEED).address

        assert address.startswith("0x")
        assert len(address) == 42
        int(address[2:], 16)

    def test_address_is_truncated_sha3_of_flagged_public_key(self):
        """Address is the first 20 bytes of SHA3-256 over flag and public key."""
        keypair = SuiKeypair.from_hex(ADMIN_SEED)

        expected = "0x" + hashlib.sha3_256(b"\x00" + keypair.public_key_bytes).digest()[:20].hex()
        assert keypair.address == expected

    def test_distinct_seeds_give_distinct_addresses(self):
        """Admin, merchant and user never collide."""
        addresses = {SuiKeypair.from_hex(s).address for s in (ADMIN_SEED, MERCHANT_SEED, USER_SEED)}

        assert len(addresses) == 3

    def test_accepts_64_byte_secret_key(self):
        """Seed followed by its public key loads like the bare seed."""
        seeded = SuiKeypair.from_hex(ADMIN_SEED)
        full = SuiKeypair.from_hex(ADMIN_SEED + seeded.public_key_bytes.hex())

        assert full.address == seeded.address

    def test_rejects_mismatched_public_half(self):
        """A 64-byte key whose public half is wrong is refused."""
        with pytest.raises(ConfigurationError, match="does not match"):
            SuiKeypair.from_hex(ADMIN_SEED + "00" * 32, label="admin")

    def test_rejects_bad_length(self):
        """Key material must be 32 or 64 bytes."""
        with pytest.raises(ConfigurationError, match="expected 32 or 64 bytes"):
            SuiKeypair.from_hex("ab" * 16)

    def test_rejects_non_hex(self):
        """Non-hex seeds raise a configuration error naming the role."""
        with pytest.raises(ConfigurationError, match="merchant"):
            SuiKeypair.from_hex("not-hex", label="merchant")

    def test_repr_hides_secret(self):
        """repr shows the label and address only."""
        keypair = SuiKeypair.from_hex(ADMIN_SEED, label="admin")

        assert ADMIN_SEED not in repr(keypair)
        assert keypair.address in repr(keypair)


class TestTransactionSigning:
    """Test the serialized signature format."""

    def setup_method(self):
        """Set up test fixtures."""
        self.keypair = SuiKeypair.from_hex(USER_SEED)
        self.tx = b"transaction-bytes"

    def test_serialized_signature_layout(self):
        """Signature is flag, 64 signature bytes and the 32-byte public key."""
        raw = base64.b64decode(self.keypair.sign_transaction(self.tx))

        assert len(raw) == 97
        assert raw[0] == 0x00
        assert raw[65:] == self.keypair.public_key_bytes

    def test_signature_covers_intent_message(self):
        """The signed message is the intent prefix followed by the tx bytes."""
        raw = base64.b64decode(self.keypair.sign_transaction(self.tx))

        public_key = Ed25519PublicKey.from_public_bytes(self.keypair.public_key_bytes)
        public_key.verify(raw[1:65], TRANSACTION_INTENT + self.tx)

    def test_verify_round_trip(self):
        """A produced signature verifies; a different payload does not."""
        signature = self.keypair.sign_transaction(self.tx)

        assert self.keypair.verify_transaction(self.tx, signature) is True
        assert self.keypair.verify_transaction(b"other", signature) is False

    def test_verify_rejects_foreign_key(self):
        """Another identity's signature does not verify."""
        other = SuiKeypair.from_hex(ADMIN_SEED)

        assert self.keypair.verify_transaction(self.tx, other.sign_transaction(self.tx)) is False


class TestIdentities:
    """Test loading the three run identities."""

    def test_from_config(self):
        """All three seeds load into labelled keypairs."""
        keys = KeyConfig(
            ADMIN_KEY_PAIR_SEED=ADMIN_SEED,
            MERCHANT_KEY_PAIR_SEED=MERCHANT_SEED,
            USER_KEY_PAIR_SEED=USER_SEED,
        )

        identities = Identities.from_config(keys)

        assert identities.admin.label == "admin"
        assert set(identities.addresses()) == {"admin", "merchant", "user"}
        assert identities.addresses()["user"] == SuiKeypair.from_hex(USER_SEED).address

    def test_missing_seeds_listed(self):
        """Every missing seed is named in the error."""
        keys = KeyConfig(ADMIN_KEY_PAIR_SEED=ADMIN_SEED)

        with pytest.raises(ConfigurationError) as exc_info:
            Identities.from_config(keys)

        assert exc_info.value.details["missing"] == [
            "MERCHANT_KEY_PAIR_SEED",
            "USER_KEY_PAIR_SEED",
        ]
