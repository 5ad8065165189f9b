"""Sui node access: JSON-RPC client, keypairs, signer and module artifacts."""

from .keys import Identities, SuiKeypair
from .signer import TransactionSigner
from .sui_client import SuiClient, create_sui_client

__all__ = ["Identities", "SuiKeypair", "SuiClient", "TransactionSigner", "create_sui_client"]
