"""
Transaction signer: builds transactions on the node, signs them locally and
submits them, with dry-run support.
"""

import base64
from typing import List, Optional

import structlog

from momentx.core.exceptions import TransactionError
from momentx.core.models import MoveCall, TransactionResult
from momentx.data.keys import SuiKeypair
from momentx.data.sui_client import SuiClient

logger = structlog.get_logger(__name__)

DRY_RUN_PACKAGE_ID = "dry_run_package_id"
DRY_RUN_GLOBAL_OBJECT_ID = "dry_run_global_object_id"
DRY_RUN_OBJECT_ID = "dry_run_object_id"


class TransactionSigner:
    """Signs and executes transactions for one identity."""

    def __init__(self, client: SuiClient, keypair: SuiKeypair, dry_run: bool = False):
        self.client = client
        self.keypair = keypair
        self.dry_run = dry_run

    @property
    def address(self) -> str:
        return self.keypair.address

    def publish(self, compiled_modules: List[str], gas_budget: int) -> TransactionResult:
        """Publish base64 encoded compiled modules."""
        if self.dry_run:
            logger.info(
                "DRY RUN: Would publish package",
                sender=self.address,
                modules=len(compiled_modules),
                gas_budget=gas_budget,
            )
            return TransactionResult(
                digest="dry_run_digest",
                events=[
                    {
                        "newObject": {
                            "packageId": DRY_RUN_PACKAGE_ID,
                            "objectId": DRY_RUN_GLOBAL_OBJECT_ID,
                            "sender": self.address,
                        }
                    }
                ],
                new_objects=[
                    {
                        "packageId": DRY_RUN_PACKAGE_ID,
                        "objectId": DRY_RUN_GLOBAL_OBJECT_ID,
                        "sender": self.address,
                    }
                ],
                created_object_ids=[DRY_RUN_GLOBAL_OBJECT_ID],
            )

        tx_bytes = self.client.build_publish(self.address, compiled_modules, gas_budget)
        return self._sign_and_execute(tx_bytes, label="publish")

    def execute_move_call(self, call: MoveCall) -> TransactionResult:
        """Execute a single entry function call."""
        if self.dry_run:
            logger.info(
                "DRY RUN: Would execute move call",
                signer=self.address,
                target=call.target,
                arguments=call.arguments,
            )
            return TransactionResult(
                digest="dry_run_digest", created_object_ids=[DRY_RUN_OBJECT_ID]
            )

        tx_bytes = self.client.build_move_call(self.address, call)
        return self._sign_and_execute(tx_bytes, label=call.function)

    def _sign_and_execute(self, tx_bytes: str, label: Optional[str] = None) -> TransactionResult:
        signature = self.keypair.sign_transaction(base64.b64decode(tx_bytes))
        result = self.client.execute_transaction(tx_bytes, signature)

        if not result.succeeded:
            logger.error(
                "Transaction failed", label=label, digest=result.digest, status=result.status
            )
            raise TransactionError(
                f"Transaction {label or 'call'} failed with status {result.status}",
                digest=result.digest,
                details={"label": label},
            )

        logger.info("Transaction executed", label=label, digest=result.digest, signer=self.address)
        return result
