"""Publish service for deploying the compiled coffee NFT package."""

from typing import Any, Dict, Iterable, Optional

import structlog

from momentx.core.config import ContractConfig
from momentx.core.exceptions import PublishError
from momentx.core.models import PublishResult, TransactionResult
from momentx.data.artifacts import load_compiled_modules
from momentx.data.signer import TransactionSigner
from momentx.utils.reliability import track_performance

logger = structlog.get_logger(__name__)


def extract_publish_result(events: Iterable[Dict[str, Any]]) -> PublishResult:
    """
    Pick the package and global object ids out of publish events.

    The first event carrying a ``newObject`` payload wins.

    Raises:
        PublishError: When no event carries a ``newObject`` payload, or the
            payload lacks ``packageId``/``objectId``
    """
    events = list(events)
    new_object = next(
        (e["newObject"] for e in events if isinstance(e, dict) and e.get("newObject") is not None),
        None,
    )

    if new_object is None:
        raise PublishError(
            "Publish effects contain no newObject event",
            details={"event_count": len(events)},
        )

    module_id = new_object.get("packageId")
    global_object_id = new_object.get("objectId")
    if not module_id or not global_object_id:
        raise PublishError(
            "newObject event is missing packageId or objectId",
            details={"event": new_object},
        )

    return PublishResult(module_id=module_id, global_object_id=global_object_id)


class PublishService:
    """Publish the compiled package with the admin identity."""

    def __init__(self, admin: TransactionSigner, config: ContractConfig):
        self.admin = admin
        self.config = config
        self.last_transaction: Optional[TransactionResult] = None

    @track_performance("publish_package")
    def publish(self, module_path: Optional[str] = None) -> PublishResult:
        """
        Publish the compiled module(s) and return the new identifiers.

        Args:
            module_path: Artifact path (uses config default if None)

        Returns:
            PublishResult with module and global object ids
        """
        path = module_path or self.config.module_path
        compiled_modules = load_compiled_modules(path)

        logger.info("Publishing package", path=path, modules=len(compiled_modules))

        txn = self.admin.publish(compiled_modules, gas_budget=self.config.gas_budget)
        self.last_transaction = txn
        logger.debug("Publish transaction", digest=txn.digest, events=txn.events)

        result = extract_publish_result(txn.events)

        logger.info(
            "Package published",
            module_id=result.module_id,
            global_object_id=result.global_object_id,
            digest=txn.digest,
        )
        return result

