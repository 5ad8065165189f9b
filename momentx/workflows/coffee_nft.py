"""
Coffee NFT demo workflow orchestration.

Runs the ordered pipeline: faucet, publish, add merchant, airdrop, redeem
(direct or request/confirm) and the query phase. Steps run strictly in order;
a failing step stops the run and everything before it stays on the ledger.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from momentx.core.config import Settings, get_settings
from momentx.core.exceptions import ConfigurationError, WorkflowError
from momentx.core.logging import get_logger, set_correlation_id
from momentx.core.models import (
    ProcessingResult,
    ProcessingStatus,
    PublishResult,
    QueryReport,
    StepResult,
    TransactionResult,
    WorkflowType,
)
from momentx.data.keys import Identities
from momentx.data.signer import TransactionSigner
from momentx.data.sui_client import SuiClient, create_sui_client
from momentx.services.contract_service import ContractService
from momentx.services.publish_service import PublishService
from momentx.services.query_service import QueryService, Reporter

logger = get_logger(__name__)

FLOW_STEPS = {
    "two-phase": ["add_merchant", "airdrop", "redeem_request", "redeem_confirm"],
    "direct": ["add_merchant", "airdrop", "redeem"],
}


def _noop_reporter(label: str, payload: Any) -> None:
    pass


class CoffeeNFTWorkflow:
    """Orchestrate the coffee NFT publish, interaction and query pipeline."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[SuiClient] = None,
        identities: Optional[Identities] = None,
        correlation_id: Optional[str] = None,
        reporter: Optional[Reporter] = None,
    ):
        """Initialise the workflow; clients and keys are created lazily."""
        self.settings = settings or get_settings()
        self.correlation_id = set_correlation_id(correlation_id)
        self.reporter = reporter or _noop_reporter

        self._client = client
        self._identities = identities
        self._signers: Dict[str, TransactionSigner] = {}

        logger.info(
            "Coffee NFT workflow initialized",
            correlation_id=self.correlation_id,
            dry_run=self.settings.dry_run,
        )

    @property
    def client(self) -> SuiClient:
        """Lazy initialization of the Sui client."""
        if self._client is None:
            self._client = create_sui_client(
                self.settings.sui, timeout=float(self.settings.request_timeout)
            )
        return self._client

    @property
    def identities(self) -> Identities:
        """Lazy loading of the admin, merchant and user keypairs."""
        if self._identities is None:
            self._identities = Identities.from_config(self.settings.keys)
        return self._identities

    def signer(self, role: str) -> TransactionSigner:
        if role not in self._signers:
            self._signers[role] = TransactionSigner(
                self.client, getattr(self.identities, role), dry_run=self.settings.dry_run
            )
        return self._signers[role]

    @property
    def publish_service(self) -> PublishService:
        return PublishService(self.signer("admin"), self.settings.contract)

    @property
    def contract_service(self) -> ContractService:
        return ContractService(
            self.signer("admin"),
            self.signer("merchant"),
            self.signer("user"),
            self.settings.contract,
        )

    @property
    def query_service(self) -> QueryService:
        return QueryService(self.client, page_limit=self.settings.sui.page_limit)

    def validate_configuration(self) -> None:
        """
        Validate that all required configuration is present.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.settings.sui.rpc_url:
            raise ConfigurationError("SUI_RPC_URL is required")
        # Decodes all three seeds, raising on bad material
        addresses = self.identities.addresses()
        logger.info("Configuration validation passed", **addresses)

    def planned_steps(self, flow: Optional[str] = None, skip_faucet: bool = False) -> List[str]:
        """Names of the steps ``run`` will execute, in order."""
        flow = flow or self.settings.contract.redeem_flow
        if flow not in FLOW_STEPS:
            raise ConfigurationError(f"Unknown redeem flow: {flow}")

        steps = []
        if self._faucet_enabled(skip_faucet):
            steps.append("faucet")
        steps.append("publish")
        steps.extend(FLOW_STEPS[flow])
        if not self.settings.dry_run:
            steps.append("queries")
        return steps

    def _faucet_enabled(self, skip_faucet: bool) -> bool:
        return bool(self.settings.sui.faucet_url) and not skip_faucet and not self.settings.dry_run

    def _run_step(self, result: ProcessingResult, name: str, func: Callable, *args) -> Any:
        """Run one step, recording it on ``result``; failures become WorkflowError."""
        step = StepResult(name=name, status=ProcessingStatus.IN_PROGRESS)
        result.steps.append(step)
        started = datetime.now()

        logger.info("Step started", step=name)
        try:
            value = func(*args)
        except Exception as e:
            step.status = ProcessingStatus.FAILED
            step.error_message = str(e)
            step.duration_seconds = (datetime.now() - started).total_seconds()
            completed = result.completed_steps
            logger.error(
                "Step failed",
                step=name,
                error=str(e),
                error_type=type(e).__name__,
                completed_steps=completed,
            )
            raise WorkflowError(
                f"Step '{name}' failed: {e}",
                step=name,
                completed_steps=completed,
                details={"error_type": type(e).__name__},
            ) from e

        step.status = ProcessingStatus.COMPLETED
        step.duration_seconds = (datetime.now() - started).total_seconds()
        if isinstance(value, TransactionResult):
            step.outputs = {"digest": value.digest, "created": value.created_object_ids}
        elif isinstance(value, PublishResult):
            step.outputs = value.model_dump()
        elif isinstance(value, str):
            step.outputs = {"value": value}
        logger.info("Step completed", step=name, duration_seconds=step.duration_seconds)
        return value

    # Steps

    def request_faucet_funds(self) -> Dict[str, Any]:
        receipts = {}
        for role in ("admin", "merchant"):
            address = self.signer(role).address
            receipts[role] = self.client.request_faucet_funds(address)
            self.reporter("requestSuiFromFaucet", receipts[role])
        return receipts

    def publish(self) -> PublishResult:
        service = self.publish_service
        package = service.publish()
        if service.last_transaction is not None:
            self.reporter("publishTxn", service.last_transaction.raw or service.last_transaction.model_dump())
        self.reporter("PublishResult", package.model_dump())
        return package

    def add_merchant(self, package: PublishResult) -> TransactionResult:
        txn = self.contract_service.add_merchant(package, self.signer("merchant").address)
        self.reporter("addMerchantTxn", txn.raw or txn.model_dump())
        return txn

    def airdrop(self, package: PublishResult) -> str:
        """Airdrop the NFT to the user; returns the new NFT object id."""
        service = self.contract_service
        txn = service.airdrop(package, self.signer("user").address)
        self.reporter("airdropTxn", txn.raw or txn.model_dump())
        return service.find_airdropped_nft_id(txn)

    def redeem(self, package: PublishResult) -> TransactionResult:
        txn = self.contract_service.redeem(package, self.signer("user").address)
        self.reporter("redeemTxn", txn.raw or txn.model_dump())
        return txn

    def redeem_request(self, package: PublishResult, nft_id: str) -> TransactionResult:
        txn = self.contract_service.redeem_request(
            package, nft_id, self.signer("merchant").address
        )
        self.reporter("redeemRequestTxn", txn.raw or txn.model_dump())
        return txn

    def redeem_confirm(self, package: PublishResult) -> TransactionResult:
        txn = self.contract_service.redeem_confirm(package, self.signer("user").address)
        self.reporter("redeemConfirmTxn", txn.raw or txn.model_dump())
        return txn

    def queries(self, package: PublishResult) -> QueryReport:
        return self.query_service.run_queries(
            package.global_object_id,
            user_address=self.signer("user").address,
            reporter=self.reporter,
        )

    def run(self, flow: Optional[str] = None, skip_faucet: bool = False) -> ProcessingResult:
        """
        Execute the complete pipeline.

        Args:
            flow: "two-phase" or "direct" (uses config default if None)
            skip_faucet: Do not request faucet funds even when configured

        Returns:
            ProcessingResult with one StepResult per executed step

        Raises:
            ConfigurationError: On missing or invalid configuration
            WorkflowError: When a step fails; carries the completed steps
        """
        flow = flow or self.settings.contract.redeem_flow
        steps = self.planned_steps(flow, skip_faucet)

        result = ProcessingResult(
            workflow_type=WorkflowType.RUN,
            status=ProcessingStatus.IN_PROGRESS,
            correlation_id=self.correlation_id,
            started_at=datetime.now(),
        )

        logger.info("Starting coffee NFT workflow", flow=flow, steps=steps)
        self.validate_configuration()

        try:
            if "faucet" in steps:
                self._run_step(result, "faucet", self.request_faucet_funds)

            package = self._run_step(result, "publish", self.publish)
            self._run_step(result, "add_merchant", self.add_merchant, package)
            nft_id = self._run_step(result, "airdrop", self.airdrop, package)

            if flow == "direct":
                self._run_step(result, "redeem", self.redeem, package)
            else:
                self._run_step(result, "redeem_request", self.redeem_request, package, nft_id)
                self._run_step(result, "redeem_confirm", self.redeem_confirm, package)

            if "queries" in steps:
                report = self._run_step(result, "queries", self.queries, package)
                result.data["nft_count"] = len(report.nft_objects)

        except WorkflowError as e:
            result.status = ProcessingStatus.FAILED
            result.error_message = str(e)
            result.error_details = {"step": e.step, "completed_steps": e.completed_steps}
            self._finish(result)
            e.details["result"] = result
            raise

        result.status = ProcessingStatus.COMPLETED
        result.data.update(
            {
                "flow": flow,
                "module_id": package.module_id,
                "global_object_id": package.global_object_id,
                "nft_id": nft_id,
            }
        )
        self._finish(result)

        logger.info(
            "Coffee NFT workflow completed",
            correlation_id=self.correlation_id,
            duration_seconds=result.duration_seconds,
        )
        return result

    def run_queries(self, global_object_id: str) -> QueryReport:
        """Run only the query phase against an existing deployment."""
        user_address = self.identities.user.address if self.settings.keys.user_seed else None
        return self.query_service.run_queries(
            global_object_id, user_address=user_address, reporter=self.reporter
        )

    def _finish(self, result: ProcessingResult) -> None:
        result.completed_at = datetime.now()
        if result.started_at:
            result.duration_seconds = (result.completed_at - result.started_at).total_seconds()
