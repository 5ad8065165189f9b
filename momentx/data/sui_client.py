"""
Sui JSON-RPC client with retry on idempotent queries.

Provides transaction building, execution, object queries and faucet access
over a single long-lived HTTP client.
"""

import itertools
from typing import Any, Dict, List, Optional

import httpx
import structlog
from httpx import HTTPStatusError, TimeoutException, TransportError

from momentx.core.config import SuiConfig
from momentx.core.exceptions import (
    ConfigurationError,
    FaucetError,
    ObjectFieldError,
    RPCError,
    SuiRPCError,
    SuiTransportError,
)
from momentx.core.models import DynamicFieldPage, MoveCall, TransactionResult
from momentx.utils.reliability import with_retry

logger = structlog.get_logger(__name__)

JSONRPC_VERSION = "2.0"


class SuiClient:
    """
    Sui full node JSON-RPC client.

    Mutating calls go through ``_make_request`` once; read-only queries go
    through ``_query`` which retries ``SuiTransportError`` only.
    """

    def __init__(
        self,
        config: SuiConfig,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        if not config.rpc_url:
            raise ConfigurationError("SUI_RPC_URL is required")

        self.config = config
        self.rpc_url = config.rpc_url
        self.faucet_url = config.faucet_url.rstrip("/") if config.faucet_url else None

        self.client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
        )
        self._ids = itertools.count(1)

        logger.info("Sui client initialized", rpc_url=self.rpc_url, faucet=bool(self.faucet_url))

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _make_request(self, method: str, params: List[Any]) -> Any:
        """
        Send one JSON-RPC request to the node.

        Args:
            method: JSON-RPC method name
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            SuiTransportError: On connection failures, timeouts and 5xx answers
            SuiRPCError: On other HTTP errors and invalid JSON
            RPCError: When the node answers with an error object
        """
        payload = {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            logger.debug("Making Sui RPC request", method=method)
            response = self.client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()

        except HTTPStatusError as e:
            logger.error(
                "Sui RPC HTTP error",
                method=method,
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            error_class = SuiTransportError if e.response.status_code >= 500 else SuiRPCError
            raise error_class(
                f"Sui RPC HTTP error: {e.response.status_code} - {e.response.text[:200]}",
                details={"status_code": e.response.status_code, "method": method},
            )

        except TimeoutException as e:
            logger.error("Sui RPC timeout", method=method, error=str(e))
            raise SuiTransportError(f"Sui RPC timeout: {e}", details={"method": method})

        except TransportError as e:
            logger.error("Sui RPC transport error", method=method, error=str(e))
            raise SuiTransportError(f"Sui RPC transport error: {e}", details={"method": method})

        except ValueError as e:
            raise SuiRPCError(f"Sui RPC returned invalid JSON: {e}", details={"method": method})

        if body.get("error"):
            error = body["error"]
            logger.error("Sui RPC error", method=method, code=error.get("code"), error=error.get("message"))
            raise RPCError(
                f"{method} failed: {error.get('message', 'unknown error')}",
                code=error.get("code"),
                method=method,
                details={"data": error.get("data")},
            )

        return body.get("result")

    @with_retry(max_attempts=3, retry_exceptions=(SuiTransportError,), reraise=True)
    def _query(self, method: str, params: List[Any]) -> Any:
        return self._make_request(method, params)

    # Transaction building and execution

    def build_publish(
        self, sender: str, compiled_modules: List[str], gas_budget: int, gas: Optional[str] = None
    ) -> str:
        """Ask the node to build a publish transaction; returns base64 tx bytes."""
        result = self._make_request("sui_publish", [sender, compiled_modules, gas, gas_budget])
        return result["txBytes"]

    def build_move_call(self, signer: str, call: MoveCall, gas: Optional[str] = None) -> str:
        """Ask the node to build a move call transaction; returns base64 tx bytes."""
        result = self._make_request(
            "sui_moveCall",
            [
                signer,
                call.package_object_id,
                call.module,
                call.function,
                list(call.type_arguments),
                list(call.arguments),
                gas,
                call.gas_budget,
            ],
        )
        return result["txBytes"]

    def execute_transaction(
        self, tx_bytes: str, signature: str, request_type: Optional[str] = None
    ) -> TransactionResult:
        """Submit signed transaction bytes and wait according to ``request_type``."""
        result = self._make_request(
            "sui_executeTransactionSerializedSig",
            [tx_bytes, signature, request_type or self.config.request_type],
        )
        return parse_transaction_response(result or {})

    # Queries

    def get_object(self, object_id: str) -> Dict[str, Any]:
        return self._query("sui_getObject", [object_id])

    def get_dynamic_fields(
        self, parent_object_id: str, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> DynamicFieldPage:
        """
        Fetch one page of dynamic fields of ``parent_object_id``.

        Raises:
            SuiRPCError: When the result is not an object
            ObjectFieldError: When ``data`` or ``nextCursor`` is absent; only an
                explicit null cursor ends pagination
        """
        result = self._query("sui_getDynamicFields", [parent_object_id, cursor, limit])
        if not isinstance(result, dict):
            raise SuiRPCError(
                f"sui_getDynamicFields returned {type(result).__name__}, expected an object",
                details={"method": "sui_getDynamicFields", "parent": parent_object_id},
            )

        for key in ("data", "nextCursor"):
            if key not in result:
                raise ObjectFieldError(
                    f"sui_getDynamicFields result has no '{key}' field",
                    path=key,
                    details={"parent": parent_object_id, "cursor": cursor},
                )

        return DynamicFieldPage(
            data=result["data"] or [],
            next_cursor=result["nextCursor"],
            raw=result,
        )

    def get_dynamic_field_object(self, parent_object_id: str, name: str) -> Dict[str, Any]:
        return self._query("sui_getDynamicFieldObject", [parent_object_id, name])

    def get_objects_owned_by_address(self, address: str) -> List[Dict[str, Any]]:
        return self._query("sui_getObjectsOwnedByAddress", [address]) or []

    # Faucet

    def request_faucet_funds(self, address: str) -> Dict[str, Any]:
        """
        Request gas coins from the faucet for ``address``.

        Raises:
            ConfigurationError: When no faucet URL is configured
            FaucetError: When the faucet rejects the request
        """
        if not self.faucet_url:
            raise ConfigurationError("FAUCET_URL is not configured")

        try:
            response = self.client.post(
                f"{self.faucet_url}/gas",
                json={"FixedAmountRequest": {"recipient": address}},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error("Faucet request failed", address=address, error=str(e))
            raise FaucetError(f"Faucet request failed: {e}", details={"address": address})

        if body.get("error"):
            raise FaucetError(f"Faucet error: {body['error']}", details={"address": address})

        logger.info(
            "Faucet funds received",
            address=address,
            coins=len(body.get("transferred_gas_objects") or body.get("transferredGasObjects") or []),
        )
        return body

    def health_check(self) -> Dict[str, Any]:
        """Check node connectivity."""
        try:
            result = self._make_request("rpc.discover", [])
            info = (result or {}).get("info", {}) if isinstance(result, dict) else {}
            return {
                "status": "healthy",
                "rpc_url": self.rpc_url,
                "version": info.get("version", "unknown"),
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "rpc_url": self.rpc_url,
                "error": str(e),
                "error_type": type(e).__name__,
            }


def _unwrap_effects(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return the TransactionEffects dict from an execution response."""
    body = response.get("EffectsCert", response)
    effects = body.get("effects") or {}
    if isinstance(effects.get("effects"), dict):
        effects = effects["effects"]
    return effects


def parse_transaction_response(response: Dict[str, Any]) -> TransactionResult:
    """Parse an execution response into a TransactionResult."""
    effects = _unwrap_effects(response)
    body = response.get("EffectsCert", response)

    status = (effects.get("status") or {}).get("status", "success")
    digest = effects.get("transactionDigest") or (body.get("certificate") or {}).get(
        "transactionDigest"
    )

    events = list(effects.get("events") or [])
    new_objects = [e["newObject"] for e in events if isinstance(e, dict) and "newObject" in e]

    created = []
    for entry in effects.get("created") or []:
        reference = entry.get("reference") or {}
        object_id = reference.get("objectId") or entry.get("objectId")
        if object_id:
            created.append(object_id)

    return TransactionResult(
        digest=digest,
        status=status,
        events=events,
        new_objects=new_objects,
        created_object_ids=created,
        raw=response,
    )


def create_sui_client(config: SuiConfig, timeout: float = 30.0) -> SuiClient:
    """Factory function to create a Sui client."""
    return SuiClient(config, timeout=timeout)
