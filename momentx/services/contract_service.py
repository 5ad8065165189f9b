"""Contract service: the coffee NFT entry function calls."""

from typing import Any, List

import structlog

from momentx.core.config import ContractConfig
from momentx.core.exceptions import ObjectFieldError
from momentx.core.models import MoveCall, PublishResult, TransactionResult
from momentx.data.signer import TransactionSigner

logger = structlog.get_logger(__name__)

NFT_STRUCT_NAME = "CoffeeNFT"


class ContractService:
    """
    Invoke the coffee NFT entry functions with the right identity.

    Admin adds merchants and airdrops, the user requests a redemption and the
    merchant confirms it (or redeems directly).
    """

    def __init__(
        self,
        admin: TransactionSigner,
        merchant: TransactionSigner,
        user: TransactionSigner,
        config: ContractConfig,
    ):
        self.admin = admin
        self.merchant = merchant
        self.user = user
        self.config = config

    def build_call(self, package: PublishResult, function: str, arguments: List[Any]) -> MoveCall:
        """Build a call on the coffee NFT module; the global object is always the first argument."""
        return MoveCall(
            package_object_id=package.module_id,
            module=self.config.module_name,
            function=function,
            type_arguments=[],
            arguments=[package.global_object_id, *arguments],
            gas_budget=self.config.gas_budget,
        )

    def _execute(self, signer: TransactionSigner, call: MoveCall) -> TransactionResult:
        logger.info("Calling entry function", target=call.target, signer=signer.address)
        return signer.execute_move_call(call)

    def add_merchant(self, package: PublishResult, merchant_address: str) -> TransactionResult:
        call = self.build_call(package, "add_merchant", [merchant_address])
        return self._execute(self.admin, call)

    def airdrop(self, package: PublishResult, user_address: str) -> TransactionResult:
        call = self.build_call(
            package,
            "airdrop",
            [
                user_address,
                self.config.nft_name,
                self.config.nft_description,
                self.config.image_url_initial,
            ],
        )
        return self._execute(self.admin, call)

    def redeem(self, package: PublishResult, user_address: str) -> TransactionResult:
        """Single-step redemption by the merchant."""
        call = self.build_call(package, "redeem", [user_address, self.config.image_url_redeemed])
        return self._execute(self.merchant, call)

    def redeem_request(
        self, package: PublishResult, nft_id: str, merchant_address: str
    ) -> TransactionResult:
        """User asks a merchant to redeem the NFT."""
        call = self.build_call(package, "redeem_request", [nft_id, merchant_address])
        return self._execute(self.user, call)

    def redeem_confirm(self, package: PublishResult, user_address: str) -> TransactionResult:
        """Merchant confirms a pending redemption."""
        call = self.build_call(
            package, "redeem_confirm", [user_address, self.config.image_url_redeemed]
        )
        return self._execute(self.merchant, call)

    def find_airdropped_nft_id(self, airdrop_txn: TransactionResult) -> str:
        """
        Return the id of the NFT object created by an airdrop.

        Prefers a ``newObject`` event typed ``...::<module>::CoffeeNFT``; falls
        back to the only created object when exactly one exists.
        """
        suffix = f"::{self.config.module_name}::{NFT_STRUCT_NAME}"
        for new_object in airdrop_txn.new_objects:
            if str(new_object.get("objectType", "")).endswith(suffix) and new_object.get("objectId"):
                return new_object["objectId"]

        if len(airdrop_txn.created_object_ids) == 1:
            return airdrop_txn.created_object_ids[0]

        raise ObjectFieldError(
            "Airdrop transaction did not create an identifiable NFT object",
            path=f"newObject.objectType=*{suffix}",
            details={
                "digest": airdrop_txn.digest,
                "created": airdrop_txn.created_object_ids,
            },
        )
