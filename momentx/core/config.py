"""
Configuration management for MomentX.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODULE_PATH = "packages/momentx/build/MomentX/bytecode_modules/coffee_nft.mv"

REDEEM_FLOWS = ("two-phase", "direct")


class SuiConfig(BaseSettings):
    """Sui full node configuration."""

    rpc_url: Optional[str] = Field(default=None, alias="SUI_RPC_URL")
    faucet_url: Optional[str] = Field(default=None, alias="FAUCET_URL")
    request_type: str = Field(default="WaitForLocalExecution", alias="SUI_REQUEST_TYPE")
    page_limit: Optional[int] = Field(default=None, alias="DYNAMIC_FIELDS_PAGE_LIMIT")

    @field_validator("faucet_url", mode="before")
    @classmethod
    def parse_faucet_url(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class KeyConfig(BaseSettings):
    """Hex-encoded Ed25519 secret material for the three identities."""

    admin_seed: Optional[str] = Field(default=None, alias="ADMIN_KEY_PAIR_SEED")
    merchant_seed: Optional[str] = Field(default=None, alias="MERCHANT_KEY_PAIR_SEED")
    user_seed: Optional[str] = Field(default=None, alias="USER_KEY_PAIR_SEED")

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class ContractConfig(BaseSettings):
    """Coffee NFT contract and demo data configuration."""

    module_path: str = Field(default=DEFAULT_MODULE_PATH, alias="MODULE_PATH")
    module_name: str = Field(default="coffee_nft", alias="MODULE_NAME")
    gas_budget: int = Field(default=100000, alias="GAS_BUDGET")
    redeem_flow: str = Field(default="two-phase", alias="REDEEM_FLOW")

    nft_name: str = Field(default="coffee", alias="NFT_NAME")
    nft_description: str = Field(
        default="coffee NFT to redeem a cup of coffee", alias="NFT_DESCRIPTION"
    )
    image_url_initial: str = Field(
        default="https://coffee-nft/image/url/initial", alias="COFFEE_NFT_IMAGE_URL_INITIAL"
    )
    image_url_redeemed: str = Field(
        default="https://coffee-nft/image/url/redeemed", alias="COFFEE_NFT_IMAGE_URL_REDEEMED"
    )

    @field_validator("redeem_flow", mode="before")
    @classmethod
    def parse_redeem_flow(cls, v):
        if isinstance(v, str):
            v = v.strip().lower().replace("_", "-")
        if v not in REDEEM_FLOWS:
            raise ValueError(f"REDEEM_FLOW must be one of {', '.join(REDEEM_FLOWS)}")
        return v

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(default="devnet", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    # Component configurations
    sui: SuiConfig = Field(default_factory=SuiConfig)
    keys: KeyConfig = Field(default_factory=KeyConfig)
    contract: ContractConfig = Field(default_factory=ContractConfig)

    request_timeout: int = Field(default=30, alias="REQUEST_TIMEOUT")

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    @field_validator("dry_run", mode="before")
    @classmethod
    def parse_dry_run(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    def model_post_init(self, __context) -> None:
        # Re-read sub-configurations from the environment unless passed in
        if "sui" not in self.model_fields_set:
            self.sui = SuiConfig()
        if "keys" not in self.model_fields_set:
            self.keys = KeyConfig()
        if "contract" not in self.model_fields_set:
            self.contract = ContractConfig()

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        # Sub-configurations read os.environ only
        load_dotenv(dotenv_path=".env", override=False)
        settings = Settings()
    return settings


def validate_required_settings(for_workflow: str = "run", config: Optional[Settings] = None) -> List[str]:
    """
    Validate that required settings are present for specific workflows.

    Args:
        for_workflow: Workflow name ("run", "publish", "query" or "minimal")
        config: Settings to check; the global settings when omitted

    Returns:
        List of missing required settings
    """
    missing = []
    try:
        config = config or get_settings()

        if for_workflow != "minimal" and not config.sui.rpc_url:
            missing.append("SUI_RPC_URL")

        if for_workflow == "run":
            if not config.keys.admin_seed:
                missing.append("ADMIN_KEY_PAIR_SEED")
            if not config.keys.merchant_seed:
                missing.append("MERCHANT_KEY_PAIR_SEED")
            if not config.keys.user_seed:
                missing.append("USER_KEY_PAIR_SEED")

        elif for_workflow == "publish":
            if not config.keys.admin_seed:
                missing.append("ADMIN_KEY_PAIR_SEED")

    except Exception as e:
        missing.append(f"Configuration error: {e}")

    return missing


def configuration_status(config: Optional[Settings] = None) -> Dict[str, str]:
    """Return a per-setting status map for the configuration summary."""
    config = config or get_settings()
    return {
        "rpc_url": "configured" if config.sui.rpc_url else "missing",
        "faucet": "configured" if config.sui.faucet_url else "disabled",
        "admin_key": "configured" if config.keys.admin_seed else "missing",
        "merchant_key": "configured" if config.keys.merchant_seed else "missing",
        "user_key": "configured" if config.keys.user_seed else "missing",
    }


def print_configuration_summary():
    """Print a summary of the current configuration for debugging."""
    try:
        config = get_settings()
        status = configuration_status(config)
        print("=== MomentX Configuration Summary ===")
        print(f"Environment: {config.environment}")
        print(f"Debug Mode: {config.debug}")
        print(f"Dry Run: {config.dry_run}")
        print(f"Request Timeout: {config.request_timeout}s")
        print()
        print(f"Sui RPC: {config.sui.rpc_url or '✗'}")
        print(f"Faucet: {config.sui.faucet_url or '✗ (skipped)'}")
        print(f"Request Type: {config.sui.request_type}")
        print(f"Admin Key: {'✓' if status['admin_key'] == 'configured' else '✗'}")
        print(f"Merchant Key: {'✓' if status['merchant_key'] == 'configured' else '✗'}")
        print(f"User Key: {'✓' if status['user_key'] == 'configured' else '✗'}")
        print()
        print("Contract:")
        print(f"  Module Path: {config.contract.module_path}")
        print(f"  Module Name: {config.contract.module_name}")
        print(f"  Gas Budget: {config.contract.gas_budget}")
        print(f"  Redeem Flow: {config.contract.redeem_flow}")
        print("=" * 37)
    except Exception as e:
        print(f"Error loading configuration: {e}")
