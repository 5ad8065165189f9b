"""Configure pytest fixtures and environment for MomentX tests."""

import pytest

from momentx.core import config as config_module

from factories import ADMIN_SEED, MERCHANT_SEED, MODULE_BYTES, USER_SEED

ENV_VARS = [
    "ENVIRONMENT",
    "DEBUG",
    "DRY_RUN",
    "REQUEST_TIMEOUT",
    "SUI_RPC_URL",
    "FAUCET_URL",
    "SUI_REQUEST_TYPE",
    "DYNAMIC_FIELDS_PAGE_LIMIT",
    "ADMIN_KEY_PAIR_SEED",
    "MERCHANT_KEY_PAIR_SEED",
    "USER_KEY_PAIR_SEED",
    "MODULE_PATH",
    "MODULE_NAME",
    "GAS_BUDGET",
    "REDEEM_FLOW",
    "NFT_NAME",
    "NFT_DESCRIPTION",
    "COFFEE_NFT_IMAGE_URL_INITIAL",
    "COFFEE_NFT_IMAGE_URL_REDEEMED",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without the developer's environment or .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "settings", None)
    yield


@pytest.fixture
def module_file(tmp_path):
    """A compiled module artifact on disk."""
    path = tmp_path / "coffee_nft.mv"
    path.write_bytes(MODULE_BYTES)
    return path


@pytest.fixture
def configured_env(monkeypatch, module_file):
    """Environment for a complete run against a fake node."""
    monkeypatch.setenv("SUI_RPC_URL", "http://node.test:9000")
    monkeypatch.setenv("ADMIN_KEY_PAIR_SEED", ADMIN_SEED)
    monkeypatch.setenv("MERCHANT_KEY_PAIR_SEED", MERCHANT_SEED)
    monkeypatch.setenv("USER_KEY_PAIR_SEED", USER_SEED)
    monkeypatch.setenv("MODULE_PATH", str(module_file))
    return module_file
