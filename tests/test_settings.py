from pathlib import Path

import pytest
import responses

from base_funcs import str_to_felt
from errors import MissingEnvironment
from settings import DEFAULT_CONFIRMATION_TIMEOUT, DeployerSettings, fetch_devnet_account, load_settings


def test_load_settings_from_environ():
    settings = load_settings({
        "NETWORK": "sepolia",
        "STARKNET_RPC_URL": "https://rpc.example",
        "ACCOUNT_ADDRESS": "0x123",
        "PRIVATE_KEY": "0xabc",
        "BENEFICIARY_ADDRESS": "0x456",
        "CONFIRMATION_TIMEOUT": "60",
        "DEPLOYMENTS_DIR": "out",
    })

    assert settings.network == "sepolia"
    assert settings.owner_address == "0x123"
    assert settings.beneficiary_address == "0x456"
    assert settings.confirmation_timeout == 60.0
    assert settings.deployments_dir == Path("out")
    assert settings.configs_dir == Path("configs")
    assert settings.chain_id is None


def test_load_settings_defaults():
    settings = load_settings({"BENEFICIARY_ADDRESS": ""})

    assert settings.network is None
    assert settings.beneficiary_address is None
    assert settings.confirmation_timeout == DEFAULT_CONFIRMATION_TIMEOUT


@pytest.mark.parametrize("value, expected", [
    ("0x534e5f5345504f4c4941", 0x534E5F5345504F4C4941),
    ("393402133025997798000961", 393402133025997798000961),
    ("SN_SEPOLIA", str_to_felt("SN_SEPOLIA")),
    ("²", str_to_felt("²")),
])
def test_chain_id_formats(value, expected):
    assert load_settings({"STARKNET_CHAIN_ID": value}).chain_id == expected


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_invalid_confirmation_timeout(value):
    with pytest.raises(MissingEnvironment, match="CONFIRMATION_TIMEOUT"):
        load_settings({"CONFIRMATION_TIMEOUT": value})


def test_require_names_environment_variable():
    with pytest.raises(MissingEnvironment, match="PRIVATE_KEY environment variable is not set"):
        DeployerSettings().require("private_key")
    assert DeployerSettings(network="sepolia").require("network") == "sepolia"


@pytest.mark.parametrize("variable", ["PRIVATE_KEY", "ACCOUNT_ADDRESS"])
@pytest.mark.parametrize("value", ["nothex", "0x", "0x1_0", "-1"])
def test_load_settings_rejects_non_hex_credentials(variable, value):
    with pytest.raises(MissingEnvironment, match=variable):
        load_settings({variable: value})


def test_require_hex():
    assert DeployerSettings(private_key="0xabc").require_hex("private_key") == 0xABC
    assert DeployerSettings(private_key="abc").require_hex("private_key") == 0xABC
    with pytest.raises(MissingEnvironment, match="PRIVATE_KEY must be a hex number"):
        DeployerSettings(private_key="nothex").require_hex("private_key")


def test_is_local():
    assert DeployerSettings(network="Local").is_local
    assert DeployerSettings(network="devnet").is_local
    assert not DeployerSettings(network="sepolia").is_local
    assert not DeployerSettings().is_local


@responses.activate
def test_fetch_devnet_account():
    responses.add(
        responses.GET,
        "http://127.0.0.1:5050/predeployed_accounts",
        json=[{"address": "0x64b4", "private_key": "0x71d7", "public_key": "0x39d9", "initial_balance": "1000"}],
        status=200,
    )
    settings = DeployerSettings(network="local", rpc_url="http://127.0.0.1:5050/rpc")

    settings = fetch_devnet_account(settings)

    assert settings.account_address == "0x64b4"
    assert settings.private_key == "0x71d7"


def test_fetch_devnet_account_keeps_configured_account():
    settings = DeployerSettings(network="local", account_address="0x1", private_key="0x2")
    assert fetch_devnet_account(settings) is settings


@responses.activate
def test_fetch_devnet_account_unavailable():
    responses.add(responses.GET, "http://127.0.0.1:5050/predeployed_accounts", status=500)

    with pytest.raises(MissingEnvironment, match="predeployed"):
        fetch_devnet_account(DeployerSettings(network="local", rpc_url="http://127.0.0.1:5050"))


def test_fetch_devnet_account_requires_rpc_url():
    with pytest.raises(MissingEnvironment, match="STARKNET_RPC_URL"):
        fetch_devnet_account(DeployerSettings(network="local"))
