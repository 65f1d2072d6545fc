"""Environment-derived settings for the deployment scripts."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

import requests
from dotenv import load_dotenv

from base_funcs import is_decimal_string, is_hex_digits, str_to_felt
from errors import MissingEnvironment

logger = logging.getLogger(__name__)

DEFAULT_CONFIGS_DIR = "configs"
DEFAULT_DEPLOYMENTS_DIR = "deployments"
DEFAULT_BUILD_DIR = "../cairo/target/dev"
DEFAULT_CONFIRMATION_TIMEOUT = 300.0
DEVNET_REQUEST_TIMEOUT = 10

# Networks backed by starknet-devnet, whose predeployed accounts can be used
LOCAL_NETWORKS = ("local", "devnet")

ENV_VARS = {
    "network": "NETWORK",
    "rpc_url": "STARKNET_RPC_URL",
    "account_address": "ACCOUNT_ADDRESS",
    "private_key": "PRIVATE_KEY",
    "beneficiary_address": "BENEFICIARY_ADDRESS",
    "chain_id": "STARKNET_CHAIN_ID",
    "confirmation_timeout": "CONFIRMATION_TIMEOUT",
    "configs_dir": "CONFIGS_DIR",
    "deployments_dir": "DEPLOYMENTS_DIR",
    "build_dir": "BUILD_DIR",
}


@dataclass(frozen=True)
class DeployerSettings:
    """Validated configuration passed to the resolver and chain client."""

    network: Optional[str] = None
    rpc_url: Optional[str] = None
    account_address: Optional[str] = None
    private_key: Optional[str] = None
    beneficiary_address: Optional[str] = None
    chain_id: Optional[int] = None
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    configs_dir: Path = Path(DEFAULT_CONFIGS_DIR)
    deployments_dir: Path = Path(DEFAULT_DEPLOYMENTS_DIR)
    build_dir: Path = Path(DEFAULT_BUILD_DIR)

    @property
    def owner_address(self) -> Optional[str]:
        return self.account_address

    @property
    def is_local(self) -> bool:
        return self.network is not None and self.network.lower() in LOCAL_NETWORKS

    def require(self, field: str):
        """
        Get a settings value that must be configured.

        Raises:
            MissingEnvironment: If the value is unset or empty
        """
        value = getattr(self, field)
        if value is None or value == "":
            raise MissingEnvironment(f"{ENV_VARS[field]} environment variable is not set")
        return value

    def require_hex(self, field: str) -> int:
        """
        Get a required hex settings value, such as a key or an address, as an int.

        Raises:
            MissingEnvironment: If the value is unset or not a hex number
        """
        value = self.require(field)
        digits = value[2:] if value[:2].lower() == "0x" else value
        if not is_hex_digits(digits):
            raise MissingEnvironment(f"{ENV_VARS[field]} must be a hex number")
        return int(digits, 16)


def parse_chain_id(value: str) -> int:
    """Parse a chain id given as hex, decimal or a short string such as SN_SEPOLIA."""
    if value[:2].lower() == "0x":
        if not is_hex_digits(value[2:]):
            raise MissingEnvironment(f"Invalid {ENV_VARS['chain_id']}: {value!r}")
        return int(value, 16)
    if is_decimal_string(value):
        return int(value)
    return str_to_felt(value)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DeployerSettings:
    """
    Build settings from environment variables.

    Args:
        environ: Variables to read (defaults to os.environ after loading .env)

    Returns:
        DeployerSettings
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    def get(field):
        value = environ.get(ENV_VARS[field])
        return value if value else None

    chain_id = get("chain_id")
    timeout = get("confirmation_timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except ValueError:
            raise MissingEnvironment(f"Invalid {ENV_VARS['confirmation_timeout']}: {timeout!r}") from None
        if timeout <= 0:
            raise MissingEnvironment(f"{ENV_VARS['confirmation_timeout']} must be positive, got {timeout}")

    settings = DeployerSettings(
        network=get("network"),
        rpc_url=get("rpc_url"),
        account_address=get("account_address"),
        private_key=get("private_key"),
        beneficiary_address=get("beneficiary_address"),
        chain_id=parse_chain_id(chain_id) if chain_id is not None else None,
        confirmation_timeout=timeout if timeout is not None else DEFAULT_CONFIRMATION_TIMEOUT,
        configs_dir=Path(get("configs_dir") or DEFAULT_CONFIGS_DIR),
        deployments_dir=Path(get("deployments_dir") or DEFAULT_DEPLOYMENTS_DIR),
        build_dir=Path(get("build_dir") or DEFAULT_BUILD_DIR),
    )
    for field in ("account_address", "private_key"):
        if getattr(settings, field) is not None:
            settings.require_hex(field)
    return settings


def fetch_devnet_account(settings: DeployerSettings, index: int = 0) -> DeployerSettings:
    """Fill missing account credentials from a devnet's predeployed accounts."""
    if settings.account_address and settings.private_key:
        return settings
    rpc_url = settings.require("rpc_url").rstrip("/")
    if rpc_url.endswith("/rpc"):
        rpc_url = rpc_url[: -len("/rpc")]
    deployed_accounts_url = f"{rpc_url}/predeployed_accounts"
    try:
        response = requests.get(deployed_accounts_url, timeout=DEVNET_REQUEST_TIMEOUT)
        response.raise_for_status()
        deployed_accounts = response.json()
        address = deployed_accounts[index]["address"]
        private_key = deployed_accounts[index]["private_key"]
    except (requests.RequestException, ValueError, LookupError) as err:
        raise MissingEnvironment(
            f"{ENV_VARS['account_address']}/{ENV_VARS['private_key']} not set and no predeployed account "
            f"available at {deployed_accounts_url}: {err}"
        ) from err
    logger.info(f"ℹ️  Using devnet predeployed account {address}")
    return replace(settings, account_address=address, private_key=private_key)
