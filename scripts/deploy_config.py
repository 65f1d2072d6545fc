"""Loading and decoding of per-network deployment configuration files."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from errors import ConfigNotFound, ConfigParseError, MissingEnvironment

SIGIL = "$"
OWNER_TOKEN = "$OWNER_ADDRESS"
BENEFICIARY_TOKEN = "$BENEFICIARY_ADDRESS"
CLASS_HASH_PREFIX = "$CLASS_HASH:"


@dataclass(frozen=True)
class LiteralValue:
    """Value passed to the constructor unchanged."""

    value: Any


@dataclass(frozen=True)
class OwnerRef:
    """Address of the deploying account."""


@dataclass(frozen=True)
class BeneficiaryRef:
    """Configured beneficiary address."""


@dataclass(frozen=True)
class ClassHashRef:
    """Class hash of an artifact, declared on demand."""

    artifact: str


@dataclass(frozen=True)
class DeployedRef:
    """Address of a contract deployed earlier in the same run."""

    contract: str


ArgValue = Union[LiteralValue, OwnerRef, BeneficiaryRef, ClassHashRef, DeployedRef]


@dataclass(frozen=True)
class ArgSpec:
    type: str
    value: ArgValue


@dataclass(frozen=True)
class ContractSpec:
    name: str  # artifact name of the compiled class
    constructor: Dict[str, ArgSpec]


@dataclass(frozen=True)
class DeploymentConfig:
    contracts: Dict[str, ContractSpec]
    deployment_order: List[str]


def parse_arg_value(raw: Any) -> ArgValue:
    """
    Decode a constructor argument value.

    Strings starting with $ are placeholders: $OWNER_ADDRESS,
    $BENEFICIARY_ADDRESS, $CLASS_HASH:<artifact> or $<ContractName>.
    Anything else is a literal.
    """
    if not isinstance(raw, str) or not raw.startswith(SIGIL):
        return LiteralValue(raw)
    if raw == OWNER_TOKEN:
        return OwnerRef()
    if raw == BENEFICIARY_TOKEN:
        return BeneficiaryRef()
    if raw.startswith(CLASS_HASH_PREFIX):
        artifact = raw[len(CLASS_HASH_PREFIX):]
        if not artifact:
            raise ConfigParseError(f"Placeholder {raw!r} does not name an artifact")
        return ClassHashRef(artifact)
    contract = raw[len(SIGIL):]
    if not contract:
        raise ConfigParseError("Placeholder '$' does not name a contract")
    return DeployedRef(contract)


def _is_valid_literal(value: Any) -> bool:
    if isinstance(value, list):
        return all(isinstance(item, (str, int)) for item in value)
    return isinstance(value, (str, int))


def parse_contract_spec(key: str, data: Any) -> ContractSpec:
    if not isinstance(data, dict):
        raise ConfigParseError(f"Contract {key} must be an object")
    name = data.get("name", key)
    if not isinstance(name, str) or not name:
        raise ConfigParseError(f"Contract {key} has an invalid name: {name!r}")
    constructor_data = data.get("constructor", {})
    if not isinstance(constructor_data, dict):
        raise ConfigParseError(f"Constructor of contract {key} must be an object")

    constructor = {}
    for param, arg in constructor_data.items():
        if not isinstance(arg, dict) or "value" not in arg:
            raise ConfigParseError(f"Constructor argument {key}.{param} must be an object with a value")
        if not _is_valid_literal(arg["value"]):
            raise ConfigParseError(f"Constructor argument {key}.{param} has an unsupported value: {arg['value']!r}")
        constructor[param] = ArgSpec(type=str(arg.get("type", "")), value=parse_arg_value(arg["value"]))
    return ContractSpec(name=name, constructor=constructor)


def parse_config(data: Any) -> DeploymentConfig:
    """
    Validate a decoded configuration document.

    Raises:
        ConfigParseError: If the document does not describe a deployment
    """
    if not isinstance(data, dict):
        raise ConfigParseError("Configuration must be a JSON object")
    contracts_data = data.get("contracts")
    order = data.get("deploymentOrder")
    if not isinstance(contracts_data, dict):
        raise ConfigParseError("Configuration is missing a 'contracts' object")
    if not isinstance(order, list) or not all(isinstance(name, str) for name in order):
        raise ConfigParseError("Configuration is missing a 'deploymentOrder' list of contract names")

    contracts = {key: parse_contract_spec(key, value) for key, value in contracts_data.items()}
    missing = [name for name in order if name not in contracts]
    if missing:
        raise ConfigParseError(f"deploymentOrder references undefined contracts: {', '.join(missing)}")
    duplicates = sorted({name for name in order if order.count(name) > 1})
    if duplicates:
        raise ConfigParseError(f"deploymentOrder lists contracts more than once: {', '.join(duplicates)}")
    return DeploymentConfig(contracts=contracts, deployment_order=list(order))


def get_config_path(network: str, configs_dir=Path("configs")) -> Path:
    if not network:
        raise MissingEnvironment("NETWORK environment variable is not set")

    config_path = Path(configs_dir) / f"{network.lower()}.json"
    if not config_path.exists():
        raise ConfigNotFound(f"Config file not found for network {network} at {config_path}")
    return config_path


def load_config(network: str, configs_dir=Path("configs")) -> DeploymentConfig:
    """
    Load the deployment configuration of a network.

    Args:
        network: Network name, e.g. "sepolia"
        configs_dir: Directory holding <network>.json files

    Returns:
        DeploymentConfig

    Raises:
        ConfigNotFound: If the network has no configuration file
        ConfigParseError: If the file is not a valid configuration
    """
    config_path = get_config_path(network, configs_dir)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise ConfigParseError(f"Invalid JSON in {config_path}: {err}") from err
    except OSError as err:
        raise ConfigParseError(f"Could not read {config_path}: {err}") from err
    try:
        return parse_config(data)
    except ConfigParseError as err:
        raise ConfigParseError(f"{config_path}: {err}") from err
