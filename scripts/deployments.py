"""Reading and writing of per-network deployment files."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from errors import ContractNotDeployed, DeploymentsNotFound, PersistenceError

logger = logging.getLogger(__name__)

DEPLOYMENTS_FILE = "deployments.json"


def get_deployments_path(network: str, deployments_dir=Path("deployments")) -> Path:
    return Path(deployments_dir) / network / DEPLOYMENTS_FILE


def save_deployments(network: str, deployed: Dict[str, str], deployments_dir=Path("deployments")) -> Path:
    """
    Write deployed addresses to deployments/<network>/deployments.json.

    The network directory is created when missing and any previous file is
    overwritten.

    Raises:
        PersistenceError: If the directory or file cannot be written
    """
    deployments_path = get_deployments_path(network, deployments_dir)
    try:
        deployments_path.parent.mkdir(parents=True, exist_ok=True)
        deployments_path.write_text(json.dumps(deployed, indent=2))
    except OSError as err:
        raise PersistenceError(f"Could not write deployments to {deployments_path}: {err}") from err
    return deployments_path


def find_address(obj: Any, key: str) -> Optional[str]:
    """Find a string value for key, searching nested groups depth-first."""
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, str) and value:
            return value
        children = obj.values()
    elif isinstance(obj, list):
        children = obj
    else:
        return None
    for child in children:
        if isinstance(child, (dict, list)):
            found = find_address(child, key)
            if found:
                return found
    return None


def get_deployed_address(network: str, contract_name: str, deployments_dir=Path("deployments")) -> str:
    """
    Get the address of a deployed contract.

    Args:
        network: Network name the deployments were saved under
        contract_name: Contract name, possibly nested inside a group
        deployments_dir: Root deployments directory

    Returns:
        Address string as saved

    Raises:
        DeploymentsNotFound: If the network has no deployments file
        ContractNotDeployed: If no address is saved for the contract
    """
    deployments_path = get_deployments_path(network, deployments_dir)
    try:
        try:
            deployments = json.loads(deployments_path.read_text())
        except FileNotFoundError as err:
            raise DeploymentsNotFound(f"No deployments file for network {network} at {deployments_path}") from err

        address = find_address(deployments, contract_name)
        if not address:
            raise ContractNotDeployed(
                f"Invalid or missing address for contract {contract_name} in {DEPLOYMENTS_FILE} for network {network}"
            )
        return address
    except (DeploymentsNotFound, ContractNotDeployed, json.JSONDecodeError) as err:
        logger.error(f"⛔ Error reading deployments file for network {network}: {err}")
        raise
