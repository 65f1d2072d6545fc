import asyncio
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from chain import Chain, StarknetChain
from deployments import get_deployed_address
from errors import ContractNotDeployed, DeployError
from settings import fetch_devnet_account, load_settings

logger = logging.getLogger(__name__)

# Deployed contracts used when no hook address is given
DEFAULT_HOOK_CONTRACT = "merkle_tree_hook"
REQUIRED_HOOK_CONTRACT = "protocol_fee"


async def update_hooks(chain: Chain, mailbox_address: str, default_hook: Optional[str], required_hook: Optional[str]) -> List[int]:
    """Point the mailbox at new default and required hooks, skipping hooks that are not set."""
    tx_hashes = []
    for method, hook in (("set_default_hook", default_hook), ("set_required_hook", required_hook)):
        if hook is None:
            logger.info(f"ℹ️  No hook given for {method}, skipping")
            continue
        logger.info(f"🧩 Calling {method} with {hook}..")
        tx_hash = await chain.invoke(mailbox_address, method, [hook])
        await chain.wait(tx_hash)
        logger.info(f"⚡️ Transaction hash: {hex(tx_hash)}")
        tx_hashes.append(tx_hash)
    return tx_hashes


def hook_address(network: str, given: Optional[str], contract_name: str, deployments_dir) -> Optional[str]:
    if given:
        return given
    try:
        return get_deployed_address(network, contract_name, deployments_dir)
    except ContractNotDeployed:
        return None


async def main(argv=None):
    argv = sys.argv if argv is None else argv
    settings = load_settings()
    network_arg = argv[1] if len(argv) > 1 else settings.require("network")
    settings = replace(settings, network=network_arg)

    mailbox_address = get_deployed_address(network_arg, "mailbox", settings.deployments_dir)
    default_hook = hook_address(
        network_arg, argv[2] if len(argv) > 2 else os.environ.get("DEFAULT_HOOK"), DEFAULT_HOOK_CONTRACT, settings.deployments_dir
    )
    required_hook = hook_address(
        network_arg, argv[3] if len(argv) > 3 else os.environ.get("REQUIRED_HOOK"), REQUIRED_HOOK_CONTRACT, settings.deployments_dir
    )

    if settings.is_local:
        settings = fetch_devnet_account(settings)
    chain = StarknetChain.from_settings(settings)
    await update_hooks(chain, mailbox_address, default_hook, required_hook)
    updated = [hook for hook in (default_hook, required_hook) if hook is not None]
    if updated:
        logger.info(f"🧩 Hooks updated successfully with {' & '.join(updated)}")
    else:
        logger.info("ℹ️  No hooks to update")


def run():
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(main())
    except DeployError as err:
        logger.error(f"⛔ Error updating hooks: {err}")
        sys.exit(1)


if __name__ == "__main__":
    run()
