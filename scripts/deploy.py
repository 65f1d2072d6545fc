import asyncio
import logging
import sys
from dataclasses import replace
from typing import Dict

from base_funcs import felt_to_string, normalize_address
from chain import Chain, StarknetChain, chain_id_for_network
from deploy_config import DeploymentConfig, load_config
from deployments import save_deployments
from errors import DeployError
from resolver import PlaceholderResolver
from settings import fetch_devnet_account, load_settings

logger = logging.getLogger(__name__)


async def deploy_contracts(config: DeploymentConfig, resolver: PlaceholderResolver, chain: Chain) -> Dict[str, str]:
    """
    Deploy every contract of a config in deployment order.

    Each contract's constructor is resolved against the addresses deployed
    before it. The first failure aborts the walk.

    Returns:
        Contract name to canonical address, in deployment order
    """
    deployed_contracts: Dict[str, str] = {}

    for contract_name in config.deployment_order:
        contract = config.contracts[contract_name]
        logger.info(f"ℹ️  Deploying contract {contract_name}...")
        constructor_args = await resolver.resolve(contract.constructor, deployed_contracts)
        address = normalize_address(await chain.deploy(contract.name, constructor_args))
        deployed_contracts[contract_name] = address
        logger.info(f"✅ Contract {contract_name} deployed at address: {address}")

    return deployed_contracts


async def main(argv=None):
    argv = sys.argv if argv is None else argv
    settings = load_settings()
    network_arg = argv[1] if len(argv) > 1 else settings.require("network")
    settings = replace(settings, network=network_arg)

    config = load_config(network_arg, settings.configs_dir)

    if settings.is_local:
        settings = fetch_devnet_account(settings)
    chain = StarknetChain.from_settings(settings)
    chain_id = chain_id_for_network(settings)
    try:
        chain_name = felt_to_string(chain_id)
    except UnicodeDecodeError:
        chain_name = hex(chain_id)
    logger.info(f"ℹ️  Connected to chain {chain_name} with RPC {settings.rpc_url}")
    logger.info(f"ℹ️  Using account {settings.account_address} as deployer")

    resolver = PlaceholderResolver(settings, chain)
    deployed_contracts = await deploy_contracts(config, resolver, chain)
    logger.info(f"✅ All contracts deployed successfully: {deployed_contracts}")

    # TODO: save after each deployment so a failed run keeps the addresses it already deployed
    deployments_path = save_deployments(network_arg, deployed_contracts, settings.deployments_dir)
    logger.info(f"✅ Deployed contracts saved to {deployments_path}")
    return deployed_contracts


def run():
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(main())
    except DeployError as err:
        logger.error(f"⛔ Deployment failed: {err}")
        sys.exit(1)


if __name__ == "__main__":
    run()
