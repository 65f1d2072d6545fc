import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Protocol

import aiohttp
from starknet_py.common import create_casm_class, create_sierra_compiled_contract
from starknet_py.hash.casm_class_hash import compute_casm_class_hash
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.hash.sierra_class_hash import compute_sierra_class_hash
from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import Call
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair
from starknet_py.net.udc_deployer.deployer import Deployer
from starknet_py.transaction_errors import TransactionFailedError, TransactionNotReceivedError

from base_funcs import CASM_SUFFIX, SIERRA_SUFFIX, compile_calldata, read_artifact
from errors import ChainConfirmationTimeout, ChainSubmissionError
from settings import DEFAULT_CONFIRMATION_TIMEOUT, DeployerSettings

logger = logging.getLogger(__name__)

NETWORK_CHAIN_IDS = {
    "mainnet": StarknetChainId.MAINNET,
    "sepolia": StarknetChainId.SEPOLIA,
}


class Chain(Protocol):
    """Operations the deployment scripts need from a Starknet node."""

    async def declare(self, artifact: str) -> int: ...

    async def deploy(self, artifact: str, constructor_args: Dict[str, Any]) -> int: ...

    async def invoke(self, address, method: str, args) -> int: ...

    async def wait(self, tx_hash: int) -> Any: ...


def chain_id_for_network(settings: DeployerSettings):
    if settings.chain_id is not None:
        return settings.chain_id
    # starknet-devnet runs with the Sepolia chain id by default
    return NETWORK_CHAIN_IDS.get((settings.network or "").lower(), StarknetChainId.SEPOLIA)


def build_account(settings: DeployerSettings) -> Account:
    client = FullNodeClient(node_url=settings.require("rpc_url"))
    return Account(
        client=client,
        address=settings.require_hex("account_address"),
        key_pair=KeyPair.from_private_key(settings.require_hex("private_key")),
        chain=chain_id_for_network(settings),
    )


class StarknetChain:
    """
    Declares, deploys and invokes contracts with a starknet_py account.

    Every transaction is signed as V3 with an estimated fee and awaited until
    the node reports it accepted. Class hashes declared through this object
    are cached for the rest of the process.
    """

    def __init__(self, account: Account, build_dir, confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT):
        self.account = account
        self.build_dir = Path(build_dir)
        self.confirmation_timeout = confirmation_timeout
        self.declared: Dict[str, int] = {}
        self.udc_deployer = Deployer(account_address=account.address)

    @classmethod
    def from_settings(cls, settings: DeployerSettings) -> "StarknetChain":
        return cls(build_account(settings), settings.build_dir, settings.confirmation_timeout)

    async def is_declared(self, class_hash: int) -> bool:
        try:
            await self.account.client.get_class_by_hash(class_hash=class_hash)
        except ClientError:
            return False
        except aiohttp.ClientError as err:
            raise ChainSubmissionError(f"Checking class {hex(class_hash)} failed: {err}") from err
        return True

    async def declare(self, artifact: str) -> int:
        if artifact in self.declared:
            return self.declared[artifact]

        compiled_contract = read_artifact(self.build_dir, artifact, SIERRA_SUFFIX)
        compiled_contract_casm = read_artifact(self.build_dir, artifact, CASM_SUFFIX)
        class_hash = compute_sierra_class_hash(create_sierra_compiled_contract(compiled_contract))

        if await self.is_declared(class_hash):
            logger.info(f"✅ Class {artifact} already declared: {hex(class_hash)}, skipping")
        else:
            logger.info(f"ℹ️  Declaring {artifact}...")
            casm_class_hash = compute_casm_class_hash(create_casm_class(compiled_contract_casm))
            try:
                declare_transaction = await self.account.sign_declare_v3(
                    compiled_contract=compiled_contract,
                    compiled_class_hash=casm_class_hash,
                    auto_estimate=True,
                )
                resp = await self.account.client.declare(transaction=declare_transaction)
            except (ClientError, TransactionFailedError, aiohttp.ClientError) as err:
                raise ChainSubmissionError(f"Declaring {artifact} failed: {err}") from err
            logger.info(f"ℹ️  tx hash: {hex(resp.transaction_hash)}")
            await self.wait(resp.transaction_hash)
            class_hash = resp.class_hash
            logger.info(f"✅ Declared {artifact} class hash: {hex(class_hash)}")

        self.declared[artifact] = class_hash
        return class_hash

    async def execute(self, call: Call, description: str) -> int:
        try:
            resp = await self.account.execute_v3(calls=call, auto_estimate=True)
        except (ClientError, TransactionFailedError, aiohttp.ClientError) as err:
            raise ChainSubmissionError(f"{description} failed: {err}") from err
        logger.info(f"ℹ️  tx hash: {hex(resp.transaction_hash)}")
        return resp.transaction_hash

    async def deploy(self, artifact: str, constructor_args: Dict[str, Any]) -> int:
        class_hash = await self.declare(artifact)
        contract_deployment = self.udc_deployer.create_contract_deployment_raw(
            class_hash=class_hash, raw_calldata=compile_calldata(constructor_args)
        )
        tx_hash = await self.execute(contract_deployment.call, f"Deploying {artifact}")
        await self.wait(tx_hash)
        return contract_deployment.address

    async def invoke(self, address, method: str, args) -> int:
        to_addr = int(address, 16) if isinstance(address, str) else address
        call = Call(to_addr=to_addr, selector=get_selector_from_name(method), calldata=compile_calldata(args))
        return await self.execute(call, f"Invoking {method} on {hex(to_addr)}")

    async def wait(self, tx_hash: int):
        try:
            return await asyncio.wait_for(self.account.client.wait_for_tx(tx_hash), timeout=self.confirmation_timeout)
        except asyncio.TimeoutError as err:
            raise ChainConfirmationTimeout(
                f"Transaction {hex(tx_hash)} not confirmed within {self.confirmation_timeout}s"
            ) from err
        except TransactionNotReceivedError as err:
            raise ChainConfirmationTimeout(f"Transaction {hex(tx_hash)} not received: {err}") from err
        except (ClientError, TransactionFailedError, aiohttp.ClientError) as err:
            raise ChainSubmissionError(f"Transaction {hex(tx_hash)} failed: {err}") from err
