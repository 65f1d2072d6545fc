from typing import Any, Dict, Mapping

from base_funcs import normalize_address
from chain import Chain
from deploy_config import ArgSpec, ArgValue, BeneficiaryRef, ClassHashRef, DeployedRef, LiteralValue, OwnerRef
from errors import UnresolvedDependency
from settings import DeployerSettings


class PlaceholderResolver:
    """Turns a contract's constructor spec into literal arguments."""

    def __init__(self, settings: DeployerSettings, chain: Chain):
        self.settings = settings
        self.chain = chain

    async def resolve(self, constructor: Mapping[str, ArgSpec], deployed: Mapping[str, str]) -> Dict[str, Any]:
        """
        Substitute every placeholder of a constructor.

        Args:
            constructor: Parameter name to argument spec, in calldata order
            deployed: Addresses of the contracts deployed so far

        Returns:
            Parameter name to literal value, in the same order

        Raises:
            MissingEnvironment: If an owner/beneficiary address is not configured
            UnresolvedDependency: If a referenced contract is not deployed yet
        """
        resolved = {}
        for param, arg in constructor.items():
            resolved[param] = await self.resolve_value(param, arg.value, deployed)
        return resolved

    async def resolve_value(self, param: str, value: ArgValue, deployed: Mapping[str, str]):
        if isinstance(value, LiteralValue):
            return value.value
        if isinstance(value, OwnerRef):
            return self.settings.require("account_address")
        if isinstance(value, BeneficiaryRef):
            return self.settings.require("beneficiary_address")
        if isinstance(value, ClassHashRef):
            class_hash = await self.chain.declare(value.artifact)
            return normalize_address(class_hash)
        if isinstance(value, DeployedRef):
            if value.contract not in deployed:
                raise UnresolvedDependency(f"Contract {value.contract} not yet deployed, required for {param}")
            return deployed[value.contract]
        raise TypeError(f"Unknown argument value {value!r} for {param}")
