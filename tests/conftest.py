import json

import pytest

from resolver import PlaceholderResolver
from settings import DeployerSettings
from utils.fake_chain import FakeChain

owner_address = "0x0123"
beneficiary_address = "0x0456"


def sample_config():
    return {
        "contracts": {
            "mock_hook": {"name": "hook", "constructor": {}},
            "mailbox": {
                "name": "mailbox",
                "constructor": {
                    "local_domain": {"type": "u32", "value": "23448591"},
                    "owner": {"type": "ContractAddress", "value": "$OWNER_ADDRESS"},
                    "default_hook": {"type": "ContractAddress", "value": "$mock_hook"},
                    "required_hook": {"type": "ContractAddress", "value": "$mock_hook"},
                },
            },
            "merkle_tree_hook": {
                "name": "merkle_tree_hook",
                "constructor": {
                    "mailbox": {"type": "ContractAddress", "value": "$mailbox"},
                    "owner": {"type": "ContractAddress", "value": "$OWNER_ADDRESS"},
                },
            },
            "protocol_fee": {
                "name": "protocol_fee",
                "constructor": {
                    "beneficiary": {"type": "ContractAddress", "value": "$BENEFICIARY_ADDRESS"},
                    "hook_class_hash": {"type": "ClassHash", "value": "$CLASS_HASH:hook"},
                },
            },
        },
        "deploymentOrder": ["mock_hook", "mailbox", "merkle_tree_hook", "protocol_fee"],
    }


@pytest.fixture
def settings(tmp_path):
    return DeployerSettings(
        network="sepolia",
        rpc_url="http://127.0.0.1:5050/rpc",
        account_address=owner_address,
        private_key="0x1",
        beneficiary_address=beneficiary_address,
        configs_dir=tmp_path / "configs",
        deployments_dir=tmp_path / "deployments",
        build_dir=tmp_path / "target" / "dev",
    )


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def resolver(settings, fake_chain):
    return PlaceholderResolver(settings, fake_chain)


@pytest.fixture
def write_config(settings):
    def write(network, data):
        settings.configs_dir.mkdir(parents=True, exist_ok=True)
        config_path = settings.configs_dir / f"{network}.json"
        config_path.write_text(data if isinstance(data, str) else json.dumps(data))
        return config_path

    return write
