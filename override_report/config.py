from __future__ import annotations

from dataclasses import dataclass

from .utils import env


SNAPSHOT_HUB_URL = "https://hub.snapshot.org/graphql"
SNAPSHOT_DELEGATION_SUBGRAPH_URL = "https://subgrapher.snapshot.org/delegation/{network}"
SNAPSHOT_RPC_URL = "https://rpc.snapshot.org/{network}"

# ENS registry is deployed at the same address on mainnet and testnets.
ENS_REGISTRY = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"
ENS_NETWORK = "1"

STRATEGY_NAME = "erc20-votes-with-override"

PAGE_SIZE = 1000


@dataclass(frozen=True)
class Settings:
    hub_url: str = SNAPSHOT_HUB_URL
    delegation_subgraph_url: str = SNAPSHOT_DELEGATION_SUBGRAPH_URL
    rpc_url: str = SNAPSHOT_RPC_URL
    ens_network: str = ENS_NETWORK
    ens_registry: str = ENS_REGISTRY
    strategy_name: str = STRATEGY_NAME
    page_size: int = PAGE_SIZE
    max_pages: int = 10_000
    rpc_batch_size: int = 500
    http_timeout_s: int = 45
    user_agent: str = "snapshot-override-report/1.0"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            hub_url=env("SNAPSHOT_HUB_URL", SNAPSHOT_HUB_URL),
            delegation_subgraph_url=env("SNAPSHOT_DELEGATION_SUBGRAPH_URL", SNAPSHOT_DELEGATION_SUBGRAPH_URL),
            rpc_url=env("SNAPSHOT_RPC_URL", SNAPSHOT_RPC_URL),
            ens_network=env("ENS_NETWORK", ENS_NETWORK),
            ens_registry=env("ENS_REGISTRY", ENS_REGISTRY),
            strategy_name=env("OVERRIDE_STRATEGY_NAME", STRATEGY_NAME),
            max_pages=int(env("SUBGRAPH_MAX_PAGES", "10000")),
            rpc_batch_size=int(env("RPC_BATCH_SIZE", "500")),
            http_timeout_s=int(env("HTTP_TIMEOUT_S", "45")),
        )

    def delegation_subgraph_url_for(self, network: str) -> str:
        return self.delegation_subgraph_url.format(network=network)

    def rpc_url_for(self, network: str) -> str:
        return self.rpc_url.format(network=network)
