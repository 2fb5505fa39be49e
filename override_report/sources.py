from __future__ import annotations

from typing import Dict, Optional

import requests

from .config import Settings
from .rpc import RpcClient
from .subgraph import SubgraphClient


class DataSources:
    """Clients for the hub, the delegation subgraphs and chain RPC, one per network."""

    def __init__(self, settings: Optional[Settings] = None, *, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self._hub: Optional[SubgraphClient] = None
        self._delegation: Dict[str, SubgraphClient] = {}
        self._rpc: Dict[str, RpcClient] = {}

    def _subgraph(self, url: str) -> SubgraphClient:
        return SubgraphClient(
            url,
            timeout_s=self.settings.http_timeout_s,
            user_agent=self.settings.user_agent,
            session=self.session,
        )

    @property
    def hub(self) -> SubgraphClient:
        if self._hub is None:
            self._hub = self._subgraph(self.settings.hub_url)
        return self._hub

    def delegation_subgraph(self, network: str) -> SubgraphClient:
        if network not in self._delegation:
            self._delegation[network] = self._subgraph(self.settings.delegation_subgraph_url_for(network))
        return self._delegation[network]

    def rpc(self, network: str) -> RpcClient:
        if network not in self._rpc:
            self._rpc[network] = RpcClient(
                self.settings.rpc_url_for(network),
                timeout_s=self.settings.http_timeout_s,
                user_agent=self.settings.user_agent,
                session=self.session,
            )
        return self._rpc[network]
