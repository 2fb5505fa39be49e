from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from .errors import RpcError


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_s: int = 45,
        user_agent: str = "snapshot-override-report/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.session = session or requests.Session()
        self._id = 0

    def _post(self, payload: Any) -> Any:
        try:
            resp = self.session.post(
                self.rpc_url,
                json=payload,
                timeout=self.timeout_s,
                headers={"user-agent": self.user_agent},
            )
        except requests.RequestException as e:
            raise RpcError(f"RPC transport error: {e}") from e
        if resp.status_code != 200:
            raise RpcError(f"HTTP {resp.status_code}: {resp.reason}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise RpcError(f"invalid JSON-RPC response: {resp.text[:200]!r}") from e

    def call(self, method: str, params: list) -> Any:
        self._id += 1
        data = self._post({"jsonrpc": "2.0", "id": self._id, "method": method, "params": params})
        if not isinstance(data, dict):
            raise RpcError("bad JSON-RPC response (not dict)")
        if data.get("error") is not None:
            raise RpcError(str(data["error"]))
        return data.get("result")

    def call_batch(self, calls: Sequence[Tuple[str, list]]) -> List[Any]:
        """Send one JSON-RPC batch and return results in request order."""
        if not calls:
            return []
        payload = []
        id_to_index: Dict[int, int] = {}
        for i, (method, params) in enumerate(calls):
            self._id += 1
            payload.append({"jsonrpc": "2.0", "id": self._id, "method": method, "params": params})
            id_to_index[self._id] = i

        resp = self._post(payload)
        if not isinstance(resp, list):
            if isinstance(resp, dict) and resp.get("error") is not None:
                raise RpcError(str(resp["error"]))
            raise RpcError(f"unexpected batch response type: {type(resp)}")

        results: Dict[int, Any] = {}
        for item in resp:
            if not isinstance(item, dict) or item.get("id") not in id_to_index:
                continue
            if item.get("error"):
                raise RpcError(f"{payload[id_to_index[item['id']]]['method']} error: {item['error']}")
            results[id_to_index[item["id"]]] = item.get("result")

        if len(results) != len(calls):
            raise RpcError(f"incomplete batch response: got {len(results)}/{len(calls)} results")
        return [results[i] for i in range(len(calls))]


def block_tag(snapshot: Any) -> str:
    return hex(snapshot) if isinstance(snapshot, int) else "latest"


def _chunked(seq: List[Any], n: int) -> Iterable[List[Any]]:
    for i in range(0, len(seq), n):
        yield seq[i : i + n]


def eth_call_batch(
    rpc: RpcClient,
    *,
    to: str,
    datas: Sequence[str],
    tag: str,
    batch_size: int = 500,
) -> List[str]:
    out: List[str] = []
    for chunk in _chunked(list(datas), max(1, batch_size)):
        results = rpc.call_batch([("eth_call", [{"to": to, "data": data}, tag]) for data in chunk])
        for res in results:
            if not isinstance(res, str) or not res.startswith("0x"):
                raise RpcError(f"unexpected eth_call output: {res!r}")
            out.append(res)
    return out


def eth_call(rpc: RpcClient, *, to: str, data: str, tag: str = "latest") -> str:
    res = rpc.call("eth_call", [{"to": to, "data": data}, tag])
    if not isinstance(res, str) or not res.startswith("0x"):
        raise RpcError(f"unexpected eth_call output: {res!r}")
    return res
