from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from .config import PAGE_SIZE
from .errors import PaginationLimitError, SubgraphError

logger = logging.getLogger(__name__)


class SubgraphClient:
    """Minimal GraphQL client for the Snapshot hub and the delegation subgraphs."""

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 45,
        user_agent: str = "snapshot-override-report/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.session = session or requests.Session()

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout_s,
                headers={"user-agent": self.user_agent},
            )
        except requests.RequestException as e:
            raise SubgraphError(f"subgraph transport error: {e}") from e
        if resp.status_code != 200:
            raise SubgraphError(f"HTTP {resp.status_code}: {resp.reason}", status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError as e:
            raise SubgraphError(f"invalid GraphQL response: {resp.text[:200]!r}") from e
        if not isinstance(body, dict):
            raise SubgraphError("bad GraphQL response (not dict)")
        if body.get("errors"):
            raise SubgraphError(f"GraphQL errors from {self.url}: {body['errors']}")
        return body.get("data") or {}

    def query_all(
        self,
        query: str,
        field: str,
        variables: Optional[Dict[str, Any]] = None,
        *,
        page_size: int = PAGE_SIZE,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Page through `field` of a query that declares `$first` and `$skip`."""

        def fetch_page(first: int, skip: int) -> List[Dict[str, Any]]:
            data = self.query(query, {**(variables or {}), "first": first, "skip": skip})
            return data.get(field) or []

        return fetch_all_pages(fetch_page, page_size=page_size, max_pages=max_pages)


def fetch_all_pages(
    fetch_page: Callable[[int, int], List[Any]],
    *,
    page_size: int = PAGE_SIZE,
    max_pages: Optional[int] = None,
) -> List[Any]:
    result: List[Any] = []
    page = 0
    while True:
        if max_pages is not None and page >= max_pages:
            raise PaginationLimitError(f"gave up after {page} pages of {page_size} records")
        rows = fetch_page(page_size, page * page_size)
        result.extend(rows)
        page += 1
        logger.debug("fetched page %d (%d rows, %d total)", page, len(rows), len(result))
        if len(rows) < page_size:
            break
    return result
