"""Subgraph data fetch utilities using The Graph."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from prometheus_client import Counter

from .config import Settings, settings as default_settings
from .errors import GraphQueryError
from .queries import (
    BOOSTED_PAIRS_QUERY,
    JOE_YYJOE_PAIR_QUERY,
    LATEST_BLOCK_QUERY,
    USER_BALANCE_QUERY,
    USER_VEJOE_QUERY,
)

logger = logging.getLogger(__name__)

GRAPH_QUERY_COUNTER = Counter(
    "graph_queries_total",
    "Total GraphQL queries by outcome",
    ["outcome"],
)


class GraphClient:
    """Thin GraphQL client; every failure is fatal to the run."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or default_settings
        self.session = session or requests.Session()

    def query(self, url: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``query`` with ``variables`` to ``url`` and return its ``data``."""
        try:
            response = self.session.post(
                url,
                json={"query": query, "variables": variables},
                timeout=self.config.graph_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            GRAPH_QUERY_COUNTER.labels(outcome="failure").inc()
            logger.error("graph query failed url=%s", url, exc_info=exc)
            raise GraphQueryError(f"failed to query {url}") from exc

        if not isinstance(payload, dict):
            GRAPH_QUERY_COUNTER.labels(outcome="failure").inc()
            raise GraphQueryError(f"{url}: malformed response")
        errors = payload.get("errors") or []
        if errors:
            GRAPH_QUERY_COUNTER.labels(outcome="failure").inc()
            message = " | ".join(str(err.get("message", err)) for err in errors)
            raise GraphQueryError(f"{url}: {message}")
        data = payload.get("data")
        if not isinstance(data, dict):
            GRAPH_QUERY_COUNTER.labels(outcome="failure").inc()
            raise GraphQueryError(f"{url}: response has no data")

        GRAPH_QUERY_COUNTER.labels(outcome="success").inc()
        return data

    def latest_indexed_block(self, subgraph_name: str) -> int:
        data = self.query(
            self.config.graph_index_url,
            LATEST_BLOCK_QUERY,
            {"subgraphName": subgraph_name, "network": self.config.graph_network},
        )
        status = data.get("indexingStatusForCurrentVersion") or {}
        chains = status.get("chains") or []
        try:
            return int(chains[0]["latestBlock"]["number"])
        except (IndexError, KeyError, TypeError, ValueError) as exc:
            raise GraphQueryError(
                f"no latest block reported for subgraph {subgraph_name}"
            ) from exc

    def user_vejoe_balance(self, user_id: str, block: int) -> Optional[str]:
        data = self.query(
            self.config.vejoe_subgraph_url,
            USER_VEJOE_QUERY,
            {"id": user_id.lower(), "latestBlock": block},
        )
        user = data.get("user")
        if user is None:
            return None
        return user.get("veJoeBalance")

    def masterchef_pools(self, masterchef_id: str, address: str, block: int) -> Dict[str, Any]:
        """Return ``{"totalAllocPoint": ..., "pools": [...]}`` for the masterchef."""
        data = self.query(
            self.config.masterchef_subgraph_url,
            USER_BALANCE_QUERY,
            {"id": masterchef_id.lower(), "address": address.lower(), "latestBlock": block},
        )
        masterchef = data.get("masterChef")
        if masterchef is None:
            raise GraphQueryError(f"masterChef {masterchef_id} not found at block {block}")
        return masterchef

    def boosted_pairs(self, pair_ids: List[str], block: int) -> List[Dict[str, Any]]:
        data = self.query(
            self.config.exchange_subgraph_url,
            BOOSTED_PAIRS_QUERY,
            {"idList": [pair_id.lower() for pair_id in pair_ids], "latestBlock": block},
        )
        return data.get("pairs") or []

    def pair(self, pair_id: str, block: int) -> Dict[str, Any]:
        data = self.query(
            self.config.exchange_subgraph_url,
            JOE_YYJOE_PAIR_QUERY,
            {"id": pair_id.lower(), "latestBlock": block},
        )
        pair = data.get("pair")
        if pair is None:
            raise GraphQueryError(f"pair {pair_id} not found at block {block}")
        return pair

    async def alatest_indexed_block(self, subgraph_name: str) -> int:
        return await asyncio.to_thread(self.latest_indexed_block, subgraph_name)
