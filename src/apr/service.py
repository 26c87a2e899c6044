"""Service layer running one APR calculation end to end."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from prometheus_client import Gauge

from .aggregator import compute_apr
from .config import Settings, settings as default_settings
from .graph import GraphClient
from .models import AprResult
from .rpc import RpcClient
from .sources import ChainSource, GraphSource, RewardSource

logger = logging.getLogger(__name__)

SOURCES = ("chain", "graph")

APR_GAUGE = Gauge(
    "yyjoe_apr_ratio",
    "Last computed yyJOE APR as a ratio (1=100%)",
    ["source", "kind"],
)


def build_source(
    source: str,
    config: Optional[Settings] = None,
    rpc: Optional[RpcClient] = None,
    graph: Optional[GraphClient] = None,
) -> RewardSource:
    """Create the reader named ``source`` (``"chain"`` or ``"graph"``)."""

    config = config or default_settings
    rpc = rpc or RpcClient(config)
    if source == "chain":
        return ChainSource(rpc, config)
    if source == "graph":
        return GraphSource(rpc, graph or GraphClient(config), config)
    raise ValueError(f"Unsupported source: {source}")


async def calculate_apr_async(
    source: str = "chain",
    config: Optional[Settings] = None,
    rpc: Optional[RpcClient] = None,
    graph: Optional[GraphClient] = None,
) -> AprResult:
    config = config or default_settings
    reader = build_source(source, config, rpc, graph)
    logger.info("calculating yyJOE APR source=%s", source)

    snapshot = await reader.fetch()
    result = compute_apr(snapshot, config.rewards_share_to_holders)

    APR_GAUGE.labels(source=source, kind="at_par").set(result.apr_at_par)
    APR_GAUGE.labels(source=source, kind="market_adjusted").set(result.apr_market_adjusted)
    logger.info(
        "yyJOE APR source=%s block=%s at_par=%.4f market_adjusted=%.4f",
        source,
        result.block_number,
        result.apr_at_par,
        result.apr_market_adjusted,
    )
    return result


def calculate_apr(
    source: str = "chain",
    config: Optional[Settings] = None,
    rpc: Optional[RpcClient] = None,
    graph: Optional[GraphClient] = None,
) -> AprResult:
    """Blocking wrapper around :func:`calculate_apr_async`."""

    return asyncio.run(calculate_apr_async(source, config, rpc, graph))


def format_result(result: AprResult) -> List[str]:
    """Human-readable summary lines for the console."""

    return [
        f"Overall yyJOE APR (assuming 1:1 ratio) = {100 * result.apr_at_par:.2f}% "
        f"as of block {result.block_number}",
        f"Overall yyJOE APR (using current JOE:yyJOE ratio) = "
        f"{100 * result.apr_market_adjusted:.2f}% as of block {result.block_number}",
    ]
