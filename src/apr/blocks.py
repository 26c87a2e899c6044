"""Choose the single block height every read of a run is pinned to."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .graph import GraphClient
from .rpc import RpcClient

logger = logging.getLogger(__name__)


async def latest_chain_block(rpc: RpcClient) -> int:
    block = await rpc.ablock_number()
    logger.info("latest chain block=%s hex=%s", block, hex(block))
    return block


async def pin_block(graph: GraphClient, subgraph_names: Sequence[str]) -> int:
    """Return the lowest latest-indexed height across ``subgraph_names``.

    Subgraphs lag the chain head by different amounts, so the minimum is the
    highest block every source can answer for. Any failing source raises.
    """
    if not subgraph_names:
        raise ValueError("at least one subgraph is required to pin a block")
    heights = await asyncio.gather(
        *(graph.alatest_indexed_block(name) for name in subgraph_names)
    )
    for name, height in zip(subgraph_names, heights):
        logger.debug("subgraph %s indexed up to block %s", name, height)
    block = min(heights)
    logger.info("pinned block=%s across %d subgraphs", block, len(heights))
    return block
