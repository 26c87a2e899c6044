"""Data sources producing a :class:`RewardSnapshot` for the aggregator.

``ChainSource`` reads everything with ``eth_call``. ``GraphSource`` takes pool
lists and balances from the subgraphs and only falls back to contract reads
for values the index does not expose. Both pin every read of a run to one
block height.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .abi import BOOSTED_MASTERCHEF_ABI, LP_TOKEN_ABI, YYJOE_STAKING_ABI
from .aggregator import boost_factor
from .blocks import latest_chain_block, pin_block
from .config import Settings, settings as default_settings
from .errors import AprComputationError
from .graph import GraphClient
from .join import left_join
from .models import PairReserves, PoolRecord, RewardSnapshot
from .numeric import convert_with_decimals, to_decimal
from .rpc import RpcClient

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


class RewardSource(abc.ABC):
    """Common interface of the chain-only and subgraph-assisted readers."""

    name: str

    def __init__(self, rpc: RpcClient, config: Optional[Settings] = None) -> None:
        self.rpc = rpc
        self.config = config or default_settings

    @abc.abstractmethod
    async def pin(self) -> int:
        """Return the block height this run is pinned to."""

    @abc.abstractmethod
    async def fetch_at(self, block: int) -> RewardSnapshot:
        """Read every input of the aggregator at ``block``."""

    async def fetch(self) -> RewardSnapshot:
        block = await self.pin()
        return await self.fetch_at(block)

    def _scale(self, raw: Any) -> Optional[Decimal]:
        if raw is None:
            return None
        return convert_with_decimals(raw, self.config.token_decimals)

    async def _masterchef(self, function: str, block: int, *args: Any) -> Any:
        return await self.rpc.acall(
            self.config.boosted_masterchef_address,
            BOOSTED_MASTERCHEF_ABI,
            function,
            args,
            block,
        )

    async def _joe_per_sec(self, block: int) -> Optional[Decimal]:
        joe_per_sec = self._scale(await self._masterchef("joePerSec", block))
        logger.info("joePerSec = %s JOE", joe_per_sec)
        return joe_per_sec

    async def _staked(self, block: int) -> Optional[Decimal]:
        raw = await self.rpc.acall(
            self.config.yyjoe_staking_address,
            YYJOE_STAKING_ABI,
            "internalBalance",
            (),
            block,
        )
        staked = self._scale(raw)
        logger.info("yyJOE staked = %s", staked)
        return staked


class ChainSource(RewardSource):
    name = "chain"

    async def pin(self) -> int:
        return await latest_chain_block(self.rpc)

    async def _read_pool(self, pid: int, block: int) -> PoolRecord:
        pool_info, user_info = await asyncio.gather(
            self._masterchef("poolInfo", block, pid),
            self._masterchef("userInfo", block, pid, self.config.yyjoe_address),
        )
        pool_info = pool_info or {}
        user_info = user_info or {}
        return PoolRecord(
            pool_id=pid,
            alloc_point=_as_int(pool_info.get("allocPoint")),
            boost_share_bp=_as_int(pool_info.get("veJoeShareBp")),
            total_factor=self._scale(pool_info.get("totalFactor")),
            total_lp_supply=self._scale(pool_info.get("totalLpSupply")),
            amount=self._scale(user_info.get("amount")),
            factor=self._scale(user_info.get("factor")),
        )

    async def _reserves(self, block: int) -> PairReserves:
        reserves = await self.rpc.acall(
            self.config.joe_yyjoe_pair_address, LP_TOKEN_ABI, "getReserves", (), block
        )
        reserves = reserves or {}
        pair = PairReserves(
            reward_reserve=self._scale(reserves.get("_reserve0")),
            derivative_reserve=self._scale(reserves.get("_reserve1")),
        )
        logger.info(
            "JOE-yyJOE pair has %s JOE and %s yyJOE",
            pair.reward_reserve,
            pair.derivative_reserve,
        )
        return pair

    async def fetch_at(self, block: int) -> RewardSnapshot:
        joe_per_sec, total_alloc_point, pool_length = await asyncio.gather(
            self._joe_per_sec(block),
            self._masterchef("totalAllocPoint", block),
            self._masterchef("poolLength", block),
        )
        logger.info("totalAllocPoint = %s", total_alloc_point)
        logger.info("poolLength = %s", pool_length)
        if pool_length is None:
            raise AprComputationError("pool_length")

        logger.info("getting poolInfo and userInfo for %s pools", pool_length)
        pools, staked, reserves = await asyncio.gather(
            asyncio.gather(*(self._read_pool(pid, block) for pid in range(pool_length))),
            self._staked(block),
            self._reserves(block),
        )
        return RewardSnapshot(
            source=self.name,
            block_number=block,
            joe_per_sec=joe_per_sec,
            total_alloc_point=_as_int(total_alloc_point),
            pools=list(pools),
            staked=staked,
            reserves=reserves,
        )


class GraphSource(RewardSource):
    """Subgraph-assisted reader.

    Pool ids, allocation points, LP balances and the participant's deposits
    come from the boosted-masterchef subgraph; boost factors are derived from
    the participant's veJOE balance. ``veJoeShareBp`` and ``totalFactor`` are
    not indexed and are read per pool from the contract.
    """

    name = "graph"

    def __init__(
        self,
        rpc: RpcClient,
        graph: GraphClient,
        config: Optional[Settings] = None,
    ) -> None:
        super().__init__(rpc, config)
        self.graph = graph

    async def pin(self) -> int:
        return await pin_block(self.graph, self.config.subgraph_names)

    async def _boost_info(self, pool_id: str, block: int) -> Dict[str, Any]:
        pool_info = await self._masterchef("poolInfo", block, int(pool_id)) or {}
        return {
            "pool_id": pool_id,
            "boost_share_bp": _as_int(pool_info.get("veJoeShareBp")),
            "total_factor": self._scale(pool_info.get("totalFactor")),
        }

    async def _reserves(self, block: int) -> PairReserves:
        pair = await asyncio.to_thread(
            self.graph.pair, self.config.joe_yyjoe_pair_address, block
        )
        reserves = PairReserves(
            reward_reserve=to_decimal(pair.get("reserve0")),
            derivative_reserve=to_decimal(pair.get("reserve1")),
        )
        logger.info(
            "%s pair has %s JOE and %s yyJOE (reserveUSD=%s)",
            pair.get("name"),
            reserves.reward_reserve,
            reserves.derivative_reserve,
            pair.get("reserveUSD"),
        )
        return reserves

    @staticmethod
    def _flatten_pools(masterchef: Dict[str, Any]) -> List[Dict[str, Any]]:
        pools = []
        for pool in masterchef.get("pools") or []:
            users = pool.get("users") or []
            pools.append(
                {
                    "pool_id": str(pool["id"]),
                    "pair": (pool.get("pair") or "").lower(),
                    "alloc_point": _as_int(pool.get("allocPoint")),
                    "jlp_balance": pool.get("jlpBalance"),
                    "amount": users[0].get("amount") if users else "0",
                }
            )
        return pools

    async def fetch_at(self, block: int) -> RewardSnapshot:
        address = self.config.yyjoe_address
        masterchef, vejoe_balance, joe_per_sec, staked, reserves = await asyncio.gather(
            asyncio.to_thread(
                self.graph.masterchef_pools,
                self.config.boosted_masterchef_address,
                address,
                block,
            ),
            asyncio.to_thread(self.graph.user_vejoe_balance, address, block),
            self._joe_per_sec(block),
            self._staked(block),
            self._reserves(block),
        )
        # no user entity means the participant never held veJOE
        vejoe = to_decimal(vejoe_balance) or Decimal(0)
        logger.info("yyJOE veJOE balance = %s", vejoe)

        pools = self._flatten_pools(masterchef)
        logger.info("masterchef has %d pools at block %s", len(pools), block)

        pairs, boost_infos = await asyncio.gather(
            asyncio.to_thread(
                self.graph.boosted_pairs, [pool["pair"] for pool in pools], block
            ),
            asyncio.gather(*(self._boost_info(pool["pool_id"], block) for pool in pools)),
        )
        joined = left_join(
            pools,
            list(boost_infos),
            ["pool_id"],
            ["pool_id"],
            {"boost_share_bp": None, "total_factor": None},
        )
        joined = left_join(
            joined,
            [{**pair, "id": pair["id"].lower()} for pair in pairs],
            ["pair"],
            ["id"],
            {"name": None},
        )

        records = []
        for row in joined:
            amount = self._scale(row["amount"])
            factor = boost_factor(amount, vejoe) if amount is not None else None
            records.append(
                PoolRecord(
                    pool_id=row["pool_id"],
                    name=row["name"],
                    alloc_point=row["alloc_point"],
                    boost_share_bp=row["boost_share_bp"],
                    total_factor=row["total_factor"],
                    total_lp_supply=self._scale(row["jlp_balance"]),
                    amount=amount,
                    factor=factor,
                )
            )

        return RewardSnapshot(
            source=self.name,
            block_number=block,
            joe_per_sec=joe_per_sec,
            total_alloc_point=_as_int(masterchef.get("totalAllocPoint")),
            pools=records,
            staked=staked,
            reserves=reserves,
        )
