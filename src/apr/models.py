"""Records passed from the data sources to the reward aggregator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class PoolRecord:
    """One Boosted MasterChef pool as seen by the tracked participant.

    Any field read from chain may be ``None`` when the underlying call failed.
    """

    pool_id: Union[int, str]
    alloc_point: Optional[int]
    boost_share_bp: Optional[int]
    total_factor: Optional[Decimal]
    total_lp_supply: Optional[Decimal]
    amount: Optional[Decimal]
    factor: Optional[Decimal]
    name: Optional[str] = None


@dataclass(frozen=True)
class PairReserves:
    reward_reserve: Optional[Decimal]
    derivative_reserve: Optional[Decimal]


@dataclass(frozen=True)
class RewardSnapshot:
    """Everything read for one run, all pinned at ``block_number``."""

    source: str
    block_number: int
    joe_per_sec: Optional[Decimal]
    total_alloc_point: Optional[int]
    pools: List[PoolRecord]
    staked: Optional[Decimal]
    reserves: PairReserves


@dataclass(frozen=True)
class PoolReward:
    pool_id: Union[int, str]
    regular_per_year: Decimal
    boosted_per_year: Decimal
    name: Optional[str] = None

    @property
    def total_per_year(self) -> Decimal:
        return self.regular_per_year + self.boosted_per_year


@dataclass(frozen=True)
class AprResult:
    source: str
    block_number: int
    apr_at_par: float
    apr_market_adjusted: float
    total_reward_per_year: Decimal
    reward_to_holders_per_year: Decimal
    staked: Decimal
    exchange_ratio: Decimal
    pools: List[PoolReward] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("total_reward_per_year", "reward_to_holders_per_year", "staked", "exchange_ratio"):
            data[key] = float(data[key])
        data["pools"] = [
            {
                "pool_id": str(pool.pool_id),
                "name": pool.name,
                "regular_per_year": float(pool.regular_per_year),
                "boosted_per_year": float(pool.boosted_per_year),
            }
            for pool in self.pools
        ]
        return data
