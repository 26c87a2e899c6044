"""Reward aggregation for the tracked participant.

Every pool's annual JOE emission is split in two. The regular part is shared
in proportion to deposited LP tokens, the boosted part (``veJoeShareBp`` basis
points of the pool) in proportion to each depositor's boost factor. Summing
the participant's two shares across pools and applying the holders' revenue
share gives the yearly JOE flowing to yyJOE stakers.

Intermediate values stay :class:`~decimal.Decimal`; only the two final ratios
are converted to ``float``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional, TypeVar

from .errors import AprComputationError
from .models import AprResult, PoolRecord, PoolReward, RewardSnapshot
from .numeric import BASIS_POINTS, DECIMAL_CONTEXT, SECONDS_PER_YEAR

logger = logging.getLogger(__name__)

T = TypeVar("T")

ZERO = Decimal(0)
ONE = Decimal(1)


def _require(value: Optional[T], field: str) -> T:
    if value is None:
        raise AprComputationError(field)
    return value


def boost_factor(amount: Decimal, vejoe_balance: Decimal) -> Decimal:
    """Boost factor of a depositor: ``sqrt(lp_amount * veJOE balance)``."""
    with localcontext(DECIMAL_CONTEXT):
        return (Decimal(amount) * Decimal(vejoe_balance)).sqrt()


def pool_annual_emission(
    joe_per_sec: Decimal, alloc_point: int, total_alloc_point: int
) -> Decimal:
    if not total_alloc_point:
        raise AprComputationError("total_alloc_point", "zero denominator")
    with localcontext(DECIMAL_CONTEXT):
        return Decimal(joe_per_sec) * SECONDS_PER_YEAR * alloc_point / total_alloc_point


def compute_pool_reward(
    pool: PoolRecord, joe_per_sec: Decimal, total_alloc_point: int
) -> PoolReward:
    prefix = f"pool {pool.pool_id}"
    alloc_point = _require(pool.alloc_point, f"{prefix} alloc_point")
    share_bp = _require(pool.boost_share_bp, f"{prefix} boost_share_bp")
    amount = _require(pool.amount, f"{prefix} amount")
    factor = _require(pool.factor, f"{prefix} factor")
    total_lp_supply = _require(pool.total_lp_supply, f"{prefix} total_lp_supply")
    total_factor = _require(pool.total_factor, f"{prefix} total_factor")

    emission = pool_annual_emission(joe_per_sec, alloc_point, total_alloc_point)
    with localcontext(DECIMAL_CONTEXT):
        boosted_fraction = Decimal(share_bp) / BASIS_POINTS
        regular = ZERO
        if total_lp_supply:
            regular = emission * (ONE - boosted_fraction) * amount / total_lp_supply
        boosted = ZERO
        if total_factor:
            boosted = emission * boosted_fraction * factor / total_factor

    return PoolReward(
        pool_id=pool.pool_id,
        name=pool.name,
        regular_per_year=regular,
        boosted_per_year=boosted,
    )


def total_reward_per_year(rewards: Iterable[PoolReward]) -> Decimal:
    return sum((reward.total_per_year for reward in rewards), ZERO)


def exchange_ratio(
    reward_reserve: Optional[Decimal], derivative_reserve: Optional[Decimal]
) -> Decimal:
    """JOE per yyJOE implied by the pair, capped at 1.

    yyJOE can always be minted 1:1 from JOE, so the ratio never exceeds par.
    """
    reward_reserve = _require(reward_reserve, "reward_reserve")
    derivative_reserve = _require(derivative_reserve, "derivative_reserve")
    if not derivative_reserve:
        raise AprComputationError("derivative_reserve", "zero denominator")
    with localcontext(DECIMAL_CONTEXT):
        return min(ONE, Decimal(reward_reserve) / Decimal(derivative_reserve))


def compute_apr(snapshot: RewardSnapshot, rewards_share: Decimal) -> AprResult:
    joe_per_sec = _require(snapshot.joe_per_sec, "joe_per_sec")
    total_alloc_point = _require(snapshot.total_alloc_point, "total_alloc_point")

    rewards: List[PoolReward] = [
        compute_pool_reward(pool, joe_per_sec, total_alloc_point) for pool in snapshot.pools
    ]
    total = total_reward_per_year(rewards)
    logger.info("total JOE earned per year = %s JOE", total)

    with localcontext(DECIMAL_CONTEXT):
        to_holders = Decimal(rewards_share) * total
    logger.info("JOE rewards to yyJOE stakers per year = %s JOE", to_holders)

    staked = _require(snapshot.staked, "staked")
    if not staked:
        raise AprComputationError("staked", "zero denominator")
    ratio = exchange_ratio(
        snapshot.reserves.reward_reserve, snapshot.reserves.derivative_reserve
    )
    if not ratio:
        raise AprComputationError("exchange_ratio", "zero denominator")
    logger.info("JOE to yyJOE ratio = %s", ratio)

    with localcontext(DECIMAL_CONTEXT):
        apr_at_par = to_holders / staked
        apr_market_adjusted = to_holders / (staked * ratio)

    return AprResult(
        source=snapshot.source,
        block_number=snapshot.block_number,
        apr_at_par=float(apr_at_par),
        apr_market_adjusted=float(apr_market_adjusted),
        total_reward_per_year=total,
        reward_to_holders_per_year=to_holders,
        staked=staked,
        exchange_ratio=ratio,
        pools=rewards,
    )
