from decimal import Decimal

import pytest

from apr.aggregator import (
    boost_factor,
    compute_apr,
    compute_pool_reward,
    exchange_ratio,
    pool_annual_emission,
)
from apr.errors import AprComputationError
from apr.models import PairReserves, PoolRecord, RewardSnapshot


def _pool(**overrides):
    fields = dict(
        pool_id=0,
        alloc_point=100,
        boost_share_bp=0,
        total_factor=Decimal(0),
        total_lp_supply=Decimal(100),
        amount=Decimal(10),
        factor=Decimal(0),
    )
    fields.update(overrides)
    return PoolRecord(**fields)


def _snapshot(pools, **overrides):
    fields = dict(
        source="chain",
        block_number=123,
        joe_per_sec=Decimal(1),
        total_alloc_point=100,
        pools=pools,
        staked=Decimal(100),
        reserves=PairReserves(Decimal(100), Decimal(100)),
    )
    fields.update(overrides)
    return RewardSnapshot(**fields)


def test_pool_annual_emission_uses_seconds_per_year():
    assert pool_annual_emission(Decimal(1), 100, 100) == 31_536_000


def test_single_pool_end_to_end():
    reward = compute_pool_reward(_pool(), Decimal(1), 100)
    assert reward.regular_per_year == 3_153_600
    assert reward.boosted_per_year == 0

    result = compute_apr(_snapshot([_pool()]), Decimal("0.15"))

    assert result.block_number == 123
    assert result.total_reward_per_year == 3_153_600
    assert result.reward_to_holders_per_year == Decimal("473040")
    assert result.exchange_ratio == 1
    assert result.apr_at_par == pytest.approx(4730.4)
    assert result.apr_market_adjusted == pytest.approx(4730.4)


def test_boosted_share_split():
    pool = _pool(
        boost_share_bp=4000,
        total_factor=Decimal(50),
        factor=Decimal(5),
    )
    reward = compute_pool_reward(pool, Decimal(1), 200)

    emission = Decimal(31_536_000) / 2
    assert reward.regular_per_year == emission * Decimal("0.6") * 10 / 100
    assert reward.boosted_per_year == emission * Decimal("0.4") * 5 / 50


def test_rewards_summed_across_pools():
    pools = [_pool(pool_id=0, alloc_point=50), _pool(pool_id=1, alloc_point=50)]
    result = compute_apr(_snapshot(pools), Decimal("0.15"))

    assert len(result.pools) == 2
    assert result.total_reward_per_year == 3_153_600


def test_empty_pools_contribute_nothing():
    pool = _pool(total_lp_supply=Decimal(0), amount=Decimal(0))
    reward = compute_pool_reward(pool, Decimal(1), 100)
    assert reward.total_per_year == 0


def test_exchange_ratio_below_par():
    assert exchange_ratio(Decimal(50), Decimal(100)) == 0.5


def test_exchange_ratio_capped_at_one():
    assert exchange_ratio(Decimal(150), Decimal(100)) == 1


def test_market_adjusted_apr_uses_ratio():
    snapshot = _snapshot([_pool()], reserves=PairReserves(Decimal(50), Decimal(100)))
    result = compute_apr(snapshot, Decimal("0.15"))

    assert result.apr_market_adjusted == pytest.approx(2 * result.apr_at_par)


def test_boost_factor_is_geometric_mean():
    assert boost_factor(Decimal(4), Decimal(9)) == 6


def test_missing_pool_value_raises():
    with pytest.raises(AprComputationError) as excinfo:
        compute_apr(_snapshot([_pool(amount=None)]), Decimal("0.15"))
    assert excinfo.value.field == "pool 0 amount"


def test_zero_staked_raises():
    with pytest.raises(AprComputationError) as excinfo:
        compute_apr(_snapshot([_pool()], staked=Decimal(0)), Decimal("0.15"))
    assert excinfo.value.field == "staked"


def test_zero_reserve_raises():
    with pytest.raises(AprComputationError):
        exchange_ratio(Decimal(10), Decimal(0))
    with pytest.raises(AprComputationError):
        compute_apr(
            _snapshot([_pool()], reserves=PairReserves(Decimal(0), Decimal(100))),
            Decimal("0.15"),
        )


def test_zero_total_alloc_point_raises():
    with pytest.raises(AprComputationError):
        compute_apr(_snapshot([_pool()], total_alloc_point=0), Decimal("0.15"))


def test_no_pools_gives_zero_apr():
    result = compute_apr(_snapshot([]), Decimal("0.15"))
    assert result.apr_at_par == 0.0
