"""
공용 fixture

fee 0.6% / spacing 10 풀, 현재 틱 0, 범위 [-10, 10]에 유동성 10^9 (raw 10^15)인 포지션 하나.
"""

from dataclasses import dataclass
from typing import Dict

import pytest

from ..data.pool import Pool
from ..data.position import Position
from ..data.tick import Tick
from ..data.tickmap import Tickmap
from ..data.types import FeeTier, PoolKey
from ..math.scaled import Liquidity, Percentage, SqrtPrice
from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE

LIQUIDITY = Liquidity(10 ** 15)
FEE = Percentage.from_decimal("0.006")
PROTOCOL_FEE = Percentage.from_decimal("0.01")


@dataclass
class PoolState:
    pool: Pool
    fee_tier: FeeTier
    pool_key: PoolKey
    tickmap: Tickmap
    ticks: Dict[int, Tick]
    position: Position


def build_pool_state(lower: int = -10, upper: int = 10) -> PoolState:
    fee_tier = FeeTier(fee=FEE, tick_spacing=10)
    pool_key = PoolKey.new("token_b", "token_a", fee_tier)
    pool = Pool.create(0, 0, "fee_receiver", tick_spacing=10)

    lower_tick = Tick.create(lower, pool, 0)
    upper_tick = Tick.create(upper, pool, 0)
    tickmap = Tickmap(tick_spacing=10)
    tickmap.flip(True, lower)
    tickmap.flip(True, upper)

    position, _, _ = Position.create(
        pool,
        pool_key,
        lower_tick,
        upper_tick,
        0,
        LIQUIDITY,
        SqrtPrice(MIN_SQRT_PRICE),
        SqrtPrice(MAX_SQRT_PRICE),
    )

    return PoolState(
        pool=pool,
        fee_tier=fee_tier,
        pool_key=pool_key,
        tickmap=tickmap,
        ticks={lower: lower_tick, upper: upper_tick},
        position=position,
    )


@pytest.fixture
def pool_state() -> PoolState:
    return build_pool_state()
