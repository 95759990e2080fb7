"""
Swap Simulation - 틱을 따라 진행하는 스왑 상태 머신

풀 스냅샷, Tickmap, Tick 레코드를 받아 스왑을 스텝 단위로 진행하고,
결과 풀 상태와 넘은 틱 목록을 구조화된 결과로 돌려줍니다. 입력 값은 수정하지 않습니다.

상태 전이:
    Running(remaining, pool) → Done(result)

각 스텝:
    1. Tickmap에서 거래 방향으로 가장 가까운 경계 탐색 (TICK_SEARCH_RANGE 이내)
    2. 경계와 가격 한도 중 가까운 쪽까지 compute_swap_step
    3. 남은 수량 차감, fee growth / √가격 갱신, 경계 도달 시 틱 크로싱
    4. 종료: 남은 수량 0 / 가격 한도 도달 / 틱 한계 도달 / 스냅샷 불일치 / 최대 스텝 수

결과의 crossed_ticks는 넘은 순서대로 기록되므로, 저장 계층은 이 순서로
ticks의 갱신된 레코드를 반영하면 됩니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .config import settings
from .constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from .data.oracle import Oracle
from .data.pool import Pool
from .data.tick import Tick
from .data.tickmap import Tickmap
from .data.types import FeeTier
from .errors import AmountIsZero, NoGainSwap, TickLimitReached, TickNotFound, WrongLimit
from .math.scaled import Percentage, SqrtPrice, TokenAmount
from .math.swap_math import compute_swap_step
from .math.tick_math import get_max_tick, get_min_tick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapStepRecord:
    """스텝 하나의 기록

    fee_amount에는 틱을 넘지 못해 흡수된 잔량도 포함됩니다.
    """
    start_sqrt_price: SqrtPrice
    next_sqrt_price: SqrtPrice
    amount_in: TokenAmount
    amount_out: TokenAmount
    fee_amount: TokenAmount
    crossed_tick: Optional[int] = None


@dataclass
class SwapResult:
    """스왑 시뮬레이션 결과

    Attributes:
        amount_in: 총 입력량 (수수료 포함)
        amount_out: 총 출력량
        fee: 총 수수료
        start_sqrt_price: 시작 √가격
        target_sqrt_price: 종료 √가격
        crossed_ticks: 넘은 틱 인덱스 (넘은 순서)
        ticks: 넘은 틱의 갱신된 레코드 (crossed_ticks와 같은 순서)
        pool: 스왑 이후 풀 상태
        oracle: 갱신된 Oracle 사본 (입력이 없으면 None)
        steps: 스텝별 기록
        global_insufficient_liquidity: 틱 한계까지 가도 수량을 채우지 못함
        state_outdated: 넘어야 할 초기화 틱의 레코드가 스냅샷에 없음
        price_limit_reached: 가격 한도에 도달해서 멈춤 (부분 체결)
        max_swap_steps_reached: 최대 스텝 수에 도달해서 멈춤
    """
    amount_in: TokenAmount
    amount_out: TokenAmount
    fee: TokenAmount
    start_sqrt_price: SqrtPrice
    target_sqrt_price: SqrtPrice
    pool: Pool
    crossed_ticks: List[int] = field(default_factory=list)
    ticks: List[Tick] = field(default_factory=list)
    oracle: Optional[Oracle] = None
    steps: List[SwapStepRecord] = field(default_factory=list)
    global_insufficient_liquidity: bool = False
    state_outdated: bool = False
    price_limit_reached: bool = False
    max_swap_steps_reached: bool = False

    @property
    def is_complete(self) -> bool:
        """요청 수량이 전부 체결되었는지"""
        return not (
            self.global_insufficient_liquidity
            or self.state_outdated
            or self.price_limit_reached
            or self.max_swap_steps_reached
        )


def _validate_limit(pool: Pool, x_to_y: bool, sqrt_price_limit: SqrtPrice) -> None:
    if x_to_y:
        if pool.sqrt_price <= sqrt_price_limit or sqrt_price_limit.v > MAX_SQRT_PRICE \
                or sqrt_price_limit.v < MIN_SQRT_PRICE:
            raise WrongLimit(
                f"x → y 스왑의 가격 한도는 현재 가격보다 낮아야 합니다: "
                f"limit={sqrt_price_limit}, current={pool.sqrt_price}"
            )
    elif pool.sqrt_price >= sqrt_price_limit or sqrt_price_limit.v < MIN_SQRT_PRICE \
            or sqrt_price_limit.v > MAX_SQRT_PRICE:
        raise WrongLimit(
            f"y → x 스왑의 가격 한도는 현재 가격보다 높아야 합니다: "
            f"limit={sqrt_price_limit}, current={pool.sqrt_price}"
        )


def simulate_swap(
    pool: Pool,
    fee_tier: FeeTier,
    tickmap: Tickmap,
    ticks: Mapping[int, Tick],
    x_to_y: bool,
    amount: TokenAmount,
    by_amount_in: bool,
    sqrt_price_limit: SqrtPrice,
    protocol_fee: Optional[Percentage] = None,
    current_timestamp: Optional[int] = None,
    oracle: Optional[Oracle] = None,
    max_swap_steps: Optional[int] = None,
) -> SwapResult:
    """스왑 시뮬레이션

    Args:
        pool: 풀 스냅샷 (수정되지 않음)
        fee_tier: 풀의 수수료 티어
        tickmap: 풀의 Tickmap 스냅샷
        ticks: {tick index: Tick} 초기화된 틱 레코드
        x_to_y: True면 X를 넣고 Y를 받음 (가격 하락)
        amount: 스왑 수량
        by_amount_in: True면 amount가 입력량, False면 출력량
        sqrt_price_limit: 허용 가격 한도
        protocol_fee: 수수료 중 프로토콜 몫 (기본값: settings)
        current_timestamp: 현재 시각 (기본값: pool.last_timestamp)
        oracle: 가격 기록 (주어지면 사본에 최종 가격을 기록)
        max_swap_steps: 스텝 수 한도, 넘으면 중단 (기본값: settings.MAX_SWAP_STEPS)

    Returns:
        SwapResult

    Raises:
        AmountIsZero: amount가 0
        WrongLimit: 가격 한도가 거래 방향과 맞지 않음
        NoGainSwap: 정상 종료했지만 출력량이 0
    """
    if amount.is_zero():
        raise AmountIsZero("스왑 수량이 0입니다")

    _validate_limit(pool, x_to_y, sqrt_price_limit)

    if protocol_fee is None:
        protocol_fee = settings.protocol_fee()
    if max_swap_steps is None:
        max_swap_steps = settings.MAX_SWAP_STEPS

    pool = pool.copy()
    if current_timestamp is None:
        current_timestamp = pool.last_timestamp
    tick_limit = get_min_tick(fee_tier.tick_spacing) if x_to_y else get_max_tick(fee_tier.tick_spacing)

    result = SwapResult(
        amount_in=TokenAmount(0),
        amount_out=TokenAmount(0),
        fee=TokenAmount(0),
        start_sqrt_price=pool.sqrt_price,
        target_sqrt_price=pool.sqrt_price,
        pool=pool,
    )
    updated_ticks: Dict[int, Tick] = {}
    remaining = amount
    step_number = 0

    while not remaining.is_zero():
        try:
            swap_limit, limiting_tick = tickmap.get_closer_limit(
                sqrt_price_limit, x_to_y, pool.current_tick_index
            )
        except TickLimitReached:
            result.global_insufficient_liquidity = True
            break

        if limiting_tick is not None and limiting_tick[1] and limiting_tick[0] not in ticks:
            logger.warning("초기화된 틱 %d의 레코드가 스냅샷에 없습니다", limiting_tick[0])
            result.state_outdated = True
            break

        start_sqrt_price = pool.sqrt_price
        step = compute_swap_step(
            pool.sqrt_price,
            swap_limit,
            pool.liquidity,
            remaining,
            by_amount_in,
            fee_tier.fee,
        )
        step_number += 1

        if by_amount_in:
            remaining = remaining.sub(step.amount_in.add(step.fee_amount))
        else:
            remaining = remaining.sub(step.amount_out)

        pool.update_fee_growth_global(step.fee_amount, x_to_y, protocol_fee)
        pool.sqrt_price = step.next_sqrt_price

        result.amount_in = result.amount_in.add(step.amount_in).add(step.fee_amount)
        result.amount_out = result.amount_out.add(step.amount_out)
        result.fee = result.fee.add(step.fee_amount)

        # 틱 크로싱은 갱신된 사본을 기준으로 이어서 진행
        try:
            absorbed, remaining, crossed = pool.update_tick(
                step,
                swap_limit,
                limiting_tick,
                {**ticks, **updated_ticks},
                remaining,
                by_amount_in,
                x_to_y,
                current_timestamp,
                protocol_fee,
                fee_tier,
            )
        except TickNotFound:
            result.state_outdated = True
            break

        result.amount_in = result.amount_in.add(absorbed)
        result.fee = result.fee.add(absorbed)
        result.steps.append(SwapStepRecord(
            start_sqrt_price=start_sqrt_price,
            next_sqrt_price=step.next_sqrt_price,
            amount_in=step.amount_in,
            amount_out=step.amount_out,
            fee_amount=step.fee_amount.add(absorbed),
            crossed_tick=crossed.index if crossed is not None else None,
        ))
        logger.debug(
            "스텝 %d: price %s → %s, in=%s, out=%s, fee=%s",
            step_number, start_sqrt_price, step.next_sqrt_price,
            step.amount_in, step.amount_out, step.fee_amount,
        )

        if crossed is not None:
            updated_ticks[crossed.index] = crossed
            result.crossed_ticks.append(crossed.index)
            result.ticks.append(crossed)

        if pool.sqrt_price == sqrt_price_limit and not remaining.is_zero():
            result.price_limit_reached = True
            break

        reached_tick_limit = (
            pool.current_tick_index <= tick_limit if x_to_y
            else pool.current_tick_index >= tick_limit
        )
        if reached_tick_limit and not remaining.is_zero():
            result.global_insufficient_liquidity = True
            break

        if step_number > max_swap_steps and not remaining.is_zero():
            result.max_swap_steps_reached = True
            break

    result.target_sqrt_price = pool.sqrt_price

    if result.amount_out.is_zero() and result.is_complete:
        raise NoGainSwap(f"스왑 결과 출력량이 0입니다: amount={amount}")

    if oracle is not None:
        result.oracle = oracle.copy()
        result.oracle.update(current_timestamp, pool.sqrt_price)

    return result
