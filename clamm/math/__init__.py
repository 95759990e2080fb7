"""
Math layer for CLAMM

정수 고정소수점 수학 함수들:
- scaled: 고정소수점 타입 (SqrtPrice, Liquidity, TokenAmount, FeeGrowth, Percentage 등)
- tick_math: Tick ↔ SqrtPrice 변환
- liquidity_math: 유동성 / 토큰 수량 계산
- swap_math: 단일 스왑 스텝 계산
- fee_math: fee growth 기반 수수료 계산
"""

from .tick_math import (
    tick_to_sqrt_price,
    sqrt_price_to_tick,
    align_tick_to_spacing,
    check_tick,
    get_max_tick,
    get_min_tick,
)
from .liquidity_math import (
    get_delta_x,
    get_delta_y,
    get_liquidity,
    get_liquidity_by_x,
    get_liquidity_by_y,
    calculate_amount_delta,
)
from .swap_math import (
    SwapStep,
    compute_swap_step,
    is_enough_amount_to_change_price,
)
from .fee_math import (
    calculate_fee_growth_inside,
    calculate_uncollected_fees,
    calculate_uncollected_fees_both_tokens,
)
