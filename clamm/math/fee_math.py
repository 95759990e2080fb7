"""
Fee Math - fee growth 기반 수수료 계산

전역 fee growth와 틱의 fee growth outside 스냅샷 차분으로
가격 범위 안에서 발생한 수수료와 포지션의 미수령 수수료를 계산합니다.

References:
- 백서 Section 6.3: Tick-Indexed State (feeGrowthOutside)
- 백서 Section 6.4.1: Position-Indexed State (uncollected fees)

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0))                     # 미수령 수수료

모든 fee growth 뺄셈은 mod 2^128 wrapping (FeeGrowth.unchecked_sub).
"""

from typing import NamedTuple, Tuple

from .scaled import FeeGrowth, Liquidity, TokenAmount


class FeeCalculationResult(NamedTuple):
    """수수료 계산 결과"""
    tokens_owed_x: TokenAmount
    tokens_owed_y: TokenAmount
    fee_growth_inside_x: FeeGrowth
    fee_growth_inside_y: FeeGrowth


def fee_growth_above(
    tick_index: int,
    current_tick: int,
    fee_growth_global: FeeGrowth,
    fee_growth_outside: FeeGrowth,
) -> FeeGrowth:
    """틱 위에서 발생한 fee growth (f_a)"""
    if current_tick >= tick_index:
        return fee_growth_global.unchecked_sub(fee_growth_outside)
    return fee_growth_outside


def fee_growth_below(
    tick_index: int,
    current_tick: int,
    fee_growth_global: FeeGrowth,
    fee_growth_outside: FeeGrowth,
) -> FeeGrowth:
    """틱 아래에서 발생한 fee growth (f_b)"""
    if current_tick >= tick_index:
        return fee_growth_outside
    return fee_growth_global.unchecked_sub(fee_growth_outside)


def calculate_fee_growth_inside(
    tick_lower: int,
    tick_lower_fee_growth_outside_x: FeeGrowth,
    tick_lower_fee_growth_outside_y: FeeGrowth,
    tick_upper: int,
    tick_upper_fee_growth_outside_x: FeeGrowth,
    tick_upper_fee_growth_outside_y: FeeGrowth,
    tick_current: int,
    fee_growth_global_x: FeeGrowth,
    fee_growth_global_y: FeeGrowth,
) -> Tuple[FeeGrowth, FeeGrowth]:
    """범위 [tick_lower, tick_upper) 안의 fee growth (f_r), 두 토큰 모두

    상단 틱의 f_a는 i_c < i_u 조건으로 판단합니다 (현재 틱이 상단 틱과 같으면 범위 밖).

    Returns:
        (fee_growth_inside_x, fee_growth_inside_y)
    """
    below_x = fee_growth_below(tick_lower, tick_current, fee_growth_global_x, tick_lower_fee_growth_outside_x)
    below_y = fee_growth_below(tick_lower, tick_current, fee_growth_global_y, tick_lower_fee_growth_outside_y)
    above_x = fee_growth_above(tick_upper, tick_current, fee_growth_global_x, tick_upper_fee_growth_outside_x)
    above_y = fee_growth_above(tick_upper, tick_current, fee_growth_global_y, tick_upper_fee_growth_outside_y)

    inside_x = fee_growth_global_x.unchecked_sub(below_x).unchecked_sub(above_x)
    inside_y = fee_growth_global_y.unchecked_sub(below_y).unchecked_sub(above_y)
    return inside_x, inside_y


def calculate_uncollected_fees(
    liquidity: Liquidity,
    fee_growth_inside_current: FeeGrowth,
    fee_growth_inside_last: FeeGrowth,
) -> TokenAmount:
    """미수령 수수료 (f_u), 내림

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_current: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 업데이트 시 fee growth (f_r(t_0))

    Returns:
        TokenAmount
    """
    return fee_growth_inside_current.unchecked_sub(fee_growth_inside_last).to_fee(liquidity)


def calculate_uncollected_fees_both_tokens(
    liquidity: Liquidity,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global_x: FeeGrowth,
    fee_growth_global_y: FeeGrowth,
    fee_growth_outside_lower_x: FeeGrowth,
    fee_growth_outside_lower_y: FeeGrowth,
    fee_growth_outside_upper_x: FeeGrowth,
    fee_growth_outside_upper_y: FeeGrowth,
    fee_growth_inside_last_x: FeeGrowth,
    fee_growth_inside_last_y: FeeGrowth,
) -> FeeCalculationResult:
    """두 토큰의 미수령 수수료 계산

    필수 데이터:
    - Global: f_g,x, f_g,y, i_c
    - Lower tick: f_o,x(i_l), f_o,y(i_l)
    - Upper tick: f_o,x(i_u), f_o,y(i_u)
    - Position: l, f_r,x(t_0), f_r,y(t_0)
    """
    inside_x, inside_y = calculate_fee_growth_inside(
        tick_lower,
        fee_growth_outside_lower_x,
        fee_growth_outside_lower_y,
        tick_upper,
        fee_growth_outside_upper_x,
        fee_growth_outside_upper_y,
        current_tick,
        fee_growth_global_x,
        fee_growth_global_y,
    )

    return FeeCalculationResult(
        tokens_owed_x=calculate_uncollected_fees(liquidity, inside_x, fee_growth_inside_last_x),
        tokens_owed_y=calculate_uncollected_fees(liquidity, inside_y, fee_growth_inside_last_y),
        fee_growth_inside_x=inside_x,
        fee_growth_inside_y=inside_y,
    )
