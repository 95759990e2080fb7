"""
Swap Math - 단일 스왑 스텝 계산

하나의 유동성 구간 안에서 현재 √가격과 목표 √가격 사이의 스왑 한 단계를 계산합니다.
스텝은 목표 가격을 넘어가지 않으며, 입력 기준(exact in)과 출력 기준(exact out)을 모두 지원합니다.

References:
- 백서 Section 6.2.3: Swapping within a single tick
- Uniswap V3 Core: contracts/libraries/SwapMath.sol (computeSwapStep)

핵심 공식:
    x → y (가격 하락): √P' = L * √P / (L + Δx * √P)
    y → x (가격 상승): √P' = √P + Δy / L

반올림 정책: 풀이 받는 양은 올림, 풀이 내주는 양은 내림.
"""

from dataclasses import dataclass

from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from .liquidity_math import get_delta_x, get_delta_y
from .scaled import Liquidity, Percentage, SqrtPrice, TokenAmount

PRICE_DENOMINATOR: int = SqrtPrice.denominator()
# Liquidity(scale 6) → SqrtPrice(scale 24) 변환 계수
_LIQUIDITY_TO_PRICE_SCALE: int = 10 ** (SqrtPrice.SCALE - Liquidity.SCALE)


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


@dataclass(frozen=True)
class SwapStep:
    """스왑 한 단계의 결과"""
    next_sqrt_price: SqrtPrice
    amount_in: TokenAmount
    amount_out: TokenAmount
    fee_amount: TokenAmount


def compute_swap_step(
    current_sqrt_price: SqrtPrice,
    target_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    amount: TokenAmount,
    by_amount_in: bool,
    fee: Percentage,
) -> SwapStep:
    """현재 가격에서 목표 가격 방향으로 한 단계 스왑

    방향은 두 가격의 대소로 결정됩니다 (current >= target 이면 x → y).
    활성 유동성이 0이면 토큰 이동 없이 목표 가격으로 이동합니다.

    Args:
        current_sqrt_price: 현재 √가격
        target_sqrt_price: 이번 스텝의 목표 √가격 (다음 틱 또는 가격 한도)
        liquidity: 활성 유동성
        amount: 남은 스왑 수량 (입력 기준이면 수수료 포함 입력량)
        by_amount_in: True면 입력 수량 기준
        fee: 풀 수수료율

    Returns:
        SwapStep (next_sqrt_price, amount_in, amount_out, fee_amount)
    """
    if liquidity.is_zero():
        return SwapStep(
            next_sqrt_price=target_sqrt_price,
            amount_in=TokenAmount(0),
            amount_out=TokenAmount(0),
            fee_amount=TokenAmount(0),
        )

    x_to_y = current_sqrt_price >= target_sqrt_price
    amount_in = TokenAmount(0)
    amount_out = TokenAmount(0)

    if by_amount_in:
        amount_after_fee = amount.mul(Percentage.one().sub(fee))
        if x_to_y:
            amount_in = get_delta_x(target_sqrt_price, current_sqrt_price, liquidity, True)
        else:
            amount_in = get_delta_y(current_sqrt_price, target_sqrt_price, liquidity, True)

        if amount_after_fee >= amount_in:
            next_sqrt_price = target_sqrt_price
        else:
            next_sqrt_price = get_next_sqrt_price_from_input(
                current_sqrt_price, liquidity, amount_after_fee, x_to_y
            )
    else:
        if x_to_y:
            amount_out = get_delta_y(target_sqrt_price, current_sqrt_price, liquidity, False)
        else:
            amount_out = get_delta_x(current_sqrt_price, target_sqrt_price, liquidity, False)

        if amount >= amount_out:
            next_sqrt_price = target_sqrt_price
        else:
            next_sqrt_price = get_next_sqrt_price_from_output(
                current_sqrt_price, liquidity, amount, x_to_y
            )

    not_max = target_sqrt_price != next_sqrt_price

    # 목표 가격에 도달하지 못했으면 실제 이동한 가격으로 다시 계산
    if x_to_y:
        if not_max or not by_amount_in:
            amount_in = get_delta_x(next_sqrt_price, current_sqrt_price, liquidity, True)
        if not_max or by_amount_in:
            amount_out = get_delta_y(next_sqrt_price, current_sqrt_price, liquidity, False)
    else:
        if not_max or not by_amount_in:
            amount_in = get_delta_y(current_sqrt_price, next_sqrt_price, liquidity, True)
        if not_max or by_amount_in:
            amount_out = get_delta_x(current_sqrt_price, next_sqrt_price, liquidity, False)

    if not by_amount_in and amount_out > amount:
        amount_out = amount

    if by_amount_in and next_sqrt_price != target_sqrt_price:
        # 목표에 못 미친 마지막 스텝: 남은 입력 전부가 수수료
        fee_amount = amount.sub(amount_in)
    else:
        fee_amount = amount_in.mul_up(fee)

    return SwapStep(
        next_sqrt_price=next_sqrt_price,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
    )


def get_next_sqrt_price_from_input(
    starting_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    amount: TokenAmount,
    x_to_y: bool,
) -> SqrtPrice:
    """입력 수량을 넣었을 때의 다음 √가격"""
    if x_to_y:
        return get_next_sqrt_price_x_up(starting_sqrt_price, liquidity, amount, True)
    return get_next_sqrt_price_y_down(starting_sqrt_price, liquidity, amount, True)


def get_next_sqrt_price_from_output(
    starting_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    amount: TokenAmount,
    x_to_y: bool,
) -> SqrtPrice:
    """출력 수량을 뺐을 때의 다음 √가격"""
    if x_to_y:
        return get_next_sqrt_price_y_down(starting_sqrt_price, liquidity, amount, False)
    return get_next_sqrt_price_x_up(starting_sqrt_price, liquidity, amount, False)


def get_next_sqrt_price_x_up(
    starting_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    x: TokenAmount,
    add_x: bool,
) -> SqrtPrice:
    """token X 변화에 따른 다음 √가격 (올림)

    √P' = L * √P / (L ± Δx * √P)

    결과가 표현 범위를 벗어나면 해당 방향의 가격 경계로 고정됩니다.
    """
    if x.is_zero():
        return starting_sqrt_price

    price_delta = liquidity.v * _LIQUIDITY_TO_PRICE_SCALE
    product = starting_sqrt_price.v * x.v

    if add_x:
        denominator = price_delta + product
    else:
        denominator = price_delta - product
        if denominator < 0:
            denominator = MIN_SQRT_PRICE

    fallback = MIN_SQRT_PRICE if add_x else MAX_SQRT_PRICE
    if denominator == 0:
        return SqrtPrice(fallback)

    nominator = _ceil_div(starting_sqrt_price.v * liquidity.v, Liquidity.denominator())
    result = _ceil_div(nominator * PRICE_DENOMINATOR, denominator)
    if result > SqrtPrice.max_value():
        return SqrtPrice(fallback)
    return SqrtPrice(result)


def get_next_sqrt_price_y_down(
    starting_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    y: TokenAmount,
    add_y: bool,
) -> SqrtPrice:
    """token Y 변화에 따른 다음 √가격 (내림)

    √P' = √P ± Δy / L
    """
    numerator = y.v * PRICE_DENOMINATOR
    denominator = liquidity.v * _LIQUIDITY_TO_PRICE_SCALE

    if add_y:
        quotient = numerator * PRICE_DENOMINATOR // denominator
        if quotient > SqrtPrice.max_value():
            quotient = MAX_SQRT_PRICE
        result = starting_sqrt_price.v + quotient
        if result > SqrtPrice.max_value():
            return SqrtPrice(MAX_SQRT_PRICE)
        return SqrtPrice(result)

    quotient = _ceil_div(numerator * PRICE_DENOMINATOR, denominator)
    if quotient > SqrtPrice.max_value():
        quotient = MAX_SQRT_PRICE
    result = starting_sqrt_price.v - quotient
    if result < 0:
        return SqrtPrice(MIN_SQRT_PRICE)
    return SqrtPrice(result)


def is_enough_amount_to_change_price(
    amount: TokenAmount,
    starting_sqrt_price: SqrtPrice,
    liquidity: Liquidity,
    fee: Percentage,
    by_amount_in: bool,
    x_to_y: bool,
) -> bool:
    """남은 수량으로 가격을 1 단위라도 움직일 수 있는지

    틱 경계에 정확히 도달했을 때 그 틱을 넘을지 판단하는 데 사용합니다.
    """
    if liquidity.is_zero():
        return True

    if by_amount_in:
        amount_after_fee = amount.mul(Percentage.one().sub(fee))
        next_sqrt_price = get_next_sqrt_price_from_input(
            starting_sqrt_price, liquidity, amount_after_fee, x_to_y
        )
    else:
        next_sqrt_price = get_next_sqrt_price_from_output(
            starting_sqrt_price, liquidity, amount, x_to_y
        )

    return starting_sqrt_price != next_sqrt_price
