"""
Liquidity Math - 유동성 및 토큰 수량 계산

가격 범위 [√P_a, √P_b]에 대한 유동성과 토큰 수량 사이의 변환.
중간 계산은 파이썬 정수(임의 정밀도)로 수행하고, 최종 결과만 고정 폭 타입으로
검사하여 변환합니다. 결과가 128비트를 넘으면 CastOverflow가 발생합니다.

References:
- 백서 Section 6.2.3: Formulas for calculating amounts
- 백서 Section 6.3: Tick-indexed state

핵심 공식:
    Δx = L * (√P_b - √P_a) / (√P_a * √P_b)
    Δy = L * (√P_b - √P_a)

    L_x = x * √P_a * √P_b / (√P_b - √P_a)
    L_y = y / (√P_b - √P_a)

반올림 정책: 예치(풀이 받는 쪽)는 올림, 인출(풀이 주는 쪽)은 내림.
"""

from typing import Tuple

from ..constants import MAX_TICK, U128_MAX
from ..errors import InvalidTickIndexOrTickSpacing
from .scaled import Liquidity, Percentage, SqrtPrice, TokenAmount
from .tick_math import check_tick, get_max_tick, get_min_tick, tick_to_sqrt_price

PRICE_DENOMINATOR: int = SqrtPrice.denominator()
LIQUIDITY_DENOMINATOR: int = Liquidity.denominator()


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def get_delta_x(
    sqrt_price_a: SqrtPrice,
    sqrt_price_b: SqrtPrice,
    liquidity: Liquidity,
    rounding_up: bool,
) -> TokenAmount:
    """두 √가격 사이의 token X 수량

    Δx = L * |√P_b - √P_a| / (√P_a * √P_b)

    Args:
        sqrt_price_a: 첫 번째 √가격
        sqrt_price_b: 두 번째 √가격 (순서 무관)
        liquidity: 유동성
        rounding_up: True면 올림

    Returns:
        TokenAmount

    Raises:
        CastOverflow: 결과가 128비트를 넘는 경우
    """
    delta_sqrt_price = abs(sqrt_price_a.v - sqrt_price_b.v)
    nominator = delta_sqrt_price * liquidity.v // LIQUIDITY_DENOMINATOR
    denominator = sqrt_price_a.v * sqrt_price_b.v

    if rounding_up:
        value = _ceil_div(nominator * PRICE_DENOMINATOR * PRICE_DENOMINATOR, denominator)
        return TokenAmount._checked(_ceil_div(value, PRICE_DENOMINATOR))
    value = nominator * PRICE_DENOMINATOR * PRICE_DENOMINATOR // denominator
    return TokenAmount._checked(value // PRICE_DENOMINATOR)


def get_delta_y(
    sqrt_price_a: SqrtPrice,
    sqrt_price_b: SqrtPrice,
    liquidity: Liquidity,
    rounding_up: bool,
) -> TokenAmount:
    """두 √가격 사이의 token Y 수량

    Δy = L * |√P_b - √P_a|

    Raises:
        CastOverflow: 결과가 128비트를 넘는 경우
    """
    delta_sqrt_price = abs(sqrt_price_a.v - sqrt_price_b.v)

    if rounding_up:
        value = _ceil_div(delta_sqrt_price * liquidity.v, LIQUIDITY_DENOMINATOR)
        return TokenAmount._checked(_ceil_div(value, PRICE_DENOMINATOR))
    value = delta_sqrt_price * liquidity.v // LIQUIDITY_DENOMINATOR
    return TokenAmount._checked(value // PRICE_DENOMINATOR)


def _clamp_range(lower_tick: int, upper_tick: int, tick_spacing: int) -> Tuple[int, int]:
    # 범위를 벗어난 경계는 spacing에 맞는 전체 범위로 고정 (full range 포지션)
    if lower_tick < -MAX_TICK:
        lower_tick = get_min_tick(tick_spacing)
    if upper_tick > MAX_TICK:
        upper_tick = get_max_tick(tick_spacing)
    return lower_tick, upper_tick


def get_liquidity_by_x_sqrt_price(
    x: TokenAmount,
    lower_sqrt_price: SqrtPrice,
    upper_sqrt_price: SqrtPrice,
    current_sqrt_price: SqrtPrice,
    rounding_up: bool,
) -> Tuple[Liquidity, TokenAmount]:
    """token X 예치량으로 유동성과 필요한 token Y 계산 (√가격 버전)"""
    if upper_sqrt_price <= current_sqrt_price:
        # 현재 가격이 범위 위: X로는 유동성을 만들 수 없음
        return Liquidity(0), TokenAmount(0)

    if current_sqrt_price < lower_sqrt_price:
        nominator = x.v * lower_sqrt_price.v * upper_sqrt_price.v * LIQUIDITY_DENOMINATOR
        denominator = (upper_sqrt_price.v - lower_sqrt_price.v) * PRICE_DENOMINATOR
        return Liquidity._checked(nominator // denominator), TokenAmount(0)

    nominator = x.v * current_sqrt_price.v * upper_sqrt_price.v * LIQUIDITY_DENOMINATOR
    denominator = (upper_sqrt_price.v - current_sqrt_price.v) * PRICE_DENOMINATOR
    liquidity = Liquidity._checked(nominator // denominator)
    y = get_delta_y(lower_sqrt_price, current_sqrt_price, liquidity, rounding_up)
    return liquidity, y


def get_liquidity_by_x(
    x: TokenAmount,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: SqrtPrice,
    rounding_up: bool,
    tick_spacing: int = 1,
) -> Tuple[Liquidity, TokenAmount]:
    """token X 예치량으로 유동성과 필요한 token Y 계산

    현재 가격 위치에 따라:
    - 범위 아래: X만 필요, y = 0
    - 범위 안: X와 Y 모두 필요
    - 범위 위: 유동성 0

    Args:
        x: 예치할 token X 수량
        lower_tick: 하단 틱
        upper_tick: 상단 틱
        current_sqrt_price: 현재 √가격
        rounding_up: 필요한 Y를 올림할지 (예치 시 True)
        tick_spacing: 범위를 벗어난 틱을 고정할 때 사용할 간격

    Returns:
        (liquidity, y)
    """
    lower_tick, upper_tick = _clamp_range(lower_tick, upper_tick, tick_spacing)
    return get_liquidity_by_x_sqrt_price(
        x,
        tick_to_sqrt_price(lower_tick),
        tick_to_sqrt_price(upper_tick),
        current_sqrt_price,
        rounding_up,
    )


def get_liquidity_by_y_sqrt_price(
    y: TokenAmount,
    lower_sqrt_price: SqrtPrice,
    upper_sqrt_price: SqrtPrice,
    current_sqrt_price: SqrtPrice,
    rounding_up: bool,
) -> Tuple[Liquidity, TokenAmount]:
    """token Y 예치량으로 유동성과 필요한 token X 계산 (√가격 버전)"""
    if current_sqrt_price < lower_sqrt_price:
        return Liquidity(0), TokenAmount(0)

    if upper_sqrt_price <= current_sqrt_price:
        liquidity = y.v * PRICE_DENOMINATOR * LIQUIDITY_DENOMINATOR // (
            upper_sqrt_price.v - lower_sqrt_price.v
        )
        return Liquidity._checked(liquidity), TokenAmount(0)

    if current_sqrt_price == lower_sqrt_price:
        # Y가 필요 없는 경계: Y로는 유동성을 만들 수 없음
        return Liquidity(0), TokenAmount(0)

    liquidity = Liquidity._checked(
        y.v * PRICE_DENOMINATOR * LIQUIDITY_DENOMINATOR // (current_sqrt_price.v - lower_sqrt_price.v)
    )
    x = get_delta_x(current_sqrt_price, upper_sqrt_price, liquidity, rounding_up)
    return liquidity, x


def get_liquidity_by_y(
    y: TokenAmount,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: SqrtPrice,
    rounding_up: bool,
    tick_spacing: int = 1,
) -> Tuple[Liquidity, TokenAmount]:
    """token Y 예치량으로 유동성과 필요한 token X 계산

    Returns:
        (liquidity, x)
    """
    lower_tick, upper_tick = _clamp_range(lower_tick, upper_tick, tick_spacing)
    return get_liquidity_by_y_sqrt_price(
        y,
        tick_to_sqrt_price(lower_tick),
        tick_to_sqrt_price(upper_tick),
        current_sqrt_price,
        rounding_up,
    )


def get_liquidity(
    x: TokenAmount,
    y: TokenAmount,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: SqrtPrice,
    rounding_up: bool,
    tick_spacing: int = 1,
) -> Tuple[TokenAmount, TokenAmount, Liquidity]:
    """두 토큰 예치 한도에서 만들 수 있는 최대 유동성

    범위 밖이면 한쪽 토큰만 사용하고, 범위 안이면 두 방식 중 작은 유동성을 선택합니다.

    Returns:
        (x, y, liquidity) - 실제로 필요한 수량과 유동성
    """
    lower_tick, upper_tick = _clamp_range(lower_tick, upper_tick, tick_spacing)
    lower_sqrt_price = tick_to_sqrt_price(lower_tick)
    upper_sqrt_price = tick_to_sqrt_price(upper_tick)

    if upper_sqrt_price <= current_sqrt_price:
        liquidity, estimated_x = get_liquidity_by_y_sqrt_price(
            y, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, rounding_up
        )
        return estimated_x, y, liquidity
    if current_sqrt_price <= lower_sqrt_price:
        liquidity, estimated_y = get_liquidity_by_x_sqrt_price(
            x, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, rounding_up
        )
        return x, estimated_y, liquidity

    liquidity_by_y, estimated_x = get_liquidity_by_y_sqrt_price(
        y, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, rounding_up
    )
    liquidity_by_x, estimated_y = get_liquidity_by_x_sqrt_price(
        x, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, rounding_up
    )
    if liquidity_by_y < liquidity_by_x:
        return estimated_x, y, liquidity_by_y
    return x, estimated_y, liquidity_by_x


def calculate_amount_delta(
    current_tick_index: int,
    current_sqrt_price: SqrtPrice,
    liquidity_delta: Liquidity,
    liquidity_sign: bool,
    upper_tick: int,
    lower_tick: int,
) -> Tuple[TokenAmount, TokenAmount, bool]:
    """유동성 변화량에 대응하는 토큰 수량

    Args:
        current_tick_index: 현재 틱
        current_sqrt_price: 현재 √가격
        liquidity_delta: 유동성 변화량
        liquidity_sign: True면 예치 (올림), False면 인출 (내림)
        upper_tick: 상단 틱
        lower_tick: 하단 틱

    Returns:
        (amount_x, amount_y, update_liquidity)
        update_liquidity는 현재 틱이 범위 안에 있어 활성 유동성이 바뀌어야 하는지 여부

    Raises:
        InvalidTickIndexOrTickSpacing: upper_tick < lower_tick
    """
    if upper_tick < lower_tick:
        raise InvalidTickIndexOrTickSpacing(
            f"상단 틱이 하단 틱보다 작습니다: lower={lower_tick}, upper={upper_tick}"
        )

    amount_x = TokenAmount(0)
    amount_y = TokenAmount(0)
    update_liquidity = False

    if current_tick_index < lower_tick:
        amount_x = get_delta_x(
            tick_to_sqrt_price(lower_tick),
            tick_to_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )
    elif current_tick_index < upper_tick:
        amount_x = get_delta_x(
            current_sqrt_price,
            tick_to_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )
        amount_y = get_delta_y(
            tick_to_sqrt_price(lower_tick),
            current_sqrt_price,
            liquidity_delta,
            liquidity_sign,
        )
        update_liquidity = True
    else:
        amount_y = get_delta_y(
            tick_to_sqrt_price(lower_tick),
            tick_to_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )

    return amount_x, amount_y, update_liquidity


def calculate_max_liquidity_per_tick(tick_spacing: int) -> Liquidity:
    """틱 하나가 가질 수 있는 최대 유동성

    모든 초기화 가능한 틱이 최대치를 가져도 활성 유동성이 128비트를 넘지 않도록 제한합니다.
    """
    ticks_amount = (2 * MAX_TICK + 1) // tick_spacing
    return Liquidity(U128_MAX // ticks_amount)


def check_ticks(lower_tick: int, upper_tick: int, tick_spacing: int) -> None:
    """포지션 범위 검증

    Raises:
        InvalidTickIndexOrTickSpacing: lower >= upper 이거나 개별 틱이 유효하지 않은 경우
    """
    if lower_tick >= upper_tick:
        raise InvalidTickIndexOrTickSpacing(
            f"하단 틱은 상단 틱보다 작아야 합니다: lower={lower_tick}, upper={upper_tick}"
        )
    check_tick(lower_tick, tick_spacing)
    check_tick(upper_tick, tick_spacing)


def calculate_min_amount_out(expected_amount_out: TokenAmount, slippage: Percentage) -> TokenAmount:
    """슬리피지를 반영한 최소 수령량 (올림)"""
    return expected_amount_out.mul_up(Percentage.one().sub(slippage))
