"""
Tick Math - Tick ↔ SqrtPrice 변환

틱 인덱스와 24자리 고정소수점 √가격 사이의 정확한 정수 변환.

References:
- 백서 Section 6.1: Ticks and Tick Spacing
- Binary exponentiation / 고정소수점 log2 근사

핵심 공식:
    price = 1.0001^tick
    sqrt_price = 1.0001^(tick/2)
    tick = log_√1.0001(sqrt_price) = log2(sqrt_price) / log2(√1.0001)
"""

from typing import Tuple

from ..constants import MAX_SQRT_PRICE, MAX_TICK, MIN_SQRT_PRICE, MIN_TICK
from ..errors import InvalidSqrtPrice, InvalidTick, InvalidTickIndexOrTickSpacing
from .scaled import FixedPoint, Price, SqrtPrice

ONE: int = 10 ** SqrtPrice.SCALE

# 1.0001^(2^k / 2), k = 0..17 (FixedPoint, scale 12)
_SQRT_POWERS: Tuple[int, ...] = (
    1000049998750,
    1000100000000,
    1000200010000,
    1000400060004,
    1000800280056,
    1001601200560,
    1003204964963,
    1006420201726,
    1012881622442,
    1025929181080,
    1052530684591,
    1107820842005,
    1227267017980,
    1506184333421,
    2268591246242,
    5146506242525,
    26486526504348,
    701536086265529,
)

# log2 근사 (Q64.64)
_LOG2_SCALE: int = 64
_LOG2_ONE: int = 1 << _LOG2_SCALE
_LOG2_TWO: int = _LOG2_ONE << 1
_LOG2_DOUBLE_ONE: int = _LOG2_ONE * _LOG2_ONE
_LOG2_ACCURACY: int = 1 << 17

# log2(√1.0001) * 2^64
_LOG2_SQRT_10001: int = 1330584781654116
# 음수 방향 반올림 보정
_LOG2_NEGATIVE_MAX_LOSE: int = 1330580000000000 * 7 // 9

# 로그 근사 후 확인하는 이웃 틱 범위
_TICK_CORRECTION_WIDTH: int = 2


def tick_to_sqrt_price(tick: int) -> SqrtPrice:
    """틱에서 √가격 계산

    |tick|의 각 비트마다 미리 계산된 1.0001^(2^k/2)를 곱하는 binary exponentiation.
    곱셈과 음수 틱의 역수는 12자리 FixedPoint에서 내림으로 계산하고,
    결과를 SqrtPrice 24자리로 확장합니다 (하위 12자리는 항상 0).

    Args:
        tick: 틱 인덱스 (-221818 ~ 221818)

    Returns:
        SqrtPrice (scale 24)

    Raises:
        InvalidTick: 틱이 유효 범위를 벗어난 경우
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidTick(f"틱이 유효 범위를 벗어났습니다: {tick} (범위: {MIN_TICK} ~ {MAX_TICK})")

    abs_tick = abs(tick)
    sqrt_price = FixedPoint.one()
    for bit, power in enumerate(_SQRT_POWERS):
        if abs_tick & (1 << bit):
            sqrt_price = sqrt_price.mul(FixedPoint(power))

    if tick < 0:
        sqrt_price = FixedPoint.one().div(sqrt_price)

    return sqrt_price.rescale(SqrtPrice)


def _log2_floor(value: int) -> int:
    msb = 0
    if value >= 1 << 64:
        value >>= 64
        msb |= 64
    if value >= 1 << 32:
        value >>= 32
        msb |= 32
    if value >= 1 << 16:
        value >>= 16
        msb |= 16
    if value >= 1 << 8:
        value >>= 8
        msb |= 8
    if value >= 1 << 4:
        value >>= 4
        msb |= 4
    if value >= 1 << 2:
        value >>= 2
        msb |= 2
    if value >= 1 << 1:
        msb |= 1
    return msb


def _log2_iterative_approximation_x64(sqrt_price_x64: int) -> Tuple[bool, int]:
    """Q64.64 값의 log2를 (부호, |log2|) 형태로 근사"""
    sign = True
    if sqrt_price_x64 < _LOG2_ONE:
        sign = False
        sqrt_price_x64 = _LOG2_DOUBLE_ONE // (sqrt_price_x64 + 1)

    log2_floor = _log2_floor(sqrt_price_x64 >> _LOG2_SCALE)
    result = log2_floor << _LOG2_SCALE
    y = sqrt_price_x64 >> log2_floor

    if y == _LOG2_ONE:
        return sign, result

    delta = _LOG2_ONE >> 1
    while delta > _LOG2_ACCURACY:
        y = y * y >> _LOG2_SCALE
        if y >= _LOG2_TWO:
            result |= delta
            y >>= 1
        delta >>= 1

    return sign, result


def _estimate_tick(sqrt_price: int) -> int:
    sqrt_price_x64 = sqrt_price * _LOG2_ONE // ONE
    sign, log2 = _log2_iterative_approximation_x64(sqrt_price_x64)
    if sign:
        return log2 // _LOG2_SQRT_10001
    return -((log2 + _LOG2_NEGATIVE_MAX_LOSE) // _LOG2_SQRT_10001)


def sqrt_price_to_tick(sqrt_price: SqrtPrice, tick_spacing: int = 1) -> int:
    """√가격에서 틱 계산 (floor)

    고정소수점 log2로 틱을 추정한 뒤, 추정치 주변 ±2 틱을 tick_to_sqrt_price로
    직접 확인해서 tick_to_sqrt_price(t) <= sqrt_price 인 가장 큰 t를 선택합니다.
    결과는 tick_spacing 배수로 내림 정렬됩니다.

    Args:
        sqrt_price: SqrtPrice
        tick_spacing: 틱 간격 (기본 1)

    Returns:
        틱 인덱스

    Raises:
        InvalidSqrtPrice: √가격이 유효 범위를 벗어난 경우
    """
    if sqrt_price.v < MIN_SQRT_PRICE or sqrt_price.v > MAX_SQRT_PRICE:
        raise InvalidSqrtPrice(
            f"√가격이 유효 범위를 벗어났습니다: {sqrt_price.v} (범위: {MIN_SQRT_PRICE} ~ {MAX_SQRT_PRICE})"
        )

    estimate = _estimate_tick(sqrt_price.v)
    low = max(MIN_TICK, estimate - _TICK_CORRECTION_WIDTH)
    high = min(MAX_TICK, estimate + _TICK_CORRECTION_WIDTH)

    tick = low
    for candidate in range(high, low - 1, -1):
        if tick_to_sqrt_price(candidate).v <= sqrt_price.v:
            tick = candidate
            break

    return align_tick_to_spacing(tick, tick_spacing)


def align_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """틱을 tick_spacing 배수로 내림 (음수 포함 floor)

    Example:
        align_tick_to_spacing(-15, 10) == -20
    """
    return (tick // tick_spacing) * tick_spacing


def get_max_tick(tick_spacing: int) -> int:
    """tick_spacing 배수 중 가장 큰 유효 틱"""
    return (MAX_TICK // tick_spacing) * tick_spacing


def get_min_tick(tick_spacing: int) -> int:
    return -get_max_tick(tick_spacing)


def get_max_sqrt_price(tick_spacing: int) -> SqrtPrice:
    return tick_to_sqrt_price(get_max_tick(tick_spacing))


def get_min_sqrt_price(tick_spacing: int) -> SqrtPrice:
    return tick_to_sqrt_price(get_min_tick(tick_spacing))


def check_tick(tick_index: int, tick_spacing: int) -> None:
    """풀 경계로 사용할 수 있는 틱인지 검증

    Raises:
        InvalidTickIndexOrTickSpacing: 범위 밖이거나 tick_spacing 배수가 아닌 경우
    """
    min_tick = get_min_tick(tick_spacing)
    max_tick = get_max_tick(tick_spacing)
    if tick_index % tick_spacing != 0 or tick_index < min_tick or tick_index > max_tick:
        raise InvalidTickIndexOrTickSpacing(
            f"유효하지 않은 틱: {tick_index} (spacing={tick_spacing}, 범위: {min_tick} ~ {max_tick})"
        )


def check_tick_to_sqrt_price_relationship(
    tick_index: int,
    tick_spacing: int,
    sqrt_price: SqrtPrice,
) -> bool:
    """√가격이 [tick, tick + spacing) 구간에 속하는지 확인

    최상단 틱은 다음 구간이 없으므로 해당 틱의 √가격과 정확히 같아야 합니다.
    """
    if tick_index + tick_spacing > MAX_TICK:
        return sqrt_price == tick_to_sqrt_price(get_max_tick(tick_spacing))

    lower = tick_to_sqrt_price(tick_index)
    upper = tick_to_sqrt_price(tick_index + tick_spacing)
    return lower <= sqrt_price < upper


def sqrt_price_to_price(sqrt_price: SqrtPrice) -> Price:
    """√가격 → 가격 (내림)"""
    return Price(sqrt_price.v * sqrt_price.v // ONE)


def tick_to_price(tick: int) -> Price:
    return sqrt_price_to_price(tick_to_sqrt_price(tick))
