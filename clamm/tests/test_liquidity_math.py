"""
Liquidity Math 테스트

유동성 ↔ 토큰 수량 변환과 반올림 방향을 테스트합니다.
"""

import pytest

from ..constants import U128_MAX
from ..errors import CastOverflow, InvalidTickIndexOrTickSpacing
from ..math.liquidity_math import (
    calculate_amount_delta,
    calculate_max_liquidity_per_tick,
    calculate_min_amount_out,
    check_ticks,
    get_delta_x,
    get_delta_y,
    get_liquidity,
    get_liquidity_by_x,
    get_liquidity_by_y,
)
from ..math.scaled import Liquidity, Percentage, SqrtPrice, TokenAmount
from ..math.tick_math import tick_to_sqrt_price

LIQUIDITY = Liquidity(10 ** 15)


class TestGetDeltas:
    """get_delta_x / get_delta_y 테스트"""

    def test_delta_x_rounding(self):
        """x 수량: 올림은 내림보다 1 크거나 같음"""
        low, high = tick_to_sqrt_price(0), tick_to_sqrt_price(10)
        assert get_delta_x(low, high, LIQUIDITY, True) == TokenAmount(499851)
        assert get_delta_x(low, high, LIQUIDITY, False) == TokenAmount(499850)

    def test_delta_y_rounding(self):
        """y 수량 올림/내림"""
        low, high = tick_to_sqrt_price(-10), tick_to_sqrt_price(0)
        assert get_delta_y(low, high, LIQUIDITY, True) == TokenAmount(499851)
        assert get_delta_y(low, high, LIQUIDITY, False) == TokenAmount(499850)

    def test_order_independent(self):
        """두 √가격의 순서와 무관"""
        low, high = tick_to_sqrt_price(-10), tick_to_sqrt_price(10)
        assert get_delta_x(low, high, LIQUIDITY, True) == get_delta_x(high, low, LIQUIDITY, True)
        assert get_delta_y(low, high, LIQUIDITY, False) == get_delta_y(high, low, LIQUIDITY, False)

    def test_same_price(self):
        """같은 가격이면 0"""
        price = tick_to_sqrt_price(100)
        assert get_delta_x(price, price, LIQUIDITY, True).is_zero()
        assert get_delta_y(price, price, LIQUIDITY, True).is_zero()

    def test_overflow(self):
        """결과가 128비트를 넘으면 CastOverflow"""
        with pytest.raises(CastOverflow):
            get_delta_y(
                SqrtPrice(1),
                SqrtPrice(U128_MAX),
                Liquidity(U128_MAX),
                False,
            )


class TestGetLiquidityByX:
    """get_liquidity_by_x 테스트"""

    def test_deposit_round_trip(self):
        """X 예치 → 유동성 → amount delta 재현 (fee 0.003 / spacing 10)"""
        x = TokenAmount(1_000_000)
        current = tick_to_sqrt_price(0)
        liquidity, y = get_liquidity_by_x(x, -100000, 100000, current, True, 10)

        assert liquidity == Liquidity(1006785362437)
        assert y == TokenAmount(1_000_000)

        amount_x, amount_y, update_liquidity = calculate_amount_delta(
            0, current, liquidity, True, 100000, -100000
        )
        assert amount_x == x
        assert amount_y == y
        assert update_liquidity

    def test_round_trip_various_amounts(self):
        """다양한 X 수량에서도 X 재현"""
        current = tick_to_sqrt_price(0)
        for amount in (1, 7, 123456789):
            liquidity, _ = get_liquidity_by_x(TokenAmount(amount), -100000, 100000, current, True)
            amount_x, _, _ = calculate_amount_delta(0, current, liquidity, True, 100000, -100000)
            assert amount_x == TokenAmount(amount)

    def test_price_above_range(self):
        """현재 가격이 범위 위면 X로 유동성을 만들 수 없음"""
        liquidity, y = get_liquidity_by_x(
            TokenAmount(1000), -100, 100, tick_to_sqrt_price(200), True
        )
        assert liquidity.is_zero()
        assert y.is_zero()

    def test_price_below_range(self):
        """현재 가격이 범위 아래면 Y 불필요"""
        liquidity, y = get_liquidity_by_x(
            TokenAmount(1000), -100, 100, tick_to_sqrt_price(-200), True
        )
        assert not liquidity.is_zero()
        assert y.is_zero()


class TestGetLiquidityByY:
    """get_liquidity_by_y 테스트"""

    def test_price_below_range(self):
        """현재 가격이 범위 아래면 Y로 유동성을 만들 수 없음"""
        liquidity, x = get_liquidity_by_y(
            TokenAmount(1000), -100, 100, tick_to_sqrt_price(-200), True
        )
        assert liquidity.is_zero()
        assert x.is_zero()

    def test_price_above_range(self):
        """현재 가격이 범위 위면 X 불필요"""
        liquidity, x = get_liquidity_by_y(
            TokenAmount(1000), -100, 100, tick_to_sqrt_price(200), True
        )
        assert not liquidity.is_zero()
        assert x.is_zero()

    def test_in_range_requires_x(self):
        """범위 안이면 X도 필요"""
        liquidity, x = get_liquidity_by_y(
            TokenAmount(1_000_000), -100000, 100000, tick_to_sqrt_price(0), True
        )
        assert not liquidity.is_zero()
        assert x == TokenAmount(1_000_000)


class TestGetLiquidity:
    """get_liquidity 테스트"""

    def test_picks_smaller_liquidity(self):
        """범위 안에서는 더 작은 유동성을 선택"""
        current = tick_to_sqrt_price(0)
        x, y, liquidity = get_liquidity(
            TokenAmount(1_000_000), TokenAmount(10 ** 12), -100000, 100000, current, True
        )
        by_x, _ = get_liquidity_by_x(TokenAmount(1_000_000), -100000, 100000, current, True)
        assert liquidity == by_x
        assert x == TokenAmount(1_000_000)
        assert y <= TokenAmount(10 ** 12)

    def test_out_of_range_uses_one_token(self):
        """범위 아래에서는 X만 사용"""
        x, y, liquidity = get_liquidity(
            TokenAmount(1000), TokenAmount(1000), -100, 100, tick_to_sqrt_price(-200), True
        )
        assert x == TokenAmount(1000)
        assert y.is_zero()
        assert not liquidity.is_zero()


class TestCalculateAmountDelta:
    """calculate_amount_delta 테스트"""

    def test_below_range(self):
        """현재 틱이 범위 아래: X만"""
        x, y, update = calculate_amount_delta(
            -20, tick_to_sqrt_price(-20), LIQUIDITY, True, 10, 0
        )
        assert x == get_delta_x(tick_to_sqrt_price(0), tick_to_sqrt_price(10), LIQUIDITY, True)
        assert y.is_zero()
        assert not update

    def test_above_range(self):
        """현재 틱이 상단 틱 이상: Y만"""
        x, y, update = calculate_amount_delta(
            10, tick_to_sqrt_price(10), LIQUIDITY, True, 10, 0
        )
        assert x.is_zero()
        assert y == get_delta_y(tick_to_sqrt_price(0), tick_to_sqrt_price(10), LIQUIDITY, True)
        assert not update

    def test_in_range(self):
        """범위 안: 두 토큰 모두, 활성 유동성 갱신"""
        x, y, update = calculate_amount_delta(
            0, tick_to_sqrt_price(0), LIQUIDITY, True, 10, -10
        )
        assert x == TokenAmount(499851)
        assert y == TokenAmount(499851)
        assert update

    def test_withdraw_rounds_down(self):
        """인출은 내림"""
        x, y, _ = calculate_amount_delta(
            0, tick_to_sqrt_price(0), LIQUIDITY, False, 10, -10
        )
        assert x == TokenAmount(499850)
        assert y == TokenAmount(499850)

    def test_inverted_range(self):
        """상단 틱 < 하단 틱"""
        with pytest.raises(InvalidTickIndexOrTickSpacing):
            calculate_amount_delta(0, tick_to_sqrt_price(0), LIQUIDITY, True, -10, 10)


class TestLimits:
    """유동성 한도와 범위 검증 테스트"""

    def test_max_liquidity_per_tick(self):
        """틱당 최대 유동성"""
        assert calculate_max_liquidity_per_tick(1) == Liquidity(U128_MAX // 443637)
        assert calculate_max_liquidity_per_tick(10) == Liquidity(U128_MAX // 44363)

    def test_check_ticks(self):
        """하단 < 상단, spacing 배수"""
        check_ticks(-10, 10, 10)
        with pytest.raises(InvalidTickIndexOrTickSpacing):
            check_ticks(10, 10, 10)
        with pytest.raises(InvalidTickIndexOrTickSpacing):
            check_ticks(-15, 10, 10)

    def test_min_amount_out(self):
        """슬리피지 1%"""
        assert calculate_min_amount_out(
            TokenAmount(1000), Percentage.from_decimal("0.01")
        ) == TokenAmount(990)
