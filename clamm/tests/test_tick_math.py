"""
Tick Math 테스트

tick_math.py의 함수들을 테스트합니다.
정수 연산 결과를 고정 벡터와 비교하여 정확도를 검증합니다.
"""

import pytest

from ..constants import MAX_SQRT_PRICE, MAX_TICK, MIN_SQRT_PRICE, MIN_TICK
from ..errors import InvalidSqrtPrice, InvalidTick, InvalidTickIndexOrTickSpacing
from ..math.scaled import Price, SqrtPrice
from ..math.tick_math import (
    align_tick_to_spacing,
    check_tick,
    check_tick_to_sqrt_price_relationship,
    get_max_sqrt_price,
    get_max_tick,
    get_min_sqrt_price,
    get_min_tick,
    sqrt_price_to_price,
    sqrt_price_to_tick,
    tick_to_price,
    tick_to_sqrt_price,
)

SQRT_PRICE_VECTORS = [
    (0, 10 ** 24),
    (1, 1000049998750000000000000),
    (-1, 999950003749000000000000),
    (10, 1000500100010000000000000),
    (-10, 999500149965000000000000),
    (100, 1005012269622000000000000),
    (20000, 2718145925979000000000000),
    (-20000, 367897834491000000000000),
    (100000, 148376062691279000000000000),
    (-100000, 6739631594000000000000),
    (200000, 22015455979766288000000000000),
    (-200000, 45422634000000000000),
    (221800, 65476431569071896000000000000),
    (-221800, 15272671000000000000),
    (221810, 65509176333123237000000000000),
    (-221810, 15265036000000000000),
]


class TestTickToSqrtPrice:
    """tick_to_sqrt_price 테스트"""

    @pytest.mark.parametrize("tick,expected", SQRT_PRICE_VECTORS)
    def test_vectors(self, tick, expected):
        """고정 벡터와 비트 단위로 일치"""
        assert tick_to_sqrt_price(tick).v == expected

    def test_min_tick(self):
        """최소 틱에서의 √가격"""
        assert tick_to_sqrt_price(MIN_TICK).v == MIN_SQRT_PRICE

    def test_max_tick(self):
        """최대 틱에서의 √가격"""
        assert tick_to_sqrt_price(MAX_TICK).v == MAX_SQRT_PRICE

    def test_fixed_point_precision(self):
        """12자리에서 계산되어 하위 12자리는 항상 0"""
        for tick in (1, -1, 777, -777, 150001, -150001, MAX_TICK, MIN_TICK):
            assert tick_to_sqrt_price(tick).v % 10 ** 12 == 0

    def test_bound_constants(self):
        """경계 √가격 상수 값"""
        assert MIN_SQRT_PRICE == 15258932000000000000
        assert MAX_SQRT_PRICE == 65535383934512647000000000000

    def test_strictly_monotonic(self):
        """틱이 커지면 √가격도 커짐"""
        previous = tick_to_sqrt_price(-1000)
        for tick in range(-999, 1000):
            current = tick_to_sqrt_price(tick)
            assert current > previous
            previous = current

    def test_invalid_tick_too_low(self):
        """유효 범위를 벗어난 틱 (너무 낮음)"""
        with pytest.raises(InvalidTick):
            tick_to_sqrt_price(MIN_TICK - 1)

    def test_invalid_tick_too_high(self):
        """유효 범위를 벗어난 틱 (너무 높음)"""
        with pytest.raises(ValueError):
            tick_to_sqrt_price(MAX_TICK + 1)


class TestSqrtPriceToTick:
    """sqrt_price_to_tick 테스트"""

    @pytest.mark.parametrize("tick,sqrt_price", SQRT_PRICE_VECTORS)
    def test_vectors(self, tick, sqrt_price):
        """고정 벡터의 역변환"""
        assert sqrt_price_to_tick(SqrtPrice(sqrt_price)) == tick

    def test_round_trip_sampled(self):
        """tick → √가격 → tick 왕복"""
        ticks = list(range(MIN_TICK, MAX_TICK + 1, 997)) + [MAX_TICK, -1, 0, 1]
        for tick in ticks:
            assert sqrt_price_to_tick(tick_to_sqrt_price(tick)) == tick

    def test_bounds(self):
        """경계 √가격"""
        assert sqrt_price_to_tick(SqrtPrice(MIN_SQRT_PRICE)) == MIN_TICK
        assert sqrt_price_to_tick(SqrtPrice(MAX_SQRT_PRICE)) == MAX_TICK

    def test_floor_between_ticks(self):
        """두 틱 사이의 √가격은 아래 틱으로 내림"""
        for tick in (-150000, -20001, -7, 0, 3, 45000, 200001):
            sqrt_price = tick_to_sqrt_price(tick)
            assert sqrt_price_to_tick(SqrtPrice(sqrt_price.v + 1)) == tick
            assert sqrt_price_to_tick(SqrtPrice(sqrt_price.v - 1)) == tick - 1

    def test_tick_spacing_alignment(self):
        """tick_spacing 배수로 내림 정렬 (음수 포함)"""
        assert sqrt_price_to_tick(tick_to_sqrt_price(-15), 10) == -20
        assert sqrt_price_to_tick(tick_to_sqrt_price(15), 10) == 10
        assert sqrt_price_to_tick(tick_to_sqrt_price(-10), 10) == -10

    def test_invalid_sqrt_price(self):
        """범위를 벗어난 √가격"""
        with pytest.raises(InvalidSqrtPrice):
            sqrt_price_to_tick(SqrtPrice(MIN_SQRT_PRICE - 1))
        with pytest.raises(InvalidSqrtPrice):
            sqrt_price_to_tick(SqrtPrice(MAX_SQRT_PRICE + 1))


class TestTickRange:
    """tick_spacing별 틱 범위 테스트"""

    def test_align_tick_to_spacing(self):
        """음수 틱 정렬은 floor"""
        assert align_tick_to_spacing(-15, 10) == -20
        assert align_tick_to_spacing(15, 10) == 10
        assert align_tick_to_spacing(-20, 10) == -20

    def test_max_min_tick(self):
        """spacing 배수 중 가장 큰/작은 틱"""
        assert get_max_tick(1) == MAX_TICK
        assert get_max_tick(10) == 221810
        assert get_min_tick(10) == -221810
        assert get_max_tick(100) == 221800

    def test_max_min_sqrt_price(self):
        """spacing별 경계 √가격"""
        assert get_max_sqrt_price(10).v == 65509176560173975483288751025
        assert get_min_sqrt_price(10).v == 15265036938472918240
        assert get_max_sqrt_price(1).v == MAX_SQRT_PRICE


class TestCheckTick:
    """check_tick 테스트"""

    def test_valid(self):
        """spacing 배수이고 범위 안이면 통과"""
        check_tick(0, 10)
        check_tick(221810, 10)
        check_tick(-221810, 10)

    def test_not_multiple(self):
        """spacing 배수가 아닌 틱"""
        with pytest.raises(InvalidTickIndexOrTickSpacing):
            check_tick(5, 10)

    def test_out_of_range(self):
        """범위를 벗어난 틱"""
        with pytest.raises(InvalidTickIndexOrTickSpacing):
            check_tick(221820, 10)


class TestTickToSqrtPriceRelationship:
    """check_tick_to_sqrt_price_relationship 테스트"""

    def test_inside_interval(self):
        """[tick, tick + spacing) 구간 안"""
        assert check_tick_to_sqrt_price_relationship(0, 10, tick_to_sqrt_price(0))
        assert check_tick_to_sqrt_price_relationship(0, 10, tick_to_sqrt_price(9))

    def test_upper_bound_excluded(self):
        """구간 상단은 제외"""
        assert not check_tick_to_sqrt_price_relationship(0, 10, tick_to_sqrt_price(10))

    def test_top_tick(self):
        """최상단 틱은 정확히 같아야 함"""
        assert check_tick_to_sqrt_price_relationship(221810, 10, tick_to_sqrt_price(221810))
        assert not check_tick_to_sqrt_price_relationship(
            221810, 10, SqrtPrice(tick_to_sqrt_price(221810).v + 1)
        )


class TestPrice:
    """가격 변환 테스트"""

    def test_tick_0(self):
        """틱 0에서 가격 1"""
        assert tick_to_price(0) == Price.one()

    def test_price_is_square(self):
        """가격은 √가격의 제곱"""
        assert float(tick_to_price(20000)) == pytest.approx(1.0001 ** 20000, rel=1e-8)

    def test_sqrt_price_to_price(self):
        """√가격 1.5 → 가격 2.25"""
        assert sqrt_price_to_price(SqrtPrice.from_decimal("1.5")) == Price.from_decimal("2.25")
