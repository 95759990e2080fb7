"""
Oracle 테스트

가격 기록 링 버퍼의 순환, 덮어쓰기, DataFrame 변환을 테스트합니다.
"""

import pytest

from ..constants import ORACLE_SIZE
from ..data.oracle import Oracle
from ..errors import InvalidOracleTimestamp
from ..math.scaled import SqrtPrice
from ..math.tick_math import tick_to_sqrt_price


class TestUpdate:
    """Oracle.update 테스트"""

    def test_empty(self):
        """새 Oracle은 비어 있음"""
        oracle = Oracle.new()
        assert oracle.amount == 0
        assert oracle.head == 0
        assert len(oracle.data) == ORACLE_SIZE
        assert oracle.latest() is None

    def test_first_record(self):
        """첫 기록"""
        oracle = Oracle()
        oracle.update(10, SqrtPrice.one())
        assert oracle.amount == 1
        assert oracle.latest().timestamp == 10
        assert oracle.latest().price == SqrtPrice.one()

    def test_wraps_after_300_updates(self):
        """300개 기록 후 마지막 256개만 유지"""
        oracle = Oracle()
        for i in range(300):
            oracle.update(i + 1, SqrtPrice(10 ** 24 + i))

        assert oracle.amount == 256
        assert oracle.head == 300 % 256
        timestamps = [record.timestamp for record in oracle.records()]
        assert timestamps == list(range(45, 301))
        assert oracle.latest().timestamp == 300

    def test_same_timestamp_overwrites(self):
        """같은 timestamp는 마지막 기록을 덮어씀"""
        oracle = Oracle()
        oracle.update(5, SqrtPrice.one())
        oracle.update(5, tick_to_sqrt_price(100))
        assert oracle.amount == 1
        assert oracle.latest().price == tick_to_sqrt_price(100)

    def test_decreasing_timestamp(self):
        """시간이 거꾸로 가면 InvalidOracleTimestamp"""
        oracle = Oracle()
        oracle.update(5, SqrtPrice.one())
        with pytest.raises(InvalidOracleTimestamp):
            oracle.update(4, SqrtPrice.one())

    def test_copy_is_independent(self):
        """copy 이후 원본은 변하지 않음"""
        oracle = Oracle()
        oracle.update(1, SqrtPrice.one())
        copied = oracle.copy()
        copied.update(2, SqrtPrice.one())
        assert oracle.amount == 1
        assert copied.amount == 2


class TestToFrame:
    """Oracle.to_frame 테스트"""

    def test_columns_and_order(self):
        """오래된 기록부터 DataFrame으로"""
        oracle = Oracle()
        oracle.update(1, SqrtPrice.one())
        oracle.update(2, tick_to_sqrt_price(20000))

        df = oracle.to_frame()
        assert list(df.columns) == ["timestamp", "sqrt_price", "price"]
        assert df["timestamp"].tolist() == [1, 2]
        assert df["price"].iloc[0] == pytest.approx(1.0)
        assert df["price"].iloc[1] == pytest.approx(1.0001 ** 20000, rel=1e-9)

    def test_empty_frame(self):
        """기록이 없으면 빈 DataFrame"""
        df = Oracle().to_frame()
        assert df.empty
        assert list(df.columns) == ["timestamp", "sqrt_price", "price"]
