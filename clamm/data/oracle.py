"""
Oracle - 가격 기록 링 버퍼

고정 크기(256) 배열에 (timestamp, sqrt_price) 관측값을 순환 저장합니다.
같은 timestamp의 두 번째 기록은 마지막 슬롯을 덮어씁니다 (시간 단위당 1개).
TWAP 같은 시간 가중 조회는 head에서 거꾸로 훑는 외부 로직이 담당합니다.
"""

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional

import pandas as pd

from ..constants import ORACLE_SIZE
from ..errors import InvalidOracleTimestamp
from ..math.scaled import SqrtPrice
from ..math.tick_math import sqrt_price_to_price


@dataclass(frozen=True)
class Record:
    """가격 관측값"""
    timestamp: int = 0
    price: SqrtPrice = field(default_factory=SqrtPrice)


@dataclass
class Oracle:
    """가격 관측 링 버퍼

    Attributes:
        data: size 길이의 Record 배열
        head: 가장 최근 기록의 슬롯
        amount: 저장된 기록 수 (<= size)
        size: 버퍼 크기
    """
    data: List[Record] = field(default_factory=lambda: [Record() for _ in range(ORACLE_SIZE)])
    head: int = 0
    amount: int = 0
    size: int = ORACLE_SIZE

    @classmethod
    def new(cls) -> "Oracle":
        return cls()

    def copy(self) -> "Oracle":
        return replace(self, data=list(self.data))

    def latest(self) -> Optional[Record]:
        if self.amount == 0:
            return None
        return self.data[self.head]

    def update(self, timestamp: int, sqrt_price: SqrtPrice) -> None:
        """관측값 기록

        Raises:
            InvalidOracleTimestamp: 마지막 기록보다 이른 timestamp
        """
        latest = self.latest()
        if latest is not None:
            if timestamp < latest.timestamp:
                raise InvalidOracleTimestamp(
                    f"timestamp가 감소했습니다: {timestamp} < {latest.timestamp}"
                )
            if timestamp == latest.timestamp:
                self.data[self.head] = Record(timestamp=timestamp, price=sqrt_price)
                return

        self.head = (self.head + 1) % self.size
        self.data[self.head] = Record(timestamp=timestamp, price=sqrt_price)
        self.amount = min(self.amount + 1, self.size)

    def records(self) -> Iterator[Record]:
        """저장된 기록을 오래된 것부터"""
        start = self.head - self.amount + 1
        for offset in range(self.amount):
            yield self.data[(start + offset) % self.size]

    def to_frame(self) -> pd.DataFrame:
        """기록을 DataFrame으로 (timestamp, sqrt_price, price)"""
        rows = [
            {
                "timestamp": record.timestamp,
                "sqrt_price": float(record.price),
                "price": float(sqrt_price_to_price(record.price)),
            }
            for record in self.records()
        ]
        return pd.DataFrame(rows, columns=["timestamp", "sqrt_price", "price"])
