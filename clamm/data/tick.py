"""
Tick 레코드

Tick-Indexed State (백서 Section 6.3, Table 2):
- liquidity_change / sign: 틱을 위로 넘을 때의 유동성 변화량 (ΔL)과 부호
- liquidity_gross: 이 틱을 경계로 사용하는 총 유동성
- fee_growth_outside_x / y: 틱 바깥쪽 누적 fee growth (f_o)
- seconds_outside: 틱 바깥쪽에서 흐른 시간
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import InvalidTickLiquidity
from ..math.scaled import FeeGrowth, Liquidity, SqrtPrice
from ..math.tick_math import tick_to_sqrt_price

if TYPE_CHECKING:
    from .pool import Pool


@dataclass
class Tick:
    """틱 경계 레코드

    sign=True 이면 틱을 위로 넘을 때 liquidity_change만큼 활성 유동성이 증가합니다.
    """
    index: int = 0
    sign: bool = True
    liquidity_change: Liquidity = field(default_factory=Liquidity)
    liquidity_gross: Liquidity = field(default_factory=Liquidity)
    sqrt_price: SqrtPrice = field(default_factory=SqrtPrice.one)
    fee_growth_outside_x: FeeGrowth = field(default_factory=FeeGrowth)
    fee_growth_outside_y: FeeGrowth = field(default_factory=FeeGrowth)
    seconds_outside: int = 0

    @property
    def liquidity_net(self) -> int:
        """부호 있는 ΔL (scale 6 정수)"""
        return self.liquidity_change.v if self.sign else -self.liquidity_change.v

    @classmethod
    def create(cls, index: int, pool: "Pool", current_timestamp: int) -> "Tick":
        """새 틱 초기화

        현재 틱 이하의 틱은 지금까지의 전역 값을 모두 "바깥(아래)"에서 발생한 것으로 간주합니다.
        """
        below_current_tick = index <= pool.current_tick_index

        return cls(
            index=index,
            sign=True,
            sqrt_price=tick_to_sqrt_price(index),
            fee_growth_outside_x=pool.fee_growth_global_x if below_current_tick else FeeGrowth(0),
            fee_growth_outside_y=pool.fee_growth_global_y if below_current_tick else FeeGrowth(0),
            seconds_outside=current_timestamp - pool.start_timestamp if below_current_tick else 0,
        )

    def cross(self, pool: "Pool", current_timestamp: int) -> None:
        """틱 크로싱: outside 값을 뒤집고 활성 유동성 조정

        f_o' = f_g - f_o

        위로 넘을 때는 ΔL을 더하고, 아래로 넘을 때는 뺍니다.
        pool.current_tick_index는 아직 크로싱 이전 값이어야 합니다.
        """
        self.fee_growth_outside_x = pool.fee_growth_global_x.unchecked_sub(self.fee_growth_outside_x)
        self.fee_growth_outside_y = pool.fee_growth_global_y.unchecked_sub(self.fee_growth_outside_y)

        seconds_passed = current_timestamp - pool.start_timestamp
        if seconds_passed < 0:
            raise ValueError(
                f"timestamp가 풀 생성 시점보다 이릅니다: {current_timestamp} < {pool.start_timestamp}"
            )
        self.seconds_outside = (seconds_passed - self.seconds_outside) % (1 << 64)

        pool.last_timestamp = current_timestamp

        if (pool.current_tick_index >= self.index) ^ self.sign:
            pool.liquidity = pool.liquidity.add(self.liquidity_change)
        else:
            pool.liquidity = pool.liquidity.sub(self.liquidity_change)

    def update(
        self,
        liquidity_delta: Liquidity,
        max_liquidity_per_tick: Liquidity,
        is_upper: bool,
        is_deposit: bool,
    ) -> None:
        """포지션 변경에 따른 gross / net 유동성 갱신

        하단 틱 예치는 ΔL 증가, 상단 틱 예치는 ΔL 감소 (인출은 반대).

        Raises:
            InvalidTickLiquidity: gross 유동성이 부족하거나 틱 최대치에 도달한 경우
        """
        self.liquidity_gross = self._calculate_new_liquidity_gross(
            is_deposit, liquidity_delta, max_liquidity_per_tick
        )
        self._update_liquidity_change(liquidity_delta, is_deposit ^ is_upper)

    def _update_liquidity_change(self, liquidity_delta: Liquidity, add: bool) -> None:
        if self.sign ^ add:
            if self.liquidity_change > liquidity_delta:
                self.liquidity_change = self.liquidity_change.sub(liquidity_delta)
            else:
                self.liquidity_change = liquidity_delta.sub(self.liquidity_change)
                self.sign = not self.sign
        else:
            self.liquidity_change = self.liquidity_change.add(liquidity_delta)

    def _calculate_new_liquidity_gross(
        self,
        sign: bool,
        liquidity_delta: Liquidity,
        max_liquidity_per_tick: Liquidity,
    ) -> Liquidity:
        if not sign and self.liquidity_gross < liquidity_delta:
            raise InvalidTickLiquidity(
                f"틱 {self.index}의 gross 유동성이 부족합니다: {self.liquidity_gross} < {liquidity_delta}"
            )

        if sign:
            new_liquidity = self.liquidity_gross.add(liquidity_delta)
        else:
            new_liquidity = self.liquidity_gross.sub(liquidity_delta)

        if sign and new_liquidity >= max_liquidity_per_tick:
            raise InvalidTickLiquidity(
                f"틱 {self.index}의 유동성이 최대치를 넘습니다: {new_liquidity} >= {max_liquidity_per_tick}"
            )
        return new_liquidity

    @classmethod
    def from_dict(cls, data: dict) -> "Tick":
        return cls(
            index=int(data["index"]),
            sign=bool(data.get("sign", True)),
            liquidity_change=Liquidity(int(data.get("liquidityChange", 0))),
            liquidity_gross=Liquidity(int(data.get("liquidityGross", 0))),
            sqrt_price=SqrtPrice(int(data["sqrtPrice"])) if "sqrtPrice" in data
            else tick_to_sqrt_price(int(data["index"])),
            fee_growth_outside_x=FeeGrowth(int(data.get("feeGrowthOutsideX", 0))),
            fee_growth_outside_y=FeeGrowth(int(data.get("feeGrowthOutsideY", 0))),
            seconds_outside=int(data.get("secondsOutside", 0)),
        )
