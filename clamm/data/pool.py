"""
Pool 상태와 전이 규칙

Global State (백서 Section 6.2, Table 1):
- liquidity: 현재 가격에서 활성화된 총 유동성 (L)
- sqrt_price: 현재 √가격
- current_tick_index: 현재 틱 (i_c), tick_spacing 배수로 내림 정렬
- fee_growth_global_x / y: 유동성 단위당 누적 수수료 (f_g)
- fee_protocol_token_x / y: 프로토콜 몫으로 적립된 수수료

엔진은 Pool 값을 받아서 수정된 값을 돌려줄 뿐, 저장은 호출자가 담당합니다.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple

from ..errors import (
    InvalidInitSqrtPrice,
    InvalidInitTick,
    InvalidTickIndexOrTickSpacing,
    TickNotFound,
)
from ..math.liquidity_math import calculate_amount_delta
from ..math.scaled import FeeGrowth, Liquidity, Percentage, SqrtPrice, TokenAmount
from ..math.swap_math import SwapStep, is_enough_amount_to_change_price
from ..math.tick_math import (
    check_tick,
    check_tick_to_sqrt_price_relationship,
    sqrt_price_to_tick,
    tick_to_sqrt_price,
)
from .tick import Tick
from .types import FeeTier

logger = logging.getLogger(__name__)


@dataclass
class Pool:
    """풀 상태"""
    liquidity: Liquidity = field(default_factory=Liquidity)
    sqrt_price: SqrtPrice = field(default_factory=SqrtPrice.one)
    current_tick_index: int = 0
    fee_growth_global_x: FeeGrowth = field(default_factory=FeeGrowth)
    fee_growth_global_y: FeeGrowth = field(default_factory=FeeGrowth)
    fee_protocol_token_x: TokenAmount = field(default_factory=TokenAmount)
    fee_protocol_token_y: TokenAmount = field(default_factory=TokenAmount)
    start_timestamp: int = 0
    last_timestamp: int = 0
    fee_receiver: Any = None

    @classmethod
    def create(
        cls,
        init_tick: int,
        current_timestamp: int,
        fee_receiver: Any,
        tick_spacing: int = 1,
        init_sqrt_price: Optional[SqrtPrice] = None,
    ) -> "Pool":
        """새 풀 생성

        Args:
            init_tick: 초기 틱 (tick_spacing 배수)
            current_timestamp: 생성 시각
            fee_receiver: 프로토콜 수수료 수령자
            tick_spacing: 틱 간격
            init_sqrt_price: 초기 √가격. 생략하면 init_tick의 √가격

        Raises:
            InvalidInitTick: init_tick이 범위 밖이거나 spacing 배수가 아닌 경우
            InvalidInitSqrtPrice: init_sqrt_price가 [init_tick, init_tick + spacing) 밖인 경우
        """
        try:
            check_tick(init_tick, tick_spacing)
        except InvalidTickIndexOrTickSpacing as e:
            raise InvalidInitTick(f"유효하지 않은 초기 틱: {init_tick}") from e

        if init_sqrt_price is None:
            init_sqrt_price = tick_to_sqrt_price(init_tick)
        elif not check_tick_to_sqrt_price_relationship(init_tick, tick_spacing, init_sqrt_price):
            raise InvalidInitSqrtPrice(
                f"초기 √가격 {init_sqrt_price}이 틱 {init_tick} 구간에 속하지 않습니다"
            )

        return cls(
            sqrt_price=init_sqrt_price,
            current_tick_index=init_tick,
            start_timestamp=current_timestamp,
            last_timestamp=current_timestamp,
            fee_receiver=fee_receiver,
        )

    def copy(self) -> "Pool":
        return replace(self)

    def update_fee_growth_global(
        self,
        amount: TokenAmount,
        in_x: bool,
        protocol_fee: Percentage,
    ) -> None:
        """스왑 수수료 적립

        protocol 몫 = amount × protocol_fee (올림), 나머지를 f_g에 누적합니다.
        활성 유동성이 0이면 분배할 LP가 없으므로 전액을 프로토콜 몫으로 적립합니다.
        """
        if amount.is_zero():
            return

        if self.liquidity.is_zero():
            protocol_amount = amount
            fee_growth = FeeGrowth(0)
        else:
            protocol_amount = amount.mul_up(protocol_fee)
            fee_growth = FeeGrowth.from_fee(self.liquidity, amount.sub(protocol_amount))

        if in_x:
            self.fee_growth_global_x = self.fee_growth_global_x.unchecked_add(fee_growth)
            self.fee_protocol_token_x = self.fee_protocol_token_x.add(protocol_amount)
        else:
            self.fee_growth_global_y = self.fee_growth_global_y.unchecked_add(fee_growth)
            self.fee_protocol_token_y = self.fee_protocol_token_y.add(protocol_amount)

    def update_liquidity(
        self,
        liquidity_delta: Liquidity,
        liquidity_sign: bool,
        upper_tick: int,
        lower_tick: int,
    ) -> Tuple[TokenAmount, TokenAmount]:
        """포지션 변경에 필요한 토큰 수량 계산 및 활성 유동성 갱신

        활성 유동성은 lower_tick <= current_tick < upper_tick 일 때만 바뀝니다.

        Returns:
            (x, y) - 예치 시 필요한 양 (올림) / 인출 시 돌려받는 양 (내림)
        """
        x, y, update_liquidity = calculate_amount_delta(
            self.current_tick_index,
            self.sqrt_price,
            liquidity_delta,
            liquidity_sign,
            upper_tick,
            lower_tick,
        )

        if update_liquidity:
            if liquidity_sign:
                self.liquidity = self.liquidity.add(liquidity_delta)
            else:
                self.liquidity = self.liquidity.sub(liquidity_delta)

        return x, y

    def cross_tick(
        self,
        ticks: Mapping[int, Tick],
        index: int,
        current_timestamp: int,
    ) -> Tick:
        """초기화된 틱을 넘으며 fee growth outside를 뒤집고 활성 유동성 조정

        입력 레코드는 수정하지 않고, 갱신된 Tick 사본을 반환합니다.

        Raises:
            TickNotFound: Tickmap에는 있지만 Tick 레코드가 없는 경우
        """
        if index not in ticks:
            raise TickNotFound(f"틱 레코드를 찾을 수 없습니다: {index}")

        tick = replace(ticks[index])
        tick.cross(self, current_timestamp)
        logger.debug("틱 크로싱: index=%d, liquidity=%s", index, self.liquidity)
        return tick

    def update_tick(
        self,
        step: SwapStep,
        swap_limit: SqrtPrice,
        limiting_tick: Optional[Tuple[int, bool]],
        ticks: Mapping[int, Tick],
        remaining_amount: TokenAmount,
        by_amount_in: bool,
        x_to_y: bool,
        current_timestamp: int,
        protocol_fee: Percentage,
        fee_tier: FeeTier,
    ) -> Tuple[TokenAmount, TokenAmount, Optional[Tick]]:
        """스텝 이후 현재 틱 갱신 (필요하면 틱 크로싱)

        스텝이 경계 틱에 정확히 도달한 경우:
        - 위로 가는 스왑이거나 남은 양으로 가격을 더 움직일 수 있으면 틱을 넘습니다.
        - 아래로 가는 스왑에서 남은 양이 가격을 움직이지 못하면, 입력 기준일 때 남은 양은
          수수료로 흡수되고 스왑이 끝납니다.

        Returns:
            (absorbed_amount, remaining_amount, crossed_tick)
            crossed_tick은 실제로 넘은 초기화 틱의 갱신된 사본 (없으면 None)

        Raises:
            TickNotFound: 초기화된 경계 틱의 레코드가 없는 경우
        """
        absorbed = TokenAmount(0)
        crossed: Optional[Tick] = None

        if limiting_tick is None or step.next_sqrt_price != swap_limit:
            self.current_tick_index = sqrt_price_to_tick(step.next_sqrt_price, fee_tier.tick_spacing)
            return absorbed, remaining_amount, crossed

        index, initialized = limiting_tick
        is_enough_amount_to_cross = is_enough_amount_to_change_price(
            remaining_amount,
            step.next_sqrt_price,
            self.liquidity,
            fee_tier.fee,
            by_amount_in,
            x_to_y,
        )

        if not x_to_y or is_enough_amount_to_cross:
            if initialized:
                crossed = self.cross_tick(ticks, index, current_timestamp)
        elif not remaining_amount.is_zero():
            if by_amount_in:
                self.update_fee_growth_global(remaining_amount, x_to_y, protocol_fee)
                absorbed = remaining_amount
            remaining_amount = TokenAmount(0)

        # 가격이 내려가는 방향이면 현재 틱은 항상 가격보다 아래에 있어야 함
        if x_to_y and is_enough_amount_to_cross:
            self.current_tick_index = index - fee_tier.tick_spacing
        else:
            self.current_tick_index = index

        return absorbed, remaining_amount, crossed

    def withdraw_protocol_fee(self) -> Tuple[TokenAmount, TokenAmount]:
        """적립된 프로토콜 수수료를 돌려주고 0으로 초기화"""
        amounts = (self.fee_protocol_token_x, self.fee_protocol_token_y)
        self.fee_protocol_token_x = TokenAmount(0)
        self.fee_protocol_token_y = TokenAmount(0)
        return amounts

    def set_fee_receiver(self, fee_receiver: Any) -> None:
        self.fee_receiver = fee_receiver

    @classmethod
    def from_dict(cls, data: dict) -> "Pool":
        return cls(
            liquidity=Liquidity(int(data.get("liquidity", 0))),
            sqrt_price=SqrtPrice(int(data["sqrtPrice"])),
            current_tick_index=int(data["currentTickIndex"]),
            fee_growth_global_x=FeeGrowth(int(data.get("feeGrowthGlobalX", 0))),
            fee_growth_global_y=FeeGrowth(int(data.get("feeGrowthGlobalY", 0))),
            fee_protocol_token_x=TokenAmount(int(data.get("feeProtocolTokenX", 0))),
            fee_protocol_token_y=TokenAmount(int(data.get("feeProtocolTokenY", 0))),
            start_timestamp=int(data.get("startTimestamp", 0)),
            last_timestamp=int(data.get("lastTimestamp", 0)),
            fee_receiver=data.get("feeReceiver"),
        )
