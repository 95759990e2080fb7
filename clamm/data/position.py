"""
Position 레코드

Position-Indexed State (백서 Section 6.4, Table 3):
- liquidity: 포지션의 유동성 (l)
- lower_tick_index / upper_tick_index: 범위 (i_l, i_u)
- fee_growth_inside_x / y: 마지막 갱신 시점의 범위 내 fee growth (f_r(t_0))
- tokens_owed_x / y: 미수령 수수료

포지션 변경은 Pool과 양쪽 경계 Tick을 함께 수정합니다. 호출자가 넘긴 객체가 갱신되며,
실패한 변경은 어떤 객체에도 반영되지 않습니다.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Tuple

from ..errors import EmptyPositionPokes, InsufficientLiquidity, PriceLimitReached
from ..math.fee_math import calculate_fee_growth_inside
from ..math.liquidity_math import calculate_max_liquidity_per_tick
from ..math.scaled import FeeGrowth, Liquidity, SqrtPrice, TokenAmount
from .pool import Pool
from .tick import Tick
from .types import PoolKey


@dataclass
class Position:
    pool_key: PoolKey
    lower_tick_index: int
    upper_tick_index: int
    liquidity: Liquidity = field(default_factory=Liquidity)
    fee_growth_inside_x: FeeGrowth = field(default_factory=FeeGrowth)
    fee_growth_inside_y: FeeGrowth = field(default_factory=FeeGrowth)
    tokens_owed_x: TokenAmount = field(default_factory=TokenAmount)
    tokens_owed_y: TokenAmount = field(default_factory=TokenAmount)
    last_block_number: int = 0
    created_at: int = 0

    @classmethod
    def create(
        cls,
        pool: Pool,
        pool_key: PoolKey,
        lower_tick: Tick,
        upper_tick: Tick,
        current_timestamp: int,
        liquidity_delta: Liquidity,
        slippage_limit_lower: SqrtPrice,
        slippage_limit_upper: SqrtPrice,
        block_number: int = 0,
    ) -> Tuple["Position", TokenAmount, TokenAmount]:
        """새 포지션 생성 및 유동성 예치

        Args:
            pool: 대상 풀 (활성 유동성이 갱신됨)
            pool_key: 풀 식별자
            lower_tick: 하단 경계 Tick (생성되어 있어야 함)
            upper_tick: 상단 경계 Tick
            current_timestamp: 현재 시각
            liquidity_delta: 예치할 유동성
            slippage_limit_lower: 허용 최저 √가격
            slippage_limit_upper: 허용 최고 √가격
            block_number: 생성 블록 번호

        Returns:
            (position, required_x, required_y)

        Raises:
            PriceLimitReached: 현재 가격이 슬리피지 범위를 벗어난 경우
        """
        if pool.sqrt_price < slippage_limit_lower or pool.sqrt_price > slippage_limit_upper:
            raise PriceLimitReached(
                f"현재 √가격 {pool.sqrt_price}이 허용 범위 [{slippage_limit_lower}, {slippage_limit_upper}] 밖입니다"
            )

        position = cls(
            pool_key=pool_key,
            lower_tick_index=lower_tick.index,
            upper_tick_index=upper_tick.index,
            last_block_number=block_number,
            created_at=current_timestamp,
        )
        required_x, required_y = position.modify(
            pool,
            upper_tick,
            lower_tick,
            liquidity_delta,
            True,
            current_timestamp,
            pool_key.fee_tier.tick_spacing,
        )
        return position, required_x, required_y

    def modify(
        self,
        pool: Pool,
        upper_tick: Tick,
        lower_tick: Tick,
        liquidity_delta: Liquidity,
        add: bool,
        current_timestamp: int,
        tick_spacing: int,
    ) -> Tuple[TokenAmount, TokenAmount]:
        """유동성 추가/제거

        틱 gross/net 유동성, 포지션 fee 스냅샷, 풀 활성 유동성을 순서대로 갱신합니다.
        계산은 사본에서 진행하고, 모두 성공한 경우에만 넘겨받은 객체에 반영합니다.

        Returns:
            (x, y) - 예치 시 필요한 양 / 인출 시 돌려받는 양
        """
        new_pool = pool.copy()
        new_lower = replace(lower_tick)
        new_upper = replace(upper_tick)
        new_position = replace(self)

        new_pool.last_timestamp = current_timestamp

        max_liquidity_per_tick = calculate_max_liquidity_per_tick(tick_spacing)
        new_lower.update(liquidity_delta, max_liquidity_per_tick, False, add)
        new_upper.update(liquidity_delta, max_liquidity_per_tick, True, add)

        fee_growth_inside_x, fee_growth_inside_y = calculate_fee_growth_inside(
            new_lower.index,
            new_lower.fee_growth_outside_x,
            new_lower.fee_growth_outside_y,
            new_upper.index,
            new_upper.fee_growth_outside_x,
            new_upper.fee_growth_outside_y,
            new_pool.current_tick_index,
            new_pool.fee_growth_global_x,
            new_pool.fee_growth_global_y,
        )

        new_position.update(add, liquidity_delta, fee_growth_inside_x, fee_growth_inside_y)

        amounts = new_pool.update_liquidity(liquidity_delta, add, new_upper.index, new_lower.index)

        _write_back(pool, new_pool)
        _write_back(lower_tick, new_lower)
        _write_back(upper_tick, new_upper)
        _write_back(self, new_position)
        return amounts

    def update(
        self,
        sign: bool,
        liquidity_delta: Liquidity,
        fee_growth_inside_x: FeeGrowth,
        fee_growth_inside_y: FeeGrowth,
    ) -> None:
        """미수령 수수료 정산 후 유동성과 fee 스냅샷 갱신

        Raises:
            EmptyPositionPokes: 유동성 0인 포지션에 0을 더하는 경우
            InsufficientLiquidity: 보유량보다 많이 인출하는 경우
        """
        if liquidity_delta.is_zero() and self.liquidity.is_zero():
            raise EmptyPositionPokes("유동성이 없는 포지션은 갱신할 수 없습니다")

        tokens_owed_x = fee_growth_inside_x.unchecked_sub(self.fee_growth_inside_x).to_fee(self.liquidity)
        tokens_owed_y = fee_growth_inside_y.unchecked_sub(self.fee_growth_inside_y).to_fee(self.liquidity)

        self.liquidity = self._calculate_new_liquidity(sign, liquidity_delta)
        self.fee_growth_inside_x = fee_growth_inside_x
        self.fee_growth_inside_y = fee_growth_inside_y

        self.tokens_owed_x = self.tokens_owed_x.add(tokens_owed_x)
        self.tokens_owed_y = self.tokens_owed_y.add(tokens_owed_y)

    def _calculate_new_liquidity(self, sign: bool, liquidity_delta: Liquidity) -> Liquidity:
        if not sign and self.liquidity < liquidity_delta:
            raise InsufficientLiquidity(
                f"포지션 유동성이 부족합니다: {self.liquidity} < {liquidity_delta}"
            )
        if sign:
            return self.liquidity.add(liquidity_delta)
        return self.liquidity.sub(liquidity_delta)

    def claim_fee(
        self,
        pool: Pool,
        upper_tick: Tick,
        lower_tick: Tick,
        current_timestamp: int,
    ) -> Tuple[TokenAmount, TokenAmount]:
        """누적 수수료 수령 (유동성 변화 없이 정산 후 0으로 초기화)"""
        self.modify(
            pool,
            upper_tick,
            lower_tick,
            Liquidity(0),
            True,
            current_timestamp,
            self.pool_key.fee_tier.tick_spacing,
        )

        owed = (self.tokens_owed_x, self.tokens_owed_y)
        self.tokens_owed_x = TokenAmount(0)
        self.tokens_owed_y = TokenAmount(0)
        return owed

    def remove(
        self,
        pool: Pool,
        current_timestamp: int,
        lower_tick: Tick,
        upper_tick: Tick,
    ) -> Tuple[TokenAmount, TokenAmount, bool, bool]:
        """전체 유동성 인출

        Returns:
            (amount_x, amount_y, deinitialize_lower_tick, deinitialize_upper_tick)
            amount에는 미수령 수수료가 포함됩니다. deinitialize 플래그가 True인 틱은
            호출자가 Tick 레코드를 지우고 Tickmap 비트를 해제해야 합니다.
        """
        amount_x, amount_y = self.modify(
            pool,
            upper_tick,
            lower_tick,
            self.liquidity,
            False,
            current_timestamp,
            self.pool_key.fee_tier.tick_spacing,
        )

        amount_x = amount_x.add(self.tokens_owed_x)
        amount_y = amount_y.add(self.tokens_owed_y)
        self.tokens_owed_x = TokenAmount(0)
        self.tokens_owed_y = TokenAmount(0)

        return (
            amount_x,
            amount_y,
            lower_tick.liquidity_gross.is_zero(),
            upper_tick.liquidity_gross.is_zero(),
        )


def _write_back(target, source) -> None:
    for item in fields(source):
        setattr(target, item.name, getattr(source, item.name))
