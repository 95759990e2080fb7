"""
Tickmap - 초기화된 틱의 비트맵 인덱스

틱 하나당 1비트, 64비트 청크 단위로 저장합니다. 값이 0인 청크는 저장하지 않습니다 (sparse).

    bitmap_index = (tick + MAX_TICK) // tick_spacing
    chunk = bitmap_index // 64
    bit = bitmap_index % 64

가장 가까운 초기화된 틱 탐색은 현재 틱에서 TICK_SEARCH_RANGE(256) tick spacing 단위
이내로 제한되고, 청크(워드) 단위로 훑습니다. 스왑 한 스텝의 최악 비용이 상수로 고정됩니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from ..constants import CHUNK_SIZE, MAX_TICK, TICK_SEARCH_RANGE
from ..errors import InvalidTickIndexOrTickSpacing, TickLimitReached
from ..math.scaled import SqrtPrice
from ..math.tick_math import tick_to_sqrt_price

logger = logging.getLogger(__name__)

_CHUNK_MASK: int = (1 << CHUNK_SIZE) - 1

# (tick_index, initialized)
LimitingTick = Tuple[int, bool]


def tick_to_position(tick: int, tick_spacing: int) -> Tuple[int, int]:
    """틱 → (chunk, bit)

    Raises:
        InvalidTickIndexOrTickSpacing: 범위 밖이거나 tick_spacing 배수가 아닌 경우
    """
    if tick < -MAX_TICK or tick > MAX_TICK:
        raise InvalidTickIndexOrTickSpacing(f"틱이 범위를 벗어났습니다: {tick} (범위: {-MAX_TICK} ~ {MAX_TICK})")
    if tick % tick_spacing != 0:
        raise InvalidTickIndexOrTickSpacing(f"틱 {tick}이 tick spacing {tick_spacing}의 배수가 아닙니다")

    bitmap_index = (tick + MAX_TICK) // tick_spacing
    return bitmap_index // CHUNK_SIZE, bitmap_index % CHUNK_SIZE


def position_to_tick(chunk: int, bit: int, tick_spacing: int) -> int:
    """(chunk, bit) → 틱"""
    index = chunk * CHUNK_SIZE + bit
    return (index - MAX_TICK // tick_spacing) * tick_spacing


def get_search_limit(tick: int, tick_spacing: int, up: bool) -> int:
    """탐색 방향의 한계 틱 (TICK_SEARCH_RANGE 단위 이내, 가격 범위로 제한)"""
    index = tick // tick_spacing
    if up:
        limit = min(index + TICK_SEARCH_RANGE, MAX_TICK // tick_spacing)
    else:
        limit = max(index - TICK_SEARCH_RANGE, -(MAX_TICK // tick_spacing))
    return limit * tick_spacing


@dataclass
class Tickmap:
    """한 풀의 초기화 틱 비트맵

    Attributes:
        tick_spacing: 풀의 틱 간격
        bitmap: {chunk index: 64비트 워드}
    """
    tick_spacing: int = 1
    bitmap: Dict[int, int] = field(default_factory=dict)

    def get(self, tick: int) -> bool:
        chunk, bit = tick_to_position(tick, self.tick_spacing)
        return (self.bitmap.get(chunk, 0) >> bit) & 1 == 1

    def flip(self, value: bool, tick: int) -> None:
        """틱 초기화 상태 설정

        Args:
            value: True면 초기화, False면 해제
            tick: 틱 인덱스

        Raises:
            ValueError: 이미 요청한 상태인 경우
        """
        chunk, bit = tick_to_position(tick, self.tick_spacing)
        word = self.bitmap.get(chunk, 0)

        if ((word >> bit) & 1 == 1) == value:
            raise ValueError(f"틱 {tick}은 이미 {'초기화' if value else '해제'}된 상태입니다")

        word ^= 1 << bit
        if word == 0:
            self.bitmap.pop(chunk, None)
        else:
            self.bitmap[chunk] = word

    def initialized_ticks(self) -> Iterator[int]:
        """초기화된 모든 틱을 오름차순으로"""
        for chunk in sorted(self.bitmap):
            word = self.bitmap[chunk]
            while word:
                lowest = word & -word
                yield position_to_tick(chunk, lowest.bit_length() - 1, self.tick_spacing)
                word ^= lowest

    def next_initialized(self, tick: int) -> Optional[int]:
        """tick 위쪽(tick 제외)에서 가장 가까운 초기화 틱

        탐색 범위(TICK_SEARCH_RANGE) 안에 없으면 None. 더 멀리 있는 틱은 찾지 않습니다.
        """
        if tick + self.tick_spacing > MAX_TICK:
            return None

        limit = get_search_limit(tick, self.tick_spacing, True)
        chunk, bit = tick_to_position(tick + self.tick_spacing, self.tick_spacing)
        limiting_chunk, limiting_bit = tick_to_position(limit, self.tick_spacing)

        while chunk < limiting_chunk or (chunk == limiting_chunk and bit <= limiting_bit):
            shifted = self.bitmap.get(chunk, 0) >> bit
            if shifted:
                bit += (shifted & -shifted).bit_length() - 1
                if chunk < limiting_chunk or bit <= limiting_bit:
                    return position_to_tick(chunk, bit, self.tick_spacing)
                return None

            chunk += 1
            bit = 0

        return None

    def prev_initialized(self, tick: int) -> Optional[int]:
        """tick 자신을 포함해 아래쪽에서 가장 가까운 초기화 틱

        탐색 범위(TICK_SEARCH_RANGE) 안에 없으면 None.
        """
        limit = get_search_limit(tick, self.tick_spacing, False)
        chunk, bit = tick_to_position(tick, self.tick_spacing)
        limiting_chunk, limiting_bit = tick_to_position(limit, self.tick_spacing)

        while chunk > limiting_chunk or (chunk == limiting_chunk and bit >= limiting_bit):
            masked = self.bitmap.get(chunk, 0) & ((1 << (bit + 1)) - 1)
            if masked:
                bit = masked.bit_length() - 1
                if chunk > limiting_chunk or bit >= limiting_bit:
                    return position_to_tick(chunk, bit, self.tick_spacing)
                return None

            if chunk == 0:
                return None
            chunk -= 1
            bit = CHUNK_SIZE - 1

        return None

    def get_closer_limit(
        self,
        sqrt_price_limit: SqrtPrice,
        x_to_y: bool,
        current_tick: int,
    ) -> Tuple[SqrtPrice, Optional[LimitingTick]]:
        """거래 방향으로 이번 스텝이 멈출 가격

        가장 가까운 초기화 틱과 사용자 가격 한도 중 더 가까운 쪽을 반환합니다.
        탐색 범위 안에 초기화 틱이 없으면 탐색 한계 틱을 초기화되지 않은 경계로 사용합니다.

        Returns:
            (swap_limit, limiting_tick)
            limiting_tick은 (tick_index, initialized) 또는 가격 한도가 더 가까우면 None

        Raises:
            TickLimitReached: 현재 틱이 이미 전역 틱 한계에 있는 경우
        """
        if x_to_y:
            closest_tick = self.prev_initialized(current_tick)
        else:
            closest_tick = self.next_initialized(current_tick)

        if closest_tick is not None:
            sqrt_price = tick_to_sqrt_price(closest_tick)
            if (x_to_y and sqrt_price > sqrt_price_limit) or (not x_to_y and sqrt_price < sqrt_price_limit):
                return sqrt_price, (closest_tick, True)
            return sqrt_price_limit, None

        index = get_search_limit(current_tick, self.tick_spacing, not x_to_y)
        if current_tick == index:
            raise TickLimitReached(f"틱 한계에 도달했습니다: {index}")

        logger.debug("탐색 범위 안에 초기화 틱 없음: current=%d, boundary=%d", current_tick, index)
        sqrt_price = tick_to_sqrt_price(index)
        if (x_to_y and sqrt_price > sqrt_price_limit) or (not x_to_y and sqrt_price < sqrt_price_limit):
            return sqrt_price, (index, False)
        return sqrt_price_limit, None
