"""
CLAMM 식별 타입 정의

FeeTier: 스왑 수수료율 + 틱 간격
PoolKey: (token_x, token_y, fee_tier) 풀 식별자. 두 토큰은 항상 정렬된 순서로 저장됩니다.

토큰 식별자는 전순서가 정의된 고정 폭 값이면 무엇이든 됩니다 (예: 32바이트 계정 ID, 주소 문자열).
"""

from dataclasses import dataclass
from typing import Any

from ..constants import MAX_TICK_SPACING
from ..errors import InvalidFee, InvalidTickSpacing, TokensAreSame
from ..math.scaled import Percentage


@dataclass(frozen=True)
class FeeTier:
    """스왑 수수료 티어

    - fee: 수수료율 (Percentage, 0 ~ 100%)
    - tick_spacing: 틱 간격 (1 ~ 100)
    """
    fee: Percentage
    tick_spacing: int

    def __post_init__(self):
        if self.fee > Percentage.one():
            raise InvalidFee(f"수수료는 100%를 넘을 수 없습니다: {self.fee}")
        if self.tick_spacing < 1 or self.tick_spacing > MAX_TICK_SPACING:
            raise InvalidTickSpacing(
                f"틱 간격이 유효 범위를 벗어났습니다: {self.tick_spacing} (범위: 1 ~ {MAX_TICK_SPACING})"
            )

    @classmethod
    def new(cls, fee: Percentage, tick_spacing: int) -> "FeeTier":
        return cls(fee=fee, tick_spacing=tick_spacing)

    @classmethod
    def from_dict(cls, data: dict) -> "FeeTier":
        return cls(
            fee=Percentage(int(data["fee"])),
            tick_spacing=int(data["tickSpacing"]),
        )


@dataclass(frozen=True)
class PoolKey:
    """풀 식별자

    token_x < token_y 가 항상 성립합니다.
    """
    token_x: Any
    token_y: Any
    fee_tier: FeeTier

    @classmethod
    def new(cls, token_0: Any, token_1: Any, fee_tier: FeeTier) -> "PoolKey":
        """토큰 순서와 무관하게 같은 PoolKey 생성

        Raises:
            TokensAreSame: 두 토큰이 같은 경우
        """
        if token_0 == token_1:
            raise TokensAreSame(f"같은 토큰으로 풀을 만들 수 없습니다: {token_0!r}")

        if token_0 < token_1:
            return cls(token_x=token_0, token_y=token_1, fee_tier=fee_tier)
        return cls(token_x=token_1, token_y=token_0, fee_tier=fee_tier)
