"""
CLAMM - Concentrated Liquidity AMM Numerical Core

틱 기반 집중 유동성 AMM의 수치 엔진.
정수 고정소수점 연산만으로 틱/√가격 변환, 유동성 계산, 스왑 시뮬레이션,
fee growth 누적, 가격 기록(Oracle)을 처리합니다.

엔진은 I/O를 하지 않습니다. 모든 함수는 값을 받아 값을 돌려주거나 예외를 발생시킵니다.
"""

__version__ = "0.1.0"

from .constants import MAX_TICK, MIN_TICK, MAX_SQRT_PRICE, MIN_SQRT_PRICE, TICK_SEARCH_RANGE
from .errors import ClammError
from .math.scaled import (
    FeeGrowth,
    FixedPoint,
    Liquidity,
    Percentage,
    Price,
    SqrtPrice,
    TokenAmount,
)
from .data.types import FeeTier, PoolKey
from .data.tick import Tick
from .data.tickmap import Tickmap
from .data.pool import Pool
from .data.position import Position
from .data.oracle import Oracle, Record
from .swap import SwapResult, simulate_swap
