"""
Data layer for CLAMM

풀 상태 레코드와 전이 규칙:
- types: FeeTier, PoolKey
- tick / tickmap: 틱 레코드와 초기화 틱 비트맵
- pool / position: 풀 전역 상태, 포지션 상태
- oracle: 가격 기록 링 버퍼
"""

from .types import FeeTier, PoolKey
from .tick import Tick
from .tickmap import Tickmap
from .pool import Pool
from .position import Position
from .oracle import Oracle, Record
