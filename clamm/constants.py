"""
CLAMM 상수 정의

온체인 수준 정밀도를 위한 상수들:
- MIN_TICK / MAX_TICK: 허용되는 틱 범위
- MIN_SQRT_PRICE / MAX_SQRT_PRICE: 틱 범위 경계의 √가격 (24자리 고정소수점)
- TICK_SEARCH_RANGE: 한 번의 틱 탐색이 훑는 최대 거리 (tick spacing 단위)
- ORACLE_SIZE: 가격 기록 링 버퍼 크기
"""

# 틱 범위 상수
MAX_TICK: int = 221818
MIN_TICK: int = -MAX_TICK

# 틱 범위 경계의 √가격 (scale 24)
MAX_SQRT_PRICE: int = 65535383934512647000000000000
MIN_SQRT_PRICE: int = 15258932000000000000

# Tickmap 탐색 범위 / 청크 크기
TICK_SEARCH_RANGE: int = 256
CHUNK_SIZE: int = 64
TICKMAP_SIZE: int = 2 * MAX_TICK + 1

# Oracle 링 버퍼 크기
ORACLE_SIZE: int = 256

# FeeTier 제약
MAX_TICK_SPACING: int = 100

# 한 번의 스왑에서 허용되는 기본 최대 스텝 수
MAX_SWAP_STEPS: int = 128

# 고정 폭 정수 최대값
U128_MAX: int = 2 ** 128 - 1
U64_MAX: int = 2 ** 64 - 1
