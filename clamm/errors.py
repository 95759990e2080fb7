"""
CLAMM 예외 정의

모든 실패는 타입이 있는 예외로 보고됩니다. 조용한 절삭이나 wrap-around는 없습니다.

분류:
- ConfigurationError: 생성 시점에 거부되는 설정 오류 (같은 입력으로 재시도 불가)
- RangeError: 범위 위반 또는 storage/엔진 불일치
- SwapError: 호출자가 조정/재시도를 결정하는 스왑 정책 결과
- PositionError: 포지션 상태 오류
- ArithmeticOverflow: 고정소수점 연산 오류 (항상 전파)
"""


class ClammError(Exception):
    """CLAMM 엔진 예외의 최상위 클래스"""


class ConfigurationError(ClammError, ValueError):
    pass


class InvalidFee(ConfigurationError):
    pass


class InvalidTickSpacing(ConfigurationError):
    pass


class TokensAreSame(ConfigurationError):
    pass


class RangeError(ClammError, ValueError):
    pass


class InvalidTick(RangeError):
    pass


class InvalidTickIndexOrTickSpacing(RangeError):
    pass


class TickNotFound(RangeError):
    """Tickmap에는 표시되어 있지만 Tick 레코드가 없는 경우 (desync)"""


class InvalidInitTick(RangeError):
    pass


class InvalidInitSqrtPrice(RangeError):
    pass


class InvalidSqrtPrice(RangeError):
    pass


class TickLimitReached(RangeError):
    """전역 틱 한계에서 더 이상 탐색할 수 없는 경우"""


class InvalidTickLiquidity(RangeError):
    pass


class InvalidOracleTimestamp(RangeError):
    pass


class SwapError(ClammError, ValueError):
    pass


class AmountIsZero(SwapError):
    pass


class WrongLimit(SwapError):
    pass


class NoGainSwap(SwapError):
    pass


class PriceLimitReached(SwapError):
    pass


class PositionError(ClammError, ValueError):
    pass


class EmptyPositionPokes(PositionError):
    pass


class InsufficientLiquidity(PositionError):
    pass


class ArithmeticOverflow(ClammError, ArithmeticError):
    pass


class AddOverflow(ArithmeticOverflow):
    pass


class SubUnderflow(ArithmeticOverflow):
    pass


class MulOverflow(ArithmeticOverflow):
    pass


class DivByZero(ArithmeticOverflow, ZeroDivisionError):
    pass


class CastOverflow(ArithmeticOverflow):
    pass
