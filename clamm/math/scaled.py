"""
Scaled Decimal - 고정소수점 정수 타입

가격, √가격, 유동성, 토큰 수량, fee growth, 퍼센트를 각각 별도 타입으로 표현합니다.
모든 타입은 하나의 ScaledDecimal 추상화를 공유하며, 클래스 속성으로
소수 자릿수(SCALE)와 저장 폭(BITS)만 다르게 지정합니다.

핵심 규칙:
    value = v / 10^SCALE
    0 <= v <= 2^BITS - 1

    a.mul(b) = a.v * b.v // 10^b.SCALE      (결과 타입 = a의 타입)
    a.div(b) = a.v * 10^b.SCALE // b.v      (결과 타입 = a의 타입)

범위를 벗어난 결과는 wrap 없이 예외를 발생시킵니다. FeeGrowth만 스냅샷 차분을 위해
명시적인 unchecked_add / unchecked_sub (mod 2^128)를 제공합니다.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import ClassVar, Type, TypeVar, Union

from ..errors import (
    AddOverflow,
    CastOverflow,
    DivByZero,
    MulOverflow,
    SubUnderflow,
)

T = TypeVar("T", bound="ScaledDecimal")


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


@dataclass(frozen=True)
class ScaledDecimal:
    """고정소수점 값 (정수 magnitude + 클래스 고정 scale)"""
    v: int = 0

    SCALE: ClassVar[int] = 0
    BITS: ClassVar[int] = 128

    def __post_init__(self):
        if not isinstance(self.v, int):
            raise TypeError(f"{type(self).__name__} magnitude must be int, got {type(self.v).__name__}")
        if self.v < 0 or self.v > self.max_value():
            raise CastOverflow(
                f"{type(self).__name__} 범위를 벗어났습니다: {self.v} (0 ~ 2^{self.BITS}-1)"
            )

    # --- 생성자 ---

    @classmethod
    def max_value(cls) -> int:
        return (1 << cls.BITS) - 1

    @classmethod
    def denominator(cls) -> int:
        return 10 ** cls.SCALE

    @classmethod
    def new(cls: Type[T], v: int) -> T:
        return cls(v)

    @classmethod
    def one(cls: Type[T]) -> T:
        return cls(cls.denominator())

    @classmethod
    def max_instance(cls: Type[T]) -> T:
        return cls(cls.max_value())

    @classmethod
    def from_integer(cls: Type[T], n: int) -> T:
        return cls._checked(n * cls.denominator(), MulOverflow)

    @classmethod
    def from_scale(cls: Type[T], v: int, scale: int) -> T:
        """다른 scale의 정수를 이 타입으로 변환 (내림)

        Example:
            Percentage.from_scale(3, 3) == 0.003
        """
        if scale > cls.SCALE:
            return cls._checked(v // 10 ** (scale - cls.SCALE))
        return cls._checked(v * 10 ** (cls.SCALE - scale))

    @classmethod
    def from_scale_up(cls: Type[T], v: int, scale: int) -> T:
        if scale > cls.SCALE:
            return cls._checked(_ceil_div(v, 10 ** (scale - cls.SCALE)))
        return cls._checked(v * 10 ** (cls.SCALE - scale))

    @classmethod
    def from_decimal(cls: Type[T], value: Union[str, int, Decimal]) -> T:
        """10진 문자열/Decimal을 정확히 파싱

        Raises:
            ValueError: 타입의 소수 자릿수보다 정밀한 값인 경우
        """
        with localcontext() as ctx:
            ctx.prec = 200
            scaled = Decimal(str(value)).scaleb(cls.SCALE)
            if scaled != scaled.to_integral_value():
                raise ValueError(
                    f"{value}는 {cls.__name__} 정밀도({cls.SCALE}자리)로 표현할 수 없습니다"
                )
            return cls._checked(int(scaled))

    @classmethod
    def _checked(cls: Type[T], v: int, error=CastOverflow) -> T:
        if v < 0:
            raise (CastOverflow if error is CastOverflow else SubUnderflow)(
                f"{cls.__name__} 음수 결과: {v}"
            )
        if v > cls.max_value():
            raise error(f"{cls.__name__} overflow: {v} > 2^{cls.BITS}-1")
        return cls(v)

    # --- 조회 ---

    def get(self) -> int:
        return self.v

    def is_zero(self) -> bool:
        return self.v == 0

    def to_decimal(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = 200
            return Decimal(self.v).scaleb(-self.SCALE)

    def __float__(self) -> float:
        return self.v / self.denominator()

    def __str__(self) -> str:
        if self.SCALE == 0:
            return str(self.v)
        integer, fraction = divmod(self.v, self.denominator())
        return f"{integer}.{fraction:0{self.SCALE}d}"

    # --- 비교 (같은 타입끼리만) ---

    def _require_same(self, other) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"{type(self).__name__}와 {type(other).__name__}는 직접 비교/연산할 수 없습니다"
            )

    def __lt__(self, other) -> bool:
        self._require_same(other)
        return self.v < other.v

    def __le__(self, other) -> bool:
        self._require_same(other)
        return self.v <= other.v

    def __gt__(self, other) -> bool:
        self._require_same(other)
        return self.v > other.v

    def __ge__(self, other) -> bool:
        self._require_same(other)
        return self.v >= other.v

    # --- 산술 ---

    def add(self: T, other: T) -> T:
        self._require_same(other)
        return self._checked(self.v + other.v, AddOverflow)

    def sub(self: T, other: T) -> T:
        self._require_same(other)
        if other.v > self.v:
            raise SubUnderflow(f"{type(self).__name__} underflow: {self.v} - {other.v}")
        return type(self)(self.v - other.v)

    def mul(self: T, other: "ScaledDecimal") -> T:
        return self._checked(self.v * other.v // other.denominator(), MulOverflow)

    def mul_up(self: T, other: "ScaledDecimal") -> T:
        return self._checked(_ceil_div(self.v * other.v, other.denominator()), MulOverflow)

    def div(self: T, other: "ScaledDecimal") -> T:
        if other.v == 0:
            raise DivByZero(f"{type(self).__name__} / {type(other).__name__}(0)")
        return self._checked(self.v * other.denominator() // other.v, MulOverflow)

    def div_up(self: T, other: "ScaledDecimal") -> T:
        if other.v == 0:
            raise DivByZero(f"{type(self).__name__} / {type(other).__name__}(0)")
        return self._checked(_ceil_div(self.v * other.denominator(), other.v), MulOverflow)

    def rescale(self, target: Type[T]) -> T:
        """다른 타입으로 명시적 변환 (내림)"""
        return target.from_scale(self.v, self.SCALE)

    def rescale_up(self, target: Type[T]) -> T:
        return target.from_scale_up(self.v, self.SCALE)

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div


class SqrtPrice(ScaledDecimal):
    SCALE = 24


class Price(ScaledDecimal):
    SCALE = 24


class Liquidity(ScaledDecimal):
    SCALE = 6


class TokenAmount(ScaledDecimal):
    SCALE = 0


class Percentage(ScaledDecimal):
    SCALE = 12
    BITS = 64


class FixedPoint(ScaledDecimal):
    SCALE = 12


class FeeGrowth(ScaledDecimal):
    """유동성 단위당 누적 수수료

    전역/외부 값의 차분으로만 읽히므로 mod 2^128 wrapping이 허용됩니다.
    """
    SCALE = 28

    def unchecked_add(self, other: "FeeGrowth") -> "FeeGrowth":
        self._require_same(other)
        return FeeGrowth((self.v + other.v) & self.max_value())

    def unchecked_sub(self, other: "FeeGrowth") -> "FeeGrowth":
        self._require_same(other)
        return FeeGrowth((self.v - other.v) & self.max_value())

    @classmethod
    def from_fee(cls, liquidity: Liquidity, fee: TokenAmount) -> "FeeGrowth":
        """fee / liquidity

        Raises:
            DivByZero: 활성 유동성이 0인 경우
        """
        if liquidity.is_zero():
            raise DivByZero("유동성이 0일 때 fee growth를 계산할 수 없습니다")
        value = fee.v * cls.denominator() * Liquidity.denominator() // liquidity.v
        return cls._checked(value, MulOverflow)

    def to_fee(self, liquidity: Liquidity) -> TokenAmount:
        """fee growth * liquidity → 토큰 수량 (내림)"""
        value = self.v * liquidity.v // 10 ** (self.SCALE + Liquidity.SCALE)
        return TokenAmount._checked(value)
