#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Eisenstein integers Z[omega], omega^2 = -omega - 1, and their images in F_p.

Q(omega) has a ring homomorphism onto F_p exactly when x^2 + x + 1 splits mod p
(p = 3 or p = 1 mod 3). There are then two of them, sending omega to

    w_plus  = (-1 + s) / 2,    w_minus = (-1 - s) / 2     (mod p)

where (s, p - s) are the Cipolla roots of -3. For p = 3 both coincide.

Division is exact-integer "nearest lattice point" division: the quotient
x * conj(y) / N(y) is rounded coordinate-wise in the basis (1, omega), which
leaves a remainder of norm at most 3/4 N(y). That makes Z[omega] Euclidean
and eisenstein_gcd terminates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple, Union

from modular_arith import (
    ModularArithmeticError,
    cipolla,
    has_homomorphism_to_Fp,
    mod_inverse,
    require_modulus,
)

_logger = logging.getLogger(__name__)


class NoHomomorphismError(ModularArithmeticError):
    """Q(omega) has no homomorphism onto F_p for this p."""


def _round_div(n: int, d: int) -> int:
    """Nearest integer to n/d for d > 0, halves rounded up."""
    return (2 * n + d) // (2 * d)


@dataclass(frozen=True)
class EisensteinInt:
    """a + b*omega."""

    a: int = 0
    b: int = 0

    def __post_init__(self) -> None:
        for name in ("a", "b"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"EisensteinInt.{name} must be int, got {type(v).__name__}")

    @classmethod
    def coerce(cls, x: Union["EisensteinInt", int, Tuple[int, int]]) -> "EisensteinInt":
        if isinstance(x, EisensteinInt):
            return x
        if isinstance(x, tuple) and len(x) == 2:
            for v in x:
                if isinstance(v, bool) or not isinstance(v, int):
                    raise TypeError(f"cannot read {x!r} as an Eisenstein integer: components must be int")
            return cls(x[0], x[1])
        if isinstance(x, int) and not isinstance(x, bool):
            return cls(x, 0)
        raise TypeError(f"cannot read {x!r} as an Eisenstein integer")

    # -- ring structure ----------------------------------------------------

    def __add__(self, other):
        o = EisensteinInt.coerce(other)
        return EisensteinInt(self.a + o.a, self.b + o.b)

    __radd__ = __add__

    def __neg__(self) -> "EisensteinInt":
        return EisensteinInt(-self.a, -self.b)

    def __sub__(self, other):
        o = EisensteinInt.coerce(other)
        return EisensteinInt(self.a - o.a, self.b - o.b)

    def __rsub__(self, other):
        return EisensteinInt.coerce(other) - self

    def __mul__(self, other):
        o = EisensteinInt.coerce(other)
        # (a + b w)(c + d w) = ac + (ad + bc) w + bd w^2,  w^2 = -w - 1
        bd = self.b * o.b
        return EisensteinInt(self.a * o.a - bd, self.a * o.b + self.b * o.a - bd)

    __rmul__ = __mul__

    def conjugate(self) -> "EisensteinInt":
        # conj(w) = w^2 = -1 - w
        return EisensteinInt(self.a - self.b, -self.b)

    def norm(self) -> int:
        return self.a * self.a - self.a * self.b + self.b * self.b

    def is_zero(self) -> bool:
        return self.a == 0 and self.b == 0

    def is_unit(self) -> bool:
        return self.norm() == 1

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __divmod__(self, other):
        y = EisensteinInt.coerce(other)
        n = y.norm()
        if n == 0:
            raise ZeroDivisionError("division by the zero Eisenstein integer")
        num = self * y.conjugate()
        q = EisensteinInt(_round_div(num.a, n), _round_div(num.b, n))
        return q, self - q * y

    def __floordiv__(self, other):
        return divmod(self, other)[0]

    def __mod__(self, other):
        return divmod(self, other)[1]

    # -- reduction ---------------------------------------------------------

    def image(self, w: int, p: int) -> int:
        """Image under the homomorphism omega -> w in F_p."""
        return (self.a + self.b * w) % p

    def __str__(self) -> str:
        if self.b == 0:
            return str(self.a)
        if self.a == 0:
            return f"{self.b}w"
        sign = "+" if self.b > 0 else "-"
        return f"{self.a}{sign}{abs(self.b)}w"


OMEGA = EisensteinInt(0, 1)


def eisenstein_gcd(x: EisensteinInt, y: EisensteinInt) -> EisensteinInt:
    """
    A greatest common divisor of x and y, defined up to the six units.

    The divisor norm strictly decreases every step, so the loop ends on an
    exact-zero remainder.
    """
    x = EisensteinInt.coerce(x)
    y = EisensteinInt.coerce(y)
    while not y.is_zero():
        x, y = y, x % y
    return x


@lru_cache(maxsize=None)
def omega_images(p: int) -> Tuple[int, int]:
    """(w_plus, w_minus): the two roots of x^2 + x + 1 in F_p."""
    require_modulus(p)
    if not has_homomorphism_to_Fp(p):
        raise NoHomomorphismError(f"Q(omega) has no homomorphism onto F_{p}")
    roots = cipolla(-3 % p, p)
    if roots is None:
        raise NoHomomorphismError(f"-3 has no square root mod {p}")
    half = mod_inverse(2, p)
    s_plus, s_minus = roots
    w_plus = ((-1 + s_plus) * half) % p
    w_minus = ((-1 + s_minus) * half) % p
    _logger.debug("omega images mod %d: %d, %d", p, w_plus, w_minus)
    return (w_plus, w_minus)


__all__ = [
    "EisensteinInt",
    "NoHomomorphismError",
    "OMEGA",
    "eisenstein_gcd",
    "omega_images",
]
