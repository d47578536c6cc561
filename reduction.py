#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Reduction of Q / Q(omega) polynomials to prime-field polynomials
================================================================================

Q case
------
A rational n/d has good reduction at p iff p does not divide d (the pair is
taken as given, not put in lowest terms first). Its image is n * d^{-1} mod p.
A polynomial over Q has good reduction iff every coefficient does.

Q(omega) case
-------------
Only primes with a homomorphism Q(omega) -> F_p are usable (p = 3 or
p = 1 mod 3). Each of the two homomorphisms omega -> w_plus / w_minus is
applied to numerator and denominator separately; a coefficient is defined under
a homomorphism iff its denominator's image is nonzero. The two homomorphisms
fail independently: one slot can be None while the other is defined.

Sentinels vs errors
-------------------
- bad reduction      -> has_good_reduction False / reduce_or_none None /
                        None slot in the Q(omega) pair
- strict reduce() at a bad prime, zero denominators, float input
                     -> exceptions below
================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Optional, Sequence, Tuple

from eisenstein import EisensteinInt, eisenstein_gcd, omega_images
from fp_polynomial import FpPolynomial
from modular_arith import mod_inverse, require_modulus

_logger = logging.getLogger(__name__)


class ReductionError(RuntimeError):
    """Base error of the reduction layer."""


class ReductionInputError(ReductionError, ValueError):
    """Malformed coefficient or polynomial."""


class BadReductionError(ReductionError):
    """Strict reduction requested at a prime of bad reduction."""


# =============================================================================
# Rationals
# =============================================================================


@dataclass(frozen=True)
class Rational:
    """numer / denom, denom != 0, not necessarily in lowest terms."""

    numer: int
    denom: int = 1

    def __post_init__(self) -> None:
        for name in ("numer", "denom"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise ReductionInputError(f"Rational.{name} must be int, got {type(v).__name__}")
        if self.denom == 0:
            raise ReductionInputError("Rational denominator must be nonzero")

    @classmethod
    def zero(cls) -> "Rational":
        return cls(0, 1)

    @classmethod
    def one(cls) -> "Rational":
        return cls(1, 1)

    def has_good_reduction(self, p: int) -> bool:
        return self.denom % p != 0

    def reduce(self, p: int) -> int:
        if not self.has_good_reduction(p):
            raise BadReductionError(f"{self} has bad reduction at p={p}")
        return (self.numer % p) * mod_inverse(self.denom % p, p) % p

    def to_fraction(self) -> Fraction:
        return Fraction(self.numer, self.denom)

    def __str__(self) -> str:
        return f"{self.numer}/{self.denom}"


def _require_int_pair(x: Tuple[Any, Any], name: str) -> None:
    for v in x:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ReductionInputError(f"{name}: pair components must be int, got {x!r}")


def as_rational(x: Any, *, name: str = "coefficient") -> Rational:
    """
    Read a rational coefficient.

    Accepted: Rational, int, Fraction, strings like "-29/16", and
    (numerator, denominator) pairs. float is rejected.
    """
    if isinstance(x, Rational):
        return x
    if isinstance(x, bool):
        return Rational(int(x))
    if isinstance(x, int):
        return Rational(x)
    if isinstance(x, Fraction):
        return Rational(x.numerator, x.denominator)
    if isinstance(x, tuple) and len(x) == 2:
        _require_int_pair(x, name)
        return Rational(x[0], x[1])
    if isinstance(x, str):
        try:
            fr = Fraction(x)
        except (ValueError, ZeroDivisionError) as e:
            raise ReductionInputError(f"{name} must be a rational string like '3/2', got {x!r}") from e
        return Rational(fr.numerator, fr.denominator)
    if isinstance(x, float):
        raise ReductionInputError(f"{name} must be exact; float is forbidden: {x!r}")
    raise ReductionInputError(f"{name}: unsupported type {type(x).__name__}")


# =============================================================================
# Q(omega) elements
# =============================================================================


@dataclass(frozen=True)
class QwElement:
    """numer / denom with Eisenstein integer numerator and denominator."""

    numer: EisensteinInt
    denom: EisensteinInt = EisensteinInt(1, 0)

    def __post_init__(self) -> None:
        if not isinstance(self.numer, EisensteinInt) or not isinstance(self.denom, EisensteinInt):
            raise ReductionInputError("QwElement numerator and denominator must be EisensteinInt")
        if self.denom.is_zero():
            raise ReductionInputError("QwElement denominator must be nonzero")

    def reduce(self, p: int) -> Tuple[Optional[int], Optional[int]]:
        """
        Residues under (omega -> w_plus, omega -> w_minus). A slot is None when
        the denominator vanishes under that homomorphism.
        """
        out = []
        for w in omega_images(p):
            d = self.denom.image(w, p)
            if d == 0:
                out.append(None)
            else:
                out.append(self.numer.image(w, p) * mod_inverse(d, p) % p)
        return (out[0], out[1])

    def reduced(self) -> "QwElement":
        """Cancel the Eisenstein gcd of numerator and denominator."""
        g = eisenstein_gcd(self.numer, self.denom)
        if g.is_unit():
            return self
        return QwElement(self.numer // g, self.denom // g)

    def __add__(self, other):
        o = as_qw(other)
        return QwElement(self.numer * o.denom + o.numer * self.denom, self.denom * o.denom)

    __radd__ = __add__

    def __neg__(self) -> "QwElement":
        return QwElement(-self.numer, self.denom)

    def __sub__(self, other):
        return self + (-as_qw(other))

    def __rsub__(self, other):
        return as_qw(other) - self

    def __mul__(self, other):
        o = as_qw(other)
        return QwElement(self.numer * o.numer, self.denom * o.denom)

    __rmul__ = __mul__

    def __truediv__(self, other):
        o = as_qw(other)
        if o.numer.is_zero():
            raise ZeroDivisionError("division by zero in Q(omega)")
        return QwElement(self.numer * o.denom, self.denom * o.numer)

    def __str__(self) -> str:
        return f"({self.numer})/({self.denom})"


def as_qw(x: Any, *, name: str = "coefficient") -> QwElement:
    """
    Read a Q(omega) coefficient.

    Accepted: QwElement, EisensteinInt, (a, b) pairs read as a + b*omega, and
    anything as_rational accepts (embedded with zero omega part).
    """
    if isinstance(x, QwElement):
        return x
    if isinstance(x, EisensteinInt):
        return QwElement(x)
    if isinstance(x, tuple) and len(x) == 2:
        _require_int_pair(x, name)
        return QwElement(EisensteinInt(x[0], x[1]))
    r = as_rational(x, name=name)
    return QwElement(EisensteinInt(r.numer, 0), EisensteinInt(r.denom, 0))


# =============================================================================
# Polynomials
# =============================================================================


@dataclass(frozen=True)
class PolynomialInQ:
    """Polynomial over Q, coefficients highest degree first."""

    coeffs: Tuple[Rational, ...]

    def __post_init__(self) -> None:
        if len(self.coeffs) == 0:
            raise ReductionInputError("polynomial needs at least one coefficient")
        object.__setattr__(
            self,
            "coeffs",
            tuple(as_rational(c, name=f"coeffs[{i}]") for i, c in enumerate(self.coeffs)),
        )

    @classmethod
    def from_coeffs(cls, coeffs: Sequence[Any]) -> "PolynomialInQ":
        if isinstance(coeffs, PolynomialInQ):
            return coeffs
        return cls(tuple(coeffs))

    @property
    def degree(self) -> int:
        return len(self.coeffs) - 1

    def has_good_reduction(self, p: int) -> bool:
        require_modulus(p)
        return all(c.has_good_reduction(p) for c in self.coeffs)

    def reduce(self, p: int) -> FpPolynomial:
        if not self.has_good_reduction(p):
            raise BadReductionError(f"polynomial has bad reduction at p={p}")
        return FpPolynomial(tuple(c.reduce(p) for c in self.coeffs), p)

    def reduce_or_none(self, p: int) -> Optional[FpPolynomial]:
        if not self.has_good_reduction(p):
            return None
        return self.reduce(p)

    def to_qw(self) -> "PolynomialInQw":
        return PolynomialInQw(tuple(as_qw(c) for c in self.coeffs))

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.coeffs)


@dataclass(frozen=True)
class PolynomialInQw:
    """Polynomial over Q(omega), coefficients highest degree first."""

    coeffs: Tuple[QwElement, ...]

    def __post_init__(self) -> None:
        if len(self.coeffs) == 0:
            raise ReductionInputError("polynomial needs at least one coefficient")
        object.__setattr__(
            self,
            "coeffs",
            tuple(as_qw(c, name=f"coeffs[{i}]") for i, c in enumerate(self.coeffs)),
        )

    @classmethod
    def from_coeffs(cls, coeffs: Sequence[Any]) -> "PolynomialInQw":
        if isinstance(coeffs, PolynomialInQw):
            return coeffs
        if isinstance(coeffs, PolynomialInQ):
            return coeffs.to_qw()
        return cls(tuple(coeffs))

    @property
    def degree(self) -> int:
        return len(self.coeffs) - 1

    def reductions(self, p: int) -> Tuple[Optional[FpPolynomial], Optional[FpPolynomial]]:
        """
        The reductions under omega -> w_plus and omega -> w_minus. A slot is
        None when some coefficient is undefined under that homomorphism.
        Raises NoHomomorphismError when p admits no homomorphism at all.
        """
        images = [c.reduce(p) for c in self.coeffs]
        plus = tuple(rp for rp, _ in images)
        minus = tuple(rm for _, rm in images)
        out = (
            None if None in plus else FpPolynomial(plus, p),
            None if None in minus else FpPolynomial(minus, p),
        )
        if out[0] is None or out[1] is None:
            _logger.debug("Q(omega) reduction at p=%d: plus=%s minus=%s", p, out[0] is not None, out[1] is not None)
        return out

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.coeffs)


__all__ = [
    "ReductionError",
    "ReductionInputError",
    "BadReductionError",
    "Rational",
    "as_rational",
    "QwElement",
    "as_qw",
    "PolynomialInQ",
    "PolynomialInQw",
]
