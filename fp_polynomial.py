#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Prime-field polynomials z -> f(z) on {0, ..., p-1}.

Coefficients are stored highest degree first and are always normalized into
[0, p). Evaluation reduces after every Horner step, so intermediate values stay
below p^2 + p. The whole-field evaluation (`evaluate_all`) runs the same Horner
recurrence on a numpy vector of all residues at once; it uses int64 while p^2
fits and falls back to object arrays (exact Python ints) beyond that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from modular_arith import ModularInputError, require_modulus

# largest p with (p - 1)^2 + (p - 1) < 2^63
_INT64_SAFE_MODULUS = 3_037_000_499


@dataclass(frozen=True)
class FpPolynomial:
    """Polynomial over F_p, coefficients highest degree first."""

    coeffs: Tuple[int, ...]
    p: int

    def __post_init__(self) -> None:
        require_modulus(self.p)
        if len(self.coeffs) == 0:
            raise ModularInputError("polynomial needs at least one coefficient")
        norm = []
        for c in self.coeffs:
            if isinstance(c, bool) or not isinstance(c, (int, np.integer)):
                raise ModularInputError(f"coefficient must be int, got {type(c).__name__}")
            norm.append(int(c) % self.p)
        object.__setattr__(self, "coeffs", tuple(norm))

    @classmethod
    def from_coeffs(cls, coeffs: Sequence[int], p: int) -> "FpPolynomial":
        return cls(tuple(coeffs), p)

    @property
    def degree(self) -> int:
        for i, c in enumerate(self.coeffs):
            if c != 0:
                return len(self.coeffs) - 1 - i
        return 0

    def __call__(self, x: int) -> int:
        return self.eval(x)

    def eval(self, x: int) -> int:
        p = self.p
        x %= p
        acc = 0
        for c in self.coeffs:
            acc = (acc * x + c) % p
        return acc

    def slow_eval(self, x: int) -> int:
        """Term-by-term evaluation, kept as a cross-check for `eval`."""
        p = self.p
        e = len(self.coeffs)
        acc = 0
        for c in self.coeffs:
            e -= 1
            if c != 0:
                acc = (acc + c * pow(x, e, p)) % p
        return acc

    def evaluate_all(self) -> np.ndarray:
        """f(z) for every z in [0, p), as an array indexed by z."""
        p = self.p
        dtype = np.int64 if p <= _INT64_SAFE_MODULUS else object
        z = np.arange(p, dtype=np.int64).astype(dtype)
        acc = np.zeros(p, dtype=dtype)
        for c in self.coeffs:
            acc = (acc * z + c) % p
        return acc

    def derivative(self) -> "FpPolynomial":
        n = len(self.coeffs)
        if n == 1:
            return FpPolynomial((0,), self.p)
        return FpPolynomial(
            tuple(self.coeffs[i] * (n - 1 - i) for i in range(n - 1)),
            self.p,
        )

    def orbit(self, x: int, n: int) -> List[int]:
        """The first n points x, f(x), ..., f^{n-1}(x)."""
        if n < 1:
            raise ModularInputError(f"orbit length must be >= 1, got {n}")
        out = [x % self.p]
        for _ in range(n - 1):
            out.append(self.eval(out[-1]))
        return out

    def multiplier(self, period: int, x: int) -> int:
        """
        Product of f' along the cycle through x of the given period, mod p.
        """
        df = self.derivative()
        acc = 1
        for pt in self.orbit(x, period):
            acc = (acc * df.eval(pt)) % self.p
        return acc

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.coeffs) + f" (mod {self.p})"


__all__ = ["FpPolynomial"]
