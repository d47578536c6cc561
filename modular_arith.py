#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Modular arithmetic kernel over F_p
================================================================================

Exact arithmetic modulo a prime p:

  - mod_inverse            extended Euclid
  - mod_power              a^b mod p
  - multiplicative_order   smallest r > 0 with a^r = 1 (mod p)
  - cipolla                both square roots of n mod p, or None
  - has_homomorphism_to_Fp whether Q(omega) maps onto F_p

plus the shared multiplicative-order cache and the ascending prime ladder used
by the sieve.

Redlines
--------
- Integer arithmetic only. No float anywhere in this module.
- Caller precondition violations (non-invertible element, zero base for an
  order) raise. They are never mapped to a default value.
- Mathematically meaningful "no answer" results are sentinels, not
  exceptions: cipolla returns None for a strict non-residue.
- Primality of p is the caller's responsibility (not tested here).
================================================================================
"""

from __future__ import annotations

import logging
import math
import threading
from functools import lru_cache
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

_logger = logging.getLogger(__name__)


class ModularArithmeticError(RuntimeError):
    """Base error of the modular arithmetic kernel."""


class ModularInputError(ModularArithmeticError, ValueError):
    """Invalid modulus, exponent or base."""


class NotInvertibleError(ModularArithmeticError, ZeroDivisionError):
    """gcd(a, p) != 1: no inverse exists."""


def require_modulus(p: int) -> int:
    if isinstance(p, bool) or not isinstance(p, int):
        raise ModularInputError(f"modulus must be int, got {type(p).__name__}")
    if p < 2:
        raise ModularInputError(f"modulus must be >= 2, got {p}")
    return p


def _require_int(x: int, *, name: str) -> int:
    if isinstance(x, bool) or not isinstance(x, int):
        raise ModularInputError(f"{name} must be int, got {type(x).__name__}")
    return x


# =============================================================================
# Inverse / power / order
# =============================================================================


def mod_inverse(a: int, p: int) -> int:
    """
    a^{-1} mod p by the extended Euclidean algorithm, result in [0, p).

    Raises NotInvertibleError when gcd(a, p) != 1.
    """
    require_modulus(p)
    _require_int(a, name="a")
    r0, r1 = p, a % p
    s0, s1 = 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
    if r0 != 1:
        raise NotInvertibleError(f"{a} is not invertible mod {p}")
    return s0 % p


def mod_power(a: int, b: int, p: int) -> int:
    """
    a^b mod p for b >= 0.

    Python ints do not overflow, so every product is reduced mod p
    unconditionally (inside the three-argument pow).
    """
    require_modulus(p)
    _require_int(a, name="a")
    _require_int(b, name="b")
    if b < 0:
        raise ModularInputError(f"exponent must be >= 0, got {b}")
    return pow(a % p, b, p)


def multiplicative_order(a: int, p: int) -> int:
    """
    Smallest r > 0 with a^r = 1 (mod p), by repeated multiplication.

    Worst case O(p). Use MultiplicativeOrderCache when the same (a, p) pairs
    recur.
    """
    require_modulus(p)
    _require_int(a, name="a")
    base = a % p
    if base == 0:
        raise ModularInputError(f"multiplicative order of 0 mod {p} is undefined")
    order = 1
    cur = base
    while cur != 1:
        cur = (cur * base) % p
        order += 1
        if order > p:
            # only reachable when p is composite and gcd(a, p) != 1
            raise NotInvertibleError(f"{a} has no multiplicative order mod {p}")
    return order


class MultiplicativeOrderCache:
    """
    Shared memo for multiplicative_order.

    Every key (a mod p, p) is computed at most once: misses are filled under a
    lock with a second lookup inside it. Keys already present are read without
    locking, so one instance can be shared by any number of sieve threads.
    """

    def __init__(self) -> None:
        self._table: Dict[Tuple[int, int], int] = {}
        self._lock = threading.Lock()
        self.computed = 0

    def order(self, a: int, p: int) -> int:
        key = (a % p, p)
        hit = self._table.get(key)
        if hit is not None:
            return hit
        with self._lock:
            hit = self._table.get(key)
            if hit is None:
                hit = multiplicative_order(key[0], p)
                self._table[key] = hit
                self.computed += 1
        return hit

    def precompute(self, primes: Iterable[int]) -> None:
        """Fill the orders of every unit of each prime field in `primes`."""
        for p in primes:
            require_modulus(p)
            with self._lock:
                for a in range(1, p):
                    if (a, p) not in self._table:
                        self._table[(a, p)] = multiplicative_order(a, p)
                        self.computed += 1
            _logger.debug("order cache: precomputed p=%d", p)

    def clear(self) -> None:
        with self._lock:
            self._table.clear()
            self.computed = 0

    def __contains__(self, key: Tuple[int, int]) -> bool:
        a, p = key
        return (a % p, p) in self._table

    def __len__(self) -> int:
        return len(self._table)


DEFAULT_ORDER_CACHE = MultiplicativeOrderCache()


def cached_multiplicative_order(a: int, p: int) -> int:
    return DEFAULT_ORDER_CACHE.order(a, p)


# =============================================================================
# Quadratic residues / Cipolla
# =============================================================================


def legendre_symbol(n: int, p: int) -> int:
    """Euler's criterion for odd p: 0, 1 or -1."""
    require_modulus(p)
    if p == 2:
        raise ModularInputError("legendre_symbol requires an odd prime")
    t = pow(n % p, (p - 1) // 2, p)
    if t == p - 1:
        return -1
    return t


def _ext_mul(x: Tuple[int, int], y: Tuple[int, int], d: int, p: int) -> Tuple[int, int]:
    """(u + v*sqrt(d)) * (s + t*sqrt(d)) in F_p[x]/(x^2 - d)."""
    u, v = x
    s, t = y
    return ((u * s + v * t * d) % p, (u * t + v * s) % p)


def _ext_pow(base: Tuple[int, int], e: int, d: int, p: int) -> Tuple[int, int]:
    acc = (1, 0)
    while e > 0:
        if e & 1:
            acc = _ext_mul(acc, base, d, p)
        base = _ext_mul(base, base, d, p)
        e >>= 1
    return acc


def cipolla(n: int, p: int) -> Optional[Tuple[int, int]]:
    """
    Both square roots (r, p - r) of n mod the prime p, or None when n is a
    strict quadratic non-residue.

    n = 0 gives (0, 0) and n = 1 gives (1, p - 1). For p = 3 (mod 4) the
    closed form n^((p+1)/4) is used; otherwise (a + sqrt(a^2 - n))^((p+1)/2)
    in F_p[x]/(x^2 - (a^2 - n)) for the first a making a^2 - n a non-residue.
    """
    require_modulus(p)
    _require_int(n, name="n")
    n %= p
    if n == 0:
        return (0, 0)
    if n == 1:
        return (1, p - 1)
    # p == 2 never gets here: every residue is 0 or 1
    if legendre_symbol(n, p) != 1:
        return None
    if p % 4 == 3:
        r = pow(n, (p + 1) // 4, p)
        return (r, (p - r) % p)

    a = 1
    while True:
        d = (a * a - n) % p
        if legendre_symbol(d, p) == -1:
            break
        a += 1
    r, v = _ext_pow((a, 1), (p + 1) // 2, d, p)
    if v != 0 or (r * r) % p != n:
        raise ModularArithmeticError(f"cipolla produced a non-root for n={n} mod {p}")
    return (r, (p - r) % p)


def has_homomorphism_to_Fp(p: int) -> bool:
    """
    True iff Q(omega) admits a ring homomorphism onto F_p, i.e. p = 3 or -3 is
    a quadratic residue mod the odd prime p. For p = 2 the polynomial
    x^2 + x + 1 is irreducible, so there is none.
    """
    require_modulus(p)
    if p == 3:
        return True
    if p == 2:
        return False
    return legendre_symbol(-3, p) == 1


# =============================================================================
# Prime ladder
# =============================================================================


@lru_cache(maxsize=None)
def primes_up_to(bound: int) -> Tuple[int, ...]:
    """Ascending primes <= bound (sieve of Eratosthenes)."""
    _require_int(bound, name="bound")
    if bound < 2:
        return ()
    is_prime = np.ones(bound + 1, dtype=bool)
    is_prime[:2] = False
    for q in range(2, math.isqrt(bound) + 1):
        if is_prime[q]:
            is_prime[q * q::q] = False
    return tuple(int(q) for q in np.flatnonzero(is_prime))


def is_small_prime(n: int, bound: int = 100) -> bool:
    return 2 <= n <= bound and n in primes_up_to(bound)


__all__ = [
    "ModularArithmeticError",
    "ModularInputError",
    "NotInvertibleError",
    "mod_inverse",
    "mod_power",
    "multiplicative_order",
    "MultiplicativeOrderCache",
    "DEFAULT_ORDER_CACHE",
    "cached_multiplicative_order",
    "legendre_symbol",
    "cipolla",
    "has_homomorphism_to_Fp",
    "primes_up_to",
    "is_small_prime",
]
