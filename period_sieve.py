#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Multi-prime period sieve for polynomial maps over Q and Q(omega)
================================================================================

A rational (or Q(omega)-rational) periodic point of exact period n reduces, at
every prime of good reduction, to a point whose behavior is captured by the
period set the functional graph finder returns at that prime. Intersecting
those sets over an ascending ladder of primes therefore only removes periods
that are impossible; whatever survives is "not yet excluded".

Entry points
------------
- possible_periods_search(coeffs, goal)     Q case, primes <= 100
- possible_periods_search_qw(coeffs, goal)  Q(omega) case, primes <= 300
- fast_possible_periods(reduced_polynomial) single prime
- possible_periods / possible_periods_qw    plain intersection, no goal

The search returns None ("not interesting") as soon as no candidate above
`goal` remains, and also when the ladder ends with nothing above `goal`.
Otherwise it returns the frozenset of surviving candidates > goal.

Within one call the ladder is walked in order (every early-exit decision
depends on the intersection so far). Separate calls share nothing except the
multiplicative-order cache and may run in parallel threads.
================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterator, Optional, Sequence, Tuple

from functional_graph import RAMIFIED_PRIMES, fast_possible_periods
from fp_polynomial import FpPolynomial
from modular_arith import (
    DEFAULT_ORDER_CACHE,
    MultiplicativeOrderCache,
    has_homomorphism_to_Fp,
    primes_up_to,
)
from reduction import PolynomialInQ, PolynomialInQw

_logger = logging.getLogger(__name__)


class PeriodSieveError(RuntimeError):
    """Base error of the sieve."""


class PeriodSieveInputError(PeriodSieveError, ValueError):
    """Invalid goal, configuration or coefficients."""


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class SieveConfig:
    """
    prime_bound      largest prime on the ladder (inclusive)
    include_infinity model the point at infinity (adds period 1 everywhere)
    ramified_primes  primes whose extension also gets the extra factor p
    """

    prime_bound: int
    include_infinity: bool = False
    ramified_primes: Tuple[int, ...] = RAMIFIED_PRIMES

    def __post_init__(self) -> None:
        if isinstance(self.prime_bound, bool) or not isinstance(self.prime_bound, int):
            raise PeriodSieveInputError(f"prime_bound must be int, got {type(self.prime_bound).__name__}")
        if self.prime_bound < 2:
            raise PeriodSieveInputError(f"prime_bound must be >= 2, got {self.prime_bound}")
        object.__setattr__(self, "ramified_primes", tuple(int(q) for q in self.ramified_primes))

    @property
    def ladder(self) -> Tuple[int, ...]:
        return primes_up_to(self.prime_bound)


Q_SIEVE_CONFIG = SieveConfig(prime_bound=100)
# usable primes are sparser over Q(omega): only p = 3 and p = 1 mod 3
QW_SIEVE_CONFIG = SieveConfig(prime_bound=300)


@dataclass(frozen=True)
class SieveOutcome:
    """
    Result of one sieve run plus its trace.

    periods    survivors > goal when interesting, else None
    candidates running intersection at the point the run stopped
    per_prime  (p, period set used at p) for every examined prime, in order
    """

    interesting: bool
    periods: Optional[FrozenSet[int]]
    candidates: FrozenSet[int]
    goal: int
    primes_examined: Tuple[int, ...] = ()
    per_prime: Tuple[Tuple[int, FrozenSet[int]], ...] = ()
    early_exit_prime: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "interesting": self.interesting,
            "periods": None if self.periods is None else sorted(self.periods),
            "candidates": sorted(self.candidates),
            "goal": self.goal,
            "primes_examined": list(self.primes_examined),
            "early_exit_prime": self.early_exit_prime,
        }


def _require_goal(goal: int) -> int:
    if isinstance(goal, bool) or not isinstance(goal, int):
        raise PeriodSieveInputError(f"goal must be int, got {type(goal).__name__}")
    if goal < 0:
        raise PeriodSieveInputError(f"goal must be >= 0, got {goal}")
    return goal


# =============================================================================
# Sieve
# =============================================================================


class PeriodSieve:
    """
    Walks the prime ladder of `config`, intersecting the period sets of the
    reductions that exist at each prime.
    """

    def __init__(
        self,
        config: SieveConfig = Q_SIEVE_CONFIG,
        order_cache: Optional[MultiplicativeOrderCache] = None,
    ) -> None:
        if not isinstance(config, SieveConfig):
            raise PeriodSieveInputError(f"config must be SieveConfig, got {type(config).__name__}")
        self.config = config
        self.order_cache = DEFAULT_ORDER_CACHE if order_cache is None else order_cache

    def periods_at(self, f: FpPolynomial) -> FrozenSet[int]:
        return fast_possible_periods(
            f,
            include_infinity=self.config.include_infinity,
            order_cache=self.order_cache,
            ramified_primes=self.config.ramified_primes,
        )

    # -- per-prime period sets -----------------------------------------------

    def _q_period_sets(self, poly: PolynomialInQ) -> Iterator[Tuple[int, FrozenSet[int]]]:
        for p in self.config.ladder:
            f = poly.reduce_or_none(p)
            if f is None:
                _logger.debug("p=%d: bad reduction, skipped", p)
                continue
            yield p, self.periods_at(f)

    def _qw_period_sets(self, poly: PolynomialInQw) -> Iterator[Tuple[int, FrozenSet[int]]]:
        for p in self.config.ladder:
            if not has_homomorphism_to_Fp(p):
                continue
            plus, minus = poly.reductions(p)
            if plus is None and minus is None:
                _logger.debug("p=%d: bad reduction under both homomorphisms, skipped", p)
                continue
            if plus is not None and minus is not None:
                yield p, self.periods_at(plus) & self.periods_at(minus)
            else:
                yield p, self.periods_at(plus if plus is not None else minus)

    # -- driver ----------------------------------------------------------------

    def _run(
        self,
        period_sets: Iterator[Tuple[int, FrozenSet[int]]],
        goal: int,
        *,
        early_exit: bool = True,
    ) -> SieveOutcome:
        running: Optional[FrozenSet[int]] = None
        examined = []
        trace = []
        for p, periods in period_sets:
            examined.append(p)
            trace.append((p, periods))
            if running is None:
                running = periods
                continue
            running = running & periods
            if early_exit and not any(n > goal for n in running):
                _logger.debug("early exit at p=%d (goal=%d)", p, goal)
                return SieveOutcome(
                    interesting=False,
                    periods=None,
                    candidates=running,
                    goal=goal,
                    primes_examined=tuple(examined),
                    per_prime=tuple(trace),
                    early_exit_prime=p,
                )

        candidates = frozenset() if running is None else running
        survivors = frozenset(n for n in candidates if n > goal)
        interesting = bool(survivors)
        return SieveOutcome(
            interesting=interesting,
            periods=survivors if interesting else None,
            candidates=candidates,
            goal=goal,
            primes_examined=tuple(examined),
            per_prime=tuple(trace),
        )

    def sieve(self, coeffs: Any, goal: int) -> SieveOutcome:
        """Q case."""
        goal = _require_goal(goal)
        poly = PolynomialInQ.from_coeffs(coeffs)
        return self._run(self._q_period_sets(poly), goal)

    def sieve_qw(self, coeffs: Any, goal: int) -> SieveOutcome:
        """Q(omega) case."""
        goal = _require_goal(goal)
        poly = PolynomialInQw.from_coeffs(coeffs)
        return self._run(self._qw_period_sets(poly), goal)

    def intersect_all(self, coeffs: Any) -> FrozenSet[int]:
        poly = PolynomialInQ.from_coeffs(coeffs)
        return self._run(self._q_period_sets(poly), 0, early_exit=False).candidates

    def intersect_all_qw(self, coeffs: Any) -> FrozenSet[int]:
        poly = PolynomialInQw.from_coeffs(coeffs)
        return self._run(self._qw_period_sets(poly), 0, early_exit=False).candidates


# =============================================================================
# Public entry points
# =============================================================================


def possible_periods_search(
    coeffs: Sequence[Any],
    goal: int,
    *,
    config: Optional[SieveConfig] = None,
    order_cache: Optional[MultiplicativeOrderCache] = None,
) -> Optional[FrozenSet[int]]:
    """
    Candidate periods > goal of the map defined by `coeffs` over Q (highest
    degree first), or None when none can survive.
    """
    sieve = PeriodSieve(Q_SIEVE_CONFIG if config is None else config, order_cache)
    return sieve.sieve(coeffs, goal).periods


def possible_periods_search_qw(
    coeffs: Sequence[Any],
    goal: int,
    *,
    config: Optional[SieveConfig] = None,
    order_cache: Optional[MultiplicativeOrderCache] = None,
) -> Optional[FrozenSet[int]]:
    """Same as possible_periods_search for coefficients in Q(omega)."""
    sieve = PeriodSieve(QW_SIEVE_CONFIG if config is None else config, order_cache)
    return sieve.sieve_qw(coeffs, goal).periods


def possible_periods(coeffs: Sequence[Any], prime_bound: int = 100) -> FrozenSet[int]:
    """Intersection of the period sets at every good prime <= prime_bound."""
    return PeriodSieve(SieveConfig(prime_bound=prime_bound)).intersect_all(coeffs)


def possible_periods_qw(coeffs: Sequence[Any], prime_bound: int = 300) -> FrozenSet[int]:
    return PeriodSieve(SieveConfig(prime_bound=prime_bound)).intersect_all_qw(coeffs)


__all__ = [
    "PeriodSieveError",
    "PeriodSieveInputError",
    "SieveConfig",
    "Q_SIEVE_CONFIG",
    "QW_SIEVE_CONFIG",
    "SieveOutcome",
    "PeriodSieve",
    "possible_periods_search",
    "possible_periods_search_qw",
    "possible_periods",
    "possible_periods_qw",
    "fast_possible_periods",
]


# =============================================================================
# Smoke run
# =============================================================================


def _configure_smoke_logging() -> None:
    """Install a default handler only when the host has not configured one."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="[%(levelname)s] %(name)s: %(message)s",
        )
    root.setLevel(logging.INFO)


def _smoke() -> Dict[str, Any]:
    cases = (
        (
            "z^2 - 29/16, goal 2",
            lambda: possible_periods_search([1, 0, "-29/16"], 2),
            lambda res: res is not None and 3 in res,
        ),
        (
            "z^4 - 5649488755/639128961, goal 1",
            lambda: possible_periods_search([1, 0, 0, 0, (-5649488755, 639128961)], 1),
            lambda res: res is not None and 2 in res,
        ),
        (
            "z^4 - 5649488754/639128961, goal 1",
            lambda: possible_periods_search([1, 0, 0, 0, (-5649488754, 639128961)], 1),
            lambda res: res is None,
        ),
        (
            "z^2 - 29/16 over Q(omega), goal 2",
            lambda: possible_periods_search_qw([1, 0, "-29/16"], 2),
            lambda res: res is not None and 3 in res,
        ),
    )
    out: Dict[str, Any] = {"ok": True, "cases": []}
    for name, run, check in cases:
        res = run()
        passed = bool(check(res))
        out["cases"].append({"name": name, "result": None if res is None else sorted(res), "passed": passed})
        _logger.info("[smoke] %s -> %s passed=%s", name, None if res is None else sorted(res), passed)
        if not passed:
            out["ok"] = False
    if not out["ok"]:
        raise PeriodSieveError("period_sieve smoke run failed")
    return out


if __name__ == "__main__":
    _configure_smoke_logging()
    _smoke()
