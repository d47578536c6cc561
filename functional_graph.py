#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Functional graph period finder over F_p
================================================================================

For f in F_p[z], the functional graph has an edge z -> f(z) for every residue.
Periodic points are exactly the members of its cycles. One linear pass finds
all of them:

  1. visit table of size p, every slot unvisited (index 0); the visit counter
     starts at 1, or at 2 when the point at infinity is modeled (period 1 is
     then inserted for it up front);
  2. from every unvisited start s, walk z -> f(z) stamping visit indices until
     an already stamped slot is hit;
  3. the walk closed a new cycle iff the hit slot was stamped during this same
     walk (index >= start index); the cycle length is counter - index.
     Otherwise it ran into an already explored component.

Frobenius-order extension
-------------------------
For every new cycle of length m the multiplier lambda = prod f'(z_i) over the
cycle is formed mod p. lambda = 0 adds nothing more. Otherwise, with
r = ord_p(lambda), the period m*r is added, and for the ramified primes
p in {2, 3} also m*r*p.

Every residue is stamped exactly once, so the pass is O(p) time and space and
the resulting set does not depend on the order of the starting points.
================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from fp_polynomial import FpPolynomial
from modular_arith import DEFAULT_ORDER_CACHE, MultiplicativeOrderCache

_logger = logging.getLogger(__name__)

RAMIFIED_PRIMES: Tuple[int, ...] = (2, 3)


@dataclass(frozen=True)
class FunctionalGraphWalk:
    """
    Visit table of one pass.

    successor[z]   = f(z)
    first_visit[z] = visit index stamped on z (never 0 after the pass)
    cycles         = (representative, length) per cycle, in discovery order
    """

    p: int
    successor: np.ndarray
    first_visit: np.ndarray
    cycles: Tuple[Tuple[int, int], ...]
    start_index: int
    next_index: int

    @property
    def visits(self) -> int:
        return self.next_index - self.start_index

    def cycle_points(self, representative: int) -> List[int]:
        """The points of the cycle through `representative`, in orbit order."""
        pts = [int(representative)]
        z = int(self.successor[representative])
        while z != pts[0]:
            pts.append(z)
            z = int(self.successor[z])
        return pts


def walk_functional_graph(
    f: FpPolynomial,
    *,
    include_infinity: bool = False,
    start_order: Optional[Iterable[int]] = None,
) -> FunctionalGraphWalk:
    """
    One pass over the functional graph of f.

    `start_order` permutes the starting residues; the set of cycle lengths
    found is the same for every order.
    """
    p = f.p
    successor: Sequence[int] = f.evaluate_all().tolist()
    first_visit = [0] * p
    start_index = 2 if include_infinity else 1
    index = start_index
    cycles: List[Tuple[int, int]] = []

    for s in (range(p) if start_order is None else start_order):
        if first_visit[s] != 0:
            continue
        walk_start = index
        z = s
        while first_visit[z] == 0:
            first_visit[z] = index
            index += 1
            z = successor[z]
        if first_visit[z] >= walk_start:
            cycles.append((z, index - first_visit[z]))

    return FunctionalGraphWalk(
        p=p,
        successor=np.asarray(successor, dtype=np.int64),
        first_visit=np.asarray(first_visit, dtype=np.int64),
        cycles=tuple(cycles),
        start_index=start_index,
        next_index=index,
    )


def cycle_multiplier(
    successor: Sequence[int],
    derivative_values: Sequence[int],
    representative: int,
    period: int,
    p: int,
) -> int:
    """prod f'(z) over the cycle of `period` points starting at `representative`, mod p."""
    acc = 1
    z = representative
    for _ in range(period):
        acc = (acc * derivative_values[z]) % p
        z = successor[z]
    return acc


def fast_possible_periods(
    f: FpPolynomial,
    *,
    include_infinity: bool = False,
    order_cache: Optional[MultiplicativeOrderCache] = None,
    ramified_primes: Iterable[int] = RAMIFIED_PRIMES,
) -> FrozenSet[int]:
    """
    Periods visible at the single prime p = f.p: every cycle length of the
    functional graph plus the Frobenius-order extensions.
    """
    cache = DEFAULT_ORDER_CACHE if order_cache is None else order_cache
    p = f.p
    walk = walk_functional_graph(f, include_infinity=include_infinity)
    successor = walk.successor.tolist()
    derivative_values = f.derivative().evaluate_all().tolist()

    periods = set()
    if include_infinity:
        periods.add(1)
    extend_by_p = p in tuple(ramified_primes)
    for rep, period in walk.cycles:
        periods.add(period)
        mult = cycle_multiplier(successor, derivative_values, rep, period, p)
        if mult == 0:
            continue
        r = cache.order(mult, p)
        periods.add(period * r)
        if extend_by_p:
            periods.add(period * r * p)

    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug("p=%d: %d cycles, periods=%s", p, len(walk.cycles), sorted(periods))
    return frozenset(periods)


__all__ = [
    "RAMIFIED_PRIMES",
    "FunctionalGraphWalk",
    "walk_functional_graph",
    "cycle_multiplier",
    "fast_possible_periods",
]
