#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Functional graph walk and single-prime period sets."""

import pytest

from fp_polynomial import FpPolynomial
from functional_graph import fast_possible_periods, walk_functional_graph
from modular_arith import MultiplicativeOrderCache


@pytest.mark.parametrize("p", [2, 3, 5, 7, 11, 31, 97, 293])
@pytest.mark.parametrize("include_infinity", [False, True])
def test_every_residue_is_visited_exactly_once(p, include_infinity):
    f = FpPolynomial((1, 0, 0, p - 3), p)
    walk = walk_functional_graph(f, include_infinity=include_infinity)
    start = 2 if include_infinity else 1
    assert sorted(walk.first_visit.tolist()) == list(range(start, start + p))
    assert walk.visits == p
    assert walk.successor.tolist() == [f.eval(z) for z in range(p)]


def test_translation_is_one_long_cycle():
    f = FpPolynomial((1, 1), 5)  # z + 1
    walk = walk_functional_graph(f)
    assert walk.cycles == ((0, 5),)
    assert walk.cycle_points(0) == [0, 1, 2, 3, 4]
    # multiplier 1 has order 1
    assert fast_possible_periods(f) == frozenset({5})


def test_squaring_mod_5():
    f = FpPolynomial((1, 0, 0), 5)  # z^2
    walk = walk_functional_graph(f)
    assert sorted(length for _, length in walk.cycles) == [1, 1]
    # fixed point 0 has multiplier 0; fixed point 1 has multiplier 2 of order 4
    assert fast_possible_periods(f) == frozenset({1, 4})


def test_zero_multiplier_adds_no_extension():
    f = FpPolynomial((1, 0, 1), 5)  # z^2 + 1: 0 -> 1 -> 2 -> 0, 3 -> 0, 4 -> 2
    walk = walk_functional_graph(f)
    assert [length for _, length in walk.cycles] == [3]
    assert fast_possible_periods(f) == frozenset({3})


def test_ramified_primes_get_extra_factor():
    assert fast_possible_periods(FpPolynomial((1, 0), 2)) == frozenset({1, 2})
    assert fast_possible_periods(FpPolynomial((1, 0), 3)) == frozenset({1, 3})
    assert fast_possible_periods(FpPolynomial((1, 0), 5)) == frozenset({1})
    assert fast_possible_periods(FpPolynomial((1, 0), 2), ramified_primes=()) == frozenset({1})


def test_z_squared_plus_one_mod_3():
    # 0 -> 1 -> 2 -> 2; fixed point 2 has multiplier 4 = 1
    assert fast_possible_periods(FpPolynomial((1, 0, 1), 3)) == frozenset({1, 3})


def test_point_at_infinity_adds_period_one():
    f = FpPolynomial((1, 1), 5)
    assert fast_possible_periods(f, include_infinity=True) == frozenset({1, 5})


def test_start_order_does_not_change_cycle_lengths():
    f = FpPolynomial((1, 0, 3), 31)
    forward = walk_functional_graph(f)
    backward = walk_functional_graph(f, start_order=range(30, -1, -1))
    assert sorted(n for _, n in forward.cycles) == sorted(n for _, n in backward.cycles)
    assert sorted(backward.first_visit.tolist()) == list(range(1, 32))


def test_cycle_points_match_lengths():
    f = FpPolynomial((1, 0, 0, 7), 97)
    walk = walk_functional_graph(f)
    assert walk.cycles
    for rep, length in walk.cycles:
        pts = walk.cycle_points(rep)
        assert len(pts) == length
        assert len(set(pts)) == length
        assert f.eval(pts[-1]) == rep


def test_extension_uses_injected_order_cache():
    cache = MultiplicativeOrderCache()
    fast_possible_periods(FpPolynomial((1, 0, 0), 5), order_cache=cache)
    assert (2, 5) in cache
    assert cache.computed == 1


def test_periods_are_multiples_of_cycle_lengths():
    for p in (7, 13, 31, 61):
        f = FpPolynomial((1, 0, 0, 0, p - 5), p)
        walk = walk_functional_graph(f)
        lengths = {n for _, n in walk.cycles}
        periods = fast_possible_periods(f)
        assert lengths <= periods
        assert all(any(n % m == 0 for m in lengths) for n in periods)
