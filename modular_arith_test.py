#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Modular arithmetic kernel: inverse, power, order, Cipolla, prime ladder."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from modular_arith import (
    ModularInputError,
    MultiplicativeOrderCache,
    NotInvertibleError,
    cipolla,
    has_homomorphism_to_Fp,
    is_small_prime,
    legendre_symbol,
    mod_inverse,
    mod_power,
    multiplicative_order,
    primes_up_to,
)

PRIMES = (2, 3, 5, 7, 11, 13, 17, 29, 41, 97, 101)


@pytest.mark.parametrize("p", PRIMES)
def test_mod_inverse_is_inverse(p):
    for a in range(1, p):
        inv = mod_inverse(a, p)
        assert 0 <= inv < p
        assert (inv * a) % p == 1


def test_mod_inverse_negative_input():
    inv = mod_inverse(-3, 7)
    assert inv == 2
    assert (inv * -3) % 7 == 1


@pytest.mark.parametrize("a", [0, 14, -7])
def test_mod_inverse_not_invertible(a):
    with pytest.raises(NotInvertibleError):
        mod_inverse(a, 7)
    with pytest.raises(ZeroDivisionError):
        mod_inverse(a, 7)


def test_mod_power_matches_repeated_product():
    for p in (5, 13, 97):
        for a in (-4, 0, 1, 2, 10, 123):
            acc = 1
            for b in range(0, 12):
                assert mod_power(a, b, p) == acc % p
                acc *= a


def test_mod_power_rejects_bad_input():
    with pytest.raises(ModularInputError):
        mod_power(2, -1, 7)
    with pytest.raises(ModularInputError):
        mod_power(2, 3, 1)
    with pytest.raises(ModularInputError):
        mod_power(2.0, 3, 7)


@pytest.mark.parametrize("p", PRIMES)
def test_multiplicative_order_divides_group_order(p):
    for a in range(1, p):
        r = multiplicative_order(a, p)
        assert (p - 1) % r == 0
        assert pow(a, r, p) == 1
        assert all(pow(a, k, p) != 1 for k in range(1, r))


def test_multiplicative_order_known_values():
    assert multiplicative_order(1, 7) == 1
    assert multiplicative_order(2, 7) == 3
    assert multiplicative_order(3, 7) == 6
    assert multiplicative_order(-1, 7) == 2
    assert multiplicative_order(1, 2) == 1


def test_multiplicative_order_of_zero_raises():
    with pytest.raises(ModularInputError):
        multiplicative_order(0, 7)
    with pytest.raises(ModularInputError):
        multiplicative_order(21, 7)


def test_legendre_symbol():
    assert legendre_symbol(2, 7) == 1
    assert legendre_symbol(3, 7) == -1
    assert legendre_symbol(14, 7) == 0
    with pytest.raises(ModularInputError):
        legendre_symbol(1, 2)


@pytest.mark.parametrize("p", (3, 5, 7, 11, 13, 17, 29, 41, 97, 101))
def test_cipolla_roots_exactly_for_residues(p):
    squares = {(x * x) % p for x in range(p)}
    for n in range(p):
        res = cipolla(n, p)
        if n in squares:
            assert res is not None
            r, s = res
            assert (r * r) % p == n
            assert s == (p - r) % p
        else:
            assert res is None


def test_cipolla_small_cases():
    assert cipolla(0, 11) == (0, 0)
    assert cipolla(1, 11) == (1, 10)
    assert cipolla(0, 2) == (0, 0)
    assert cipolla(1, 2) == (1, 1)
    assert cipolla(-3, 7) == (2, 5)
    assert cipolla(3, 7) is None


def test_cipolla_negative_input_is_reduced():
    r, s = cipolla(-1, 13)
    assert (r * r) % 13 == 12
    assert (s * s) % 13 == 12


def test_has_homomorphism_matches_splitting_of_x2_x_1():
    for p in primes_up_to(300):
        assert has_homomorphism_to_Fp(p) == (p == 3 or p % 3 == 1), p
        if has_homomorphism_to_Fp(p):
            assert any((w * w + w + 1) % p == 0 for w in range(p))
        else:
            assert all((w * w + w + 1) % p != 0 for w in range(p))


def test_order_cache_computes_each_key_once_across_threads():
    cache = MultiplicativeOrderCache()
    keys = [(a, p) for p in (97, 101) for a in (2, 3, 5, 10)] * 25
    with ThreadPoolExecutor(max_workers=8) as pool:
        got = list(pool.map(lambda k: cache.order(*k), keys))
    assert got == [multiplicative_order(a, p) for a, p in keys]
    assert cache.computed == len(set(keys))
    assert len(cache) == len(set(keys))


def test_order_cache_normalizes_keys():
    cache = MultiplicativeOrderCache()
    assert cache.order(-1, 7) == 2
    assert cache.order(6, 7) == 2
    assert cache.computed == 1
    assert (13, 7) in cache


def test_order_cache_precompute_and_clear():
    cache = MultiplicativeOrderCache()
    cache.precompute([5, 7])
    assert len(cache) == 4 + 6
    before = cache.computed
    assert cache.order(3, 7) == 6
    assert cache.computed == before
    cache.clear()
    assert len(cache) == 0
    assert cache.computed == 0


def test_primes_up_to():
    assert primes_up_to(1) == ()
    assert primes_up_to(2) == (2,)
    assert primes_up_to(30) == (2, 3, 5, 7, 11, 13, 17, 19, 23, 29)
    assert len(primes_up_to(100)) == 25
    assert primes_up_to(300)[-1] == 293


def test_is_small_prime():
    assert is_small_prime(97)
    assert not is_small_prime(91)
    assert not is_small_prime(1)
    assert not is_small_prime(101)
    assert is_small_prime(101, bound=300)
