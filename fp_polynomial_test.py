#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import numpy as np
import pytest

from fp_polynomial import FpPolynomial
from modular_arith import ModularInputError


def test_coefficients_are_normalized():
    f = FpPolynomial((1, 0, -1), 5)
    assert f.coeffs == (1, 0, 4)
    g = FpPolynomial.from_coeffs([12, -13, 7], 7)
    assert g.coeffs == (5, 1, 0)
    assert all(0 <= c < 7 for c in g.coeffs)


def test_eval_matches_slow_eval_and_vectorized():
    f = FpPolynomial((3, 0, 5, 11, 2), 17)
    table = f.evaluate_all()
    assert isinstance(table, np.ndarray)
    assert table.shape == (17,)
    for x in range(17):
        assert f.eval(x) == f.slow_eval(x) == int(table[x]) == f(x)


def test_eval_on_modulus_above_32_bits():
    p = 4_294_967_311  # prime above 2^32
    f = FpPolynomial((1, 0, p - 1), p)
    assert f.eval(p - 1) == 0
    assert f.eval(2) == 3


def test_derivative():
    assert FpPolynomial((3, 2, 1), 7).derivative().coeffs == (6, 2)
    assert FpPolynomial((1, 0, 0, 0, 5), 3).derivative().coeffs == (1, 0, 0, 0)
    assert FpPolynomial((4,), 7).derivative().coeffs == (0,)


def test_degree():
    assert FpPolynomial((1, 0, 3), 5).degree == 2
    assert FpPolynomial((5, 1, 3), 5).degree == 1
    assert FpPolynomial((0,), 5).degree == 0


def test_orbit_and_multiplier():
    f = FpPolynomial((1, 0, 1), 5)  # z^2 + 1
    assert f.orbit(0, 4) == [0, 1, 2, 0]
    # f' = 2z vanishes at 0, which lies on the cycle
    assert f.multiplier(3, 0) == 0

    g = FpPolynomial((1, 1), 5)  # z + 1
    assert g.multiplier(5, 0) == 1

    h = FpPolynomial((1, 0, 0), 5)  # z^2, fixed point 1 with f'(1) = 2
    assert h.multiplier(1, 1) == 2


def test_invalid_polynomials():
    with pytest.raises(ModularInputError):
        FpPolynomial((), 5)
    with pytest.raises(ModularInputError):
        FpPolynomial((1, 2), 1)
    with pytest.raises(ModularInputError):
        FpPolynomial((1.5, 2), 5)
    with pytest.raises(ModularInputError):
        FpPolynomial((1, 1), 5).orbit(0, 0)
