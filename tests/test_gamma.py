import math

import pytest
from scipy import special

from graphcalc import factorial, gamma
from graphcalc.gamma import MAX_FACTORIAL


def test_small_factorials():
    assert factorial(0) == 1
    assert factorial(1) == 1
    assert factorial(5) == 120
    assert factorial(10) == 3628800


def test_largest_factorial_is_finite():
    assert math.isfinite(factorial(MAX_FACTORIAL))
    assert factorial(MAX_FACTORIAL) == pytest.approx(math.factorial(170), rel=1e-12)


def test_factorial_overflow():
    assert factorial(171) == math.inf
    assert factorial(1e6) == math.inf
    assert factorial(math.inf) == math.inf


def test_factorial_undefined():
    assert math.isnan(factorial(-1))
    assert math.isnan(factorial(-5))
    assert math.isnan(factorial(-math.inf))
    assert math.isnan(factorial(math.nan))


def test_factorial_of_non_integers():
    assert factorial(0.5) == pytest.approx(0.886226925452758, abs=1e-6)
    assert factorial(-0.5) == pytest.approx(math.sqrt(math.pi), rel=1e-10)
    assert factorial(2.5) == pytest.approx(special.gamma(3.5), rel=1e-10)


@pytest.mark.parametrize('z', [0.1, 0.5, 1, 1.5, 2, 3.7, 10, 25.5, 100.25, 170.5, -0.5, -1.5, -2.25, -7.9])
def test_gamma_matches_scipy(z):
    assert gamma(z) == pytest.approx(special.gamma(z), rel=1e-10)


@pytest.mark.parametrize('z', [0, -1, -2, -100])
def test_gamma_poles(z):
    assert math.isnan(gamma(z))


def test_gamma_overflow():
    assert gamma(200) == math.inf
