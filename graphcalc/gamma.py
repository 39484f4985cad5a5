import math

# Lanczos approximation coefficients for g = 7, n = 9
_g = 7
_lanczos = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)
_sqrt_2pi = math.sqrt(2 * math.pi)

# 171! is the first factorial that doesn't fit in a double
MAX_FACTORIAL = 170


def factorial(n: float) -> float:
    """
    Factorial of `n`, extended to real numbers by factorial(n) = Γ(n+1).

    Integers from 0 to 170 are computed exactly. Larger values overflow to infinity, negative integers give NaN.
    """
    if math.isnan(n):
        return math.nan
    if math.isinf(n):
        return math.inf if n > 0 else math.nan
    if n > MAX_FACTORIAL:
        return math.inf

    if float(n).is_integer():
        if n < 0:
            return math.nan
        result = 1.0
        for i in range(2, int(n) + 1):
            result *= i
        return result

    return gamma(n + 1)


def gamma(z: float) -> float:
    """
    Gamma function Γ(z) using the Lanczos approximation, accurate to about 15 significant digits.

    The reflection formula Γ(z) = π / (sin(πz)Γ(1-z)) is used for z < 0.5. Γ is undefined at zero and the negative
    integers, where NaN is returned.
    """
    if z <= 0 and float(z).is_integer():
        return math.nan

    if z < 0.5:
        return math.pi / (math.sin(math.pi * z) * gamma(1 - z))

    z -= 1
    x = _lanczos[0]
    for i in range(1, _g + 2):
        x += _lanczos[i] / (z + i)
    t = z + _g + 0.5

    # t^(z+0.5) * e^-t, in log space so that neither factor overflows on its own
    try:
        return _sqrt_2pi * math.exp((z + 0.5) * math.log(t) - t) * x
    except OverflowError:
        return math.inf
