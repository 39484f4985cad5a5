import math

import pytest

from graphcalc import create_default_context, evaluate, format_axis_label, format_number


def test_integers_have_no_decimal_point():
    assert format_number(3.0) == "3"
    assert format_number(-42.0) == "-42"
    assert format_number(-0.0) == "0"


def test_twelve_significant_digits():
    assert format_number(1 / 3) == "0.333333333333"
    assert format_number(2 / 3) == "0.666666666667"
    assert format_number(0.1 + 0.2) == "0.3"
    assert format_number(2.5) == "2.5"


def test_large_and_tiny_values_are_scientific():
    assert format_number(1e12) == "1.000000e+12"
    assert format_number(-2.5e15) == "-2.500000e+15"
    assert format_number(1.5e-11) == "1.500000e-11"
    assert format_number(999999999999.0) == "999999999999"


@pytest.mark.parametrize('value', [None, math.nan, math.inf, -math.inf])
def test_non_finite_is_error(value):
    assert format_number(value) == "Error"


def test_axis_labels():
    assert format_axis_label(2.0) == "2"
    assert format_axis_label(2.5) == "2.5"
    assert format_axis_label(-10.0) == "-10"
    assert format_axis_label(0.2) == "0.2"
    assert format_axis_label(1000.0) == "1e+3"
    assert format_axis_label(5000.0) == "5e+3"
    assert format_axis_label(0.005) == "5e-3"
    assert format_axis_label(-2e6) == "-2e+6"


@pytest.mark.parametrize('value', [1 / 3, 2 / 3, 1e12, 1.5e-11, -7.25, 123456.789, math.pi * 1e20])
def test_formatted_output_reads_back(value):
    ctx = create_default_context()
    shown = format_number(value)
    assert str(evaluate(ctx, shown)) == shown
