import pytest

from graphcalc import AngleMode, Calculator, ErrorKind, Grapher, StandardCalculator, Viewport


def type_keys(calc, keys):
    for key in keys:
        if key.isdigit():
            calc.input_number(key)
        elif key == '.':
            calc.input_decimal()
        elif key in '()':
            calc.input_parenthesis(key)
        else:
            calc.input_operator(key)


def test_running_result():
    calc = Calculator()
    assert calc.display == '0'

    type_keys(calc, '2+3')
    assert calc.expression == '2+3'
    assert calc.display == '5'

    assert calc.calculate().value == 5
    assert calc.history == '2+3 ='
    assert calc.expression == ''
    assert calc.display == '5'


def test_operators_use_display_glyphs():
    calc = Calculator()
    type_keys(calc, '6*2/3-1^2')
    assert calc.expression == '6×2÷3−1^2'
    assert calc.display == '3'


def test_operator_replaces_trailing_operator():
    calc = Calculator()
    type_keys(calc, '2+*')
    assert calc.expression == '2×'


def test_chaining_from_result():
    calc = Calculator()
    type_keys(calc, '1/3')
    calc.calculate()

    type_keys(calc, '*3')
    assert calc.display == '1'

    calc.calculate()
    calc.input_function('square')
    assert calc.expression == '1^2'


def test_operator_on_empty_expression():
    calc = Calculator()
    calc.input_operator('+')
    assert calc.expression == ''

    type_keys(calc, '-4')
    assert calc.expression == '−4'
    assert calc.display == '-4'


def test_decimal_point():
    calc = Calculator()
    calc.input_decimal()
    calc.input_decimal()
    assert calc.expression == '0.'

    type_keys(calc, '5+')
    calc.input_decimal()
    assert calc.expression == '0.5+0.'

    type_keys(calc, '25.')
    assert calc.expression == '0.5+0.25'
    assert calc.display == '0.75'


def test_functions_in_degrees():
    calc = Calculator()
    calc.input_function('sin')
    type_keys(calc, '30')
    assert calc.display == 'Error'

    calc.input_parenthesis(')')
    assert calc.expression == 'sin(30)'
    assert calc.calculate().value == pytest.approx(0.5)
    assert calc.display == '0.5'


def test_radians():
    calc = Calculator(mode=AngleMode.RADIANS)
    calc.input_function('cos')
    type_keys(calc, '0)')
    assert calc.calculate().value == 1


def test_factorial_and_square_start_from_result():
    calc = Calculator()
    type_keys(calc, '5')
    calc.calculate()
    calc.input_function('factorial')
    assert calc.expression == '5!'
    assert calc.display == '120'

    calc.clear()
    type_keys(calc, '3')
    calc.calculate()
    calc.input_function('square')
    assert calc.display == '9'


def test_constants():
    calc = Calculator()
    calc.input_number('2')
    calc.input_constant('pi')
    assert calc.expression == '2π'
    assert calc.display == '6.28318530718'

    calc.clear()
    calc.input_constant('e')
    assert calc.display == '2.71828182846'


def test_backspace():
    calc = Calculator()
    type_keys(calc, '12')
    calc.backspace()
    assert calc.expression == '1'
    assert calc.display == '1'

    type_keys(calc, '+')
    calc.input_function('sqrt')
    assert calc.expression == '1+sqrt('
    calc.backspace()
    assert calc.expression == '1+'

    calc.backspace()
    calc.backspace()
    assert calc.expression == ''
    assert calc.display == '0'

    calc.backspace()
    assert calc.expression == ''


def test_negate():
    calc = Calculator()
    type_keys(calc, '5')
    calc.negate()
    assert calc.expression == '−5'
    assert calc.display == '-5'

    calc.negate()
    assert calc.expression == '5'
    assert calc.display == '5'


def test_division_by_zero_shows_error():
    calc = Calculator()
    type_keys(calc, '1/0')
    result = calc.calculate()
    assert result.error == ErrorKind.INFINITE
    assert calc.display == 'Error'

    # Errors can't be continued from
    calc.input_operator('+')
    assert calc.expression == ''


def test_clear():
    calc = Calculator()
    type_keys(calc, '7*6')
    calc.calculate()
    calc.clear()
    assert calc.expression == ''
    assert calc.display == '0'
    assert calc.history == ''


def test_unknown_function_key_is_ignored():
    calc = Calculator()
    calc.input_function('cosh')
    assert calc.expression == ''


def standard_keys(calc, keys):
    for key in keys:
        if key.isdigit():
            calc.input_number(key)
        elif key == '.':
            calc.input_decimal()
        elif key == '=':
            calc.calculate()
        else:
            calc.input_operator(key)


def test_standard_calculation():
    calc = StandardCalculator()
    assert calc.display == '0'

    standard_keys(calc, '12+7')
    assert calc.expression == '12 +'
    assert calc.display == '7'

    calc.calculate()
    assert calc.expression == '12 + 7 ='
    assert calc.display == '19'

    # Nothing pending
    calc.calculate()
    assert calc.display == '19'


def test_standard_chaining():
    calc = StandardCalculator()
    standard_keys(calc, '2+3*')
    assert calc.display == '5'
    assert calc.expression == '5 ×'

    standard_keys(calc, '4=')
    assert calc.display == '20'

    # A second operator in a row replaces the first
    standard_keys(calc, '-/2=')
    assert calc.display == '10'

    # Continuing from a result
    standard_keys(calc, '+5=')
    assert calc.display == '15'


def test_standard_number_entry():
    calc = StandardCalculator()
    standard_keys(calc, '007')
    assert calc.display == '7'

    calc.clear()
    standard_keys(calc, '1234567890123456789')
    assert calc.entry == '123456789012345'
    assert calc.display == '1.234568e+14'

    calc.clear()
    standard_keys(calc, '.')
    assert calc.display == '0.'
    standard_keys(calc, '5.2')
    assert calc.display == '0.52'


def test_standard_percent():
    calc = StandardCalculator()
    standard_keys(calc, '50')
    calc.percent()
    assert calc.display == '0.5'

    standard_keys(calc, '*8=')
    assert calc.display == '4'


def test_standard_division_by_zero():
    calc = StandardCalculator()
    standard_keys(calc, '5/0=')
    assert calc.display == 'Error'
    assert calc.error
    assert calc.expression == ''

    # The operator is gone and operators are ignored until a number is typed
    standard_keys(calc, '+=')
    assert calc.display == 'Error'
    calc.percent()
    assert calc.display == 'Error'

    standard_keys(calc, '3+4=')
    assert calc.display == '7'


def test_standard_backspace():
    calc = StandardCalculator()
    standard_keys(calc, '123')
    calc.backspace()
    assert calc.display == '12'

    calc.negate()
    calc.backspace()
    calc.backspace()
    assert calc.display == '0'

    # A result is cleared entirely
    standard_keys(calc, '9+1=')
    calc.backspace()
    assert calc.display == '0'
    assert calc.expression == ''

    standard_keys(calc, '1/0=')
    calc.backspace()
    assert calc.display == '0'
    assert not calc.error


def test_standard_negate():
    calc = StandardCalculator()
    calc.negate()
    assert calc.display == '0'

    standard_keys(calc, '5')
    calc.negate()
    assert calc.display == '-5'
    calc.negate()
    assert calc.display == '5'

    standard_keys(calc, '/0=')
    calc.negate()
    assert calc.display == 'Error'


def test_standard_display():
    calc = StandardCalculator()
    standard_keys(calc, '.1+.2=')
    assert calc.display == '0.3'

    standard_keys(calc, '1/3=')
    assert calc.display == '0.3333333333'

    standard_keys(calc, '1000000*1000000=')
    assert calc.display == '1.000000e+12'


def test_grapher_functions():
    grapher = Grapher()
    first = grapher.add_function('x^2')
    assert first.color == '#4a90d9'
    assert grapher.add_function('x^2') is None
    assert grapher.add_function('') is None
    grapher.add_function('sin(x)')
    assert len(grapher.functions) == 2

    assert grapher.remove_function(0) == first
    grapher.clear_all()
    assert len(grapher.functions) == 0


def test_grapher_range():
    grapher = Grapher()
    assert grapher.viewport == Viewport()

    assert not grapher.update_range(5, 1, 0, 1)
    assert grapher.viewport == Viewport()

    assert grapher.update_range(-1, 1, -2, 2)
    assert grapher.viewport.bounds == (-1, 1, -2, 2)


def test_grapher_rejects_unrepresentable_range():
    grapher = Grapher()
    assert not grapher.update_range(-1e308, 1e308, -10, 10)
    assert not grapher.update_range(0, 5e-324, -10, 10)
    assert grapher.viewport == Viewport()

    grapher.add_function('x')
    assert grapher.update_range(-1e307, 1e307, -10, 10)
    grid, curves = grapher.frame(100, 100)
    assert grid.x_step > 0
    (_, segments), = curves
    assert segments


def test_grapher_frame():
    grapher = Grapher()
    grapher.add_function('1/x')
    grid, curves = grapher.frame(400, 300)

    assert grid.x_step == 2
    (function, segments), = curves
    assert function.expression == '1/x'
    assert len(segments) >= 2


def test_grapher_draw():
    import matplotlib.pyplot as plt

    grapher = Grapher(viewport=Viewport(-5, 5, -2, 2))
    grapher.add_function('sin(x)')
    fig = grapher.draw(300, 200)
    try:
        assert len(fig.axes) == 1
    finally:
        plt.close(fig)
