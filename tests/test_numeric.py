from decimal import Decimal

from apr.numeric import DECIMAL_CONTEXT, FixedPoint, convert_with_decimals, to_decimal


def test_convert_one_token():
    assert convert_with_decimals("1000000000000000000", 18) == 1.0


def test_convert_zero():
    assert convert_with_decimals("0", 18) == 0


def test_convert_without_decimals_or_value():
    assert convert_with_decimals("1000", 0) is None
    assert convert_with_decimals("", 18) is None
    assert convert_with_decimals(None, 18) is None


def test_convert_keeps_full_uint256_precision():
    raw = 2**256 - 1
    value = convert_with_decimals(raw, 18)
    assert int(value.scaleb(18, context=DECIMAL_CONTEXT)) == raw


def test_fixed_point_float():
    assert float(FixedPoint(1_500_000, 6)) == 1.5


def test_to_decimal_parses_subgraph_strings():
    assert to_decimal("12.5") == Decimal("12.5")
    assert to_decimal(None) is None
