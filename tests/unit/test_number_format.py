"""
Unit tests for money parsing and rounding helpers.
"""

import pytest
from decimal import Decimal

from procurement.exceptions import ValidationError
from procurement.utils.formatters import money
from procurement.utils.number_format import (
    calculate_line_amount, calculate_total_amount, parse_positive_money, to_decimal
)


class TestCalculateLineAmount:

    def test_exact_product(self):
        assert calculate_line_amount(Decimal('10'), Decimal('25.99')) == Decimal('259.90')
        assert calculate_line_amount(Decimal('5'), Decimal('25.99')) == Decimal('129.95')

    def test_rounds_half_up_to_cents(self):
        """0.5 x 0.01 = 0.005 rounds up, 1.5 x 0.33 = 0.495 rounds up too."""
        assert calculate_line_amount(Decimal('0.5'), Decimal('0.01')) == Decimal('0.01')
        assert calculate_line_amount(Decimal('1.5'), Decimal('0.33')) == Decimal('0.50')
        assert calculate_line_amount(Decimal('0.25'), Decimal('0.25')) == Decimal('0.06')

    def test_largest_inputs_keep_precision(self):
        amount = calculate_line_amount(Decimal('99999999.99'), Decimal('1.00'))
        assert amount == Decimal('99999999.99')


class TestCalculateTotalAmount:

    def test_sums_exactly(self):
        total = calculate_total_amount([Decimal('0.10'), Decimal('0.20'), Decimal('259.90')])
        assert total == Decimal('260.20')

    def test_empty_is_zero(self):
        assert calculate_total_amount([]) == Decimal('0.00')


class TestParsePositiveMoney:

    def test_float_goes_through_string(self):
        assert parse_positive_money(25.99, 'unit_price') == Decimal('25.99')

    def test_accepts_int_and_numeric_string(self):
        assert parse_positive_money(10, 'quantity') == Decimal('10.00')
        assert parse_positive_money('3.5', 'quantity') == Decimal('3.50')

    @pytest.mark.parametrize('value', [0, -1, '-0.01', 0.0])
    def test_rejects_non_positive(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_positive_money(value, 'quantity')
        assert exc.value.status_code == 400
        assert 'greater than 0' in exc.value.message

    def test_rejects_more_than_two_decimals(self):
        with pytest.raises(ValidationError) as exc:
            parse_positive_money('1.005', 'unit_price')
        assert 'at most 2 decimal places' in exc.value.message

    def test_rejects_values_beyond_column_size(self):
        with pytest.raises(ValidationError):
            parse_positive_money('100000000', 'unit_price')

    @pytest.mark.parametrize('value', [None, True, 'abc', [], 'NaN', 'Infinity'])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            parse_positive_money(value, 'quantity')


def test_to_decimal_keeps_decimal_instances():
    value = Decimal('7.25')
    assert to_decimal(value, 'quantity') is value


def test_money_formatter_renders_two_decimals():
    assert money(Decimal('259.9')) == '259.90'
    assert money(10) == '10.00'
    assert money(None) is None


def test_line_amount_beyond_column_size_rejected():
    with pytest.raises(ValidationError) as exc:
        calculate_line_amount(Decimal('99999999.99'), Decimal('99999999.99'))
    assert exc.value.payload == {'max_amount': '9999999999.99'}


def test_total_beyond_column_size_rejected():
    with pytest.raises(ValidationError):
        calculate_total_amount([Decimal('9999999999.99'), Decimal('0.01')])
