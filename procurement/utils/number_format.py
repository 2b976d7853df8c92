"""Fixed-point money helpers for quantities, prices and amounts."""
import decimal
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from procurement.exceptions import ValidationError

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')

# Numeric(10, 2) columns hold at most eight integer digits
MAX_INPUT_VALUE = Decimal('99999999.99')

# Numeric(12, 2) columns for line amounts and order totals
MAX_AMOUNT = Decimal('9999999999.99')


def to_decimal(value, field_name: str) -> Decimal:
    """
    Convert a JSON scalar (int, float or numeric string) to Decimal.

    Floats go through str() so 25.99 becomes Decimal('25.99') and not the
    binary approximation.

    Raises:
        ValidationError: if the value is missing, boolean or not numeric.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a number')

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f'{field_name} must be a number')
    else:
        raise ValidationError(f'{field_name} must be a number')

    if not result.is_finite():
        raise ValidationError(f'{field_name} must be a finite number')
    return result


def parse_positive_money(value, field_name: str) -> Decimal:
    """
    Parse a strictly positive value with at most two fractional digits.

    Used for line-item quantity and unit price.

    Raises:
        ValidationError: if the value is not numeric, not positive, too large
            or carries more than two decimals.
    """
    result = to_decimal(value, field_name)

    if result <= 0:
        raise ValidationError(f'{field_name} must be greater than 0')

    if result > MAX_INPUT_VALUE:
        raise ValidationError(f'{field_name} cannot exceed {MAX_INPUT_VALUE}')

    quantized = result.quantize(TWO_PLACES)
    if quantized != result:
        raise ValidationError(f'{field_name} must have at most 2 decimal places')

    return quantized


def _check_amount(amount: Decimal, what: str) -> Decimal:
    if amount > MAX_AMOUNT:
        raise ValidationError(
            f'{what} {amount} exceeds the maximum of {MAX_AMOUNT}',
            payload={'max_amount': str(MAX_AMOUNT)}
        )
    return amount


def calculate_line_amount(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """Line amount = quantity x unit price, rounded half-up to cents."""
    with decimal.localcontext() as ctx:
        ctx.prec = 28
        amount = (Decimal(quantity) * Decimal(unit_price)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return _check_amount(amount, 'Line amount')


def calculate_total_amount(amounts) -> Decimal:
    """Exact sum of already-rounded line amounts."""
    total = ZERO
    for amount in amounts:
        total += Decimal(amount)
    return _check_amount(total.quantize(TWO_PLACES), 'Order total')
