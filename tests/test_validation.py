from decimal import Decimal

import pytest

from errors import ErrorKind, ValidationError
from validation import (parse_decimal, parse_int, parse_sweet_id, validate_credentials, validate_quantity,
                        validate_search, validate_sweet, validate_sweet_update)


def test_validate_sweet_cleans_values():
    data = validate_sweet({'name': ' Choc ', 'category': 'Chocolate', 'price': '2.99', 'stock': '4'})
    assert data == {'name': 'Choc', 'category': 'Chocolate', 'price': 2.99, 'stock': 4,
                    'description': None}


def test_first_failure_wins():
    with pytest.raises(ValidationError) as exc:
        validate_sweet({'price': 'x'})
    assert exc.value.field == 'name'
    assert exc.value.kind is ErrorKind.VALIDATION
    assert exc.value.status_code == 400


def test_partial_update_checks_present_fields_only():
    assert validate_sweet_update({'stock': 0, 'colour': 'red'}) == {'stock': 0}
    with pytest.raises(ValidationError) as exc:
        validate_sweet_update({'category': ''})
    assert exc.value.message == 'Category is required'


@pytest.mark.parametrize('price', ['nan', 'inf', True, [], None])
def test_price_must_be_finite_number(price):
    with pytest.raises(ValidationError):
        validate_sweet({'name': 'A', 'category': 'B', 'price': price, 'stock': 1})


def test_credentials_lowercase_email_and_default_role():
    data = validate_credentials({'email': ' Bob@Example.com', 'password': 'secret1'}, allow_role=True)
    assert data == {'email': 'bob@example.com', 'password': 'secret1', 'role': 'USER'}


def test_credentials_email_checked_first():
    with pytest.raises(ValidationError) as exc:
        validate_credentials({'email': 'nope', 'password': '1'})
    assert exc.value.field == 'email'


def test_quantity_and_id():
    assert validate_quantity('3') == 3
    with pytest.raises(ValidationError):
        validate_quantity(0)
    assert parse_sweet_id('12') == 12
    with pytest.raises(ValidationError):
        parse_sweet_id('twelve')


def test_parse_int_rejects_fractions_and_bools():
    assert parse_int(4.0) == 4
    assert parse_int(4.5) is None
    assert parse_int(False) is None


def test_search_drops_blank_filters():
    assert validate_search({'name': '', 'category': 'Candy', 'minPrice': ' '}) == {'category': 'Candy'}
    assert validate_search({'maxPrice': '10'})['maxPrice'] == 10


@pytest.mark.parametrize('raw', ['1e400', '1e8', '-1e400'])
def test_parse_decimal_bounds_magnitude(raw):
    assert parse_decimal(raw) is None


def test_parse_decimal_keeps_column_values():
    assert parse_decimal('99999999.99') == Decimal('99999999.99')
