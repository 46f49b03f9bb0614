# backend/validation.py
"""Checks over raw request payloads, run before the inventory layer is touched.

Every function either returns cleaned values or raises
:class:`errors.ValidationError` naming the first offending field.
"""
from decimal import Decimal, InvalidOperation

from errors import ValidationError
from models import ROLES

MIN_PASSWORD_LENGTH = 6
# Numeric(10, 2) holds at most 99999999.99
MAX_PRICE = Decimal('1e8')
# sweets.stock and restock quantities stay inside a 32-bit INTEGER
MAX_STOCK = 2 ** 31 - 1


def parse_decimal(value, limit=MAX_PRICE):
    """Return a finite :class:`Decimal` below ``limit`` in magnitude, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or abs(number) >= limit:
        return None
    return number


def parse_int(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _non_empty_string(value):
    return isinstance(value, str) and value.strip() != ''


def _check_name(value):
    if not _non_empty_string(value):
        raise ValidationError('Name is required', field='name')
    return value.strip()


def _check_category(value):
    if not _non_empty_string(value):
        raise ValidationError('Category is required', field='category')
    return value.strip()


def _check_price(value):
    price = parse_decimal(value)
    if price is None or price < 0:
        raise ValidationError('Valid price is required', field='price')
    return float(price)


def _check_stock(value):
    stock = parse_int(value)
    if stock is None or not 0 <= stock <= MAX_STOCK:
        raise ValidationError('Valid stock is required', field='stock')
    return stock


def _check_description(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError('Valid description is required', field='description')
    return value


# name -> category -> price -> stock, first failure wins
SWEET_FIELDS = (
    ('name', _check_name),
    ('category', _check_category),
    ('price', _check_price),
    ('stock', _check_stock),
    ('description', _check_description),
)


def validate_sweet(payload):
    """Validate a full sweet payload for creation."""
    payload = payload or {}
    return {field: check(payload.get(field)) for field, check in SWEET_FIELDS}


def validate_sweet_update(payload):
    """Validate only the fields present in a partial sweet payload."""
    payload = payload or {}
    return {field: check(payload[field]) for field, check in SWEET_FIELDS if field in payload}


def validate_credentials(payload, allow_role=False):
    payload = payload or {}
    email = payload.get('email')
    password = payload.get('password')
    if not isinstance(email, str) or '@' not in email:
        raise ValidationError('Valid email is required', field='email')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError('Password must be at least %d characters' % MIN_PASSWORD_LENGTH,
                              field='password')
    cleaned = {'email': email.strip().lower(), 'password': password}
    if allow_role:
        role = payload.get('role') or 'USER'
        if role not in ROLES:
            raise ValidationError('Valid role is required', field='role')
        cleaned['role'] = role
    return cleaned


def validate_quantity(value):
    quantity = parse_int(value)
    if quantity is None or not 0 < quantity <= MAX_STOCK:
        raise ValidationError('Valid quantity is required', field='quantity')
    return quantity


def parse_sweet_id(raw):
    sweet_id = parse_int(raw)
    if sweet_id is None or abs(sweet_id) > MAX_STOCK:
        raise ValidationError('Invalid sweet ID', field='id')
    return sweet_id


def validate_search(args):
    """Turn query-string arguments into search filters; blanks are dropped."""
    filters = {}
    for field in ('name', 'category'):
        value = args.get(field)
        if value:
            filters[field] = value
    for field in ('minPrice', 'maxPrice'):
        raw = args.get(field)
        if raw is None or str(raw).strip() == '':
            continue
        bound = parse_decimal(raw)
        if bound is None:
            raise ValidationError('Valid %s is required' % field, field=field)
        filters[field] = bound
    return filters
