# backend/inventory.py
"""Reads and writes against the sweets table.

:class:`Inventory` is built around an explicit SQLAlchemy session so the
same code runs against the request-scoped ``db.session`` in the app and an
isolated session in tests.
"""
import logging

from sqlalchemy import update

from errors import Conflict, NotFound, ValidationError
from models import Purchase, Sweet, utcnow
from validation import MAX_STOCK

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'category', 'price', 'stock', 'description')


class Inventory:

    def __init__(self, session):
        self.session = session

    def create(self, data):
        sweet = Sweet(
            name=data['name'],
            category=data['category'],
            price=data['price'],
            stock=data['stock'],
            description=data.get('description'),
        )
        self.session.add(sweet)
        self.session.commit()
        logger.info('Created sweet %s (%s)', sweet.id, sweet.name)
        return sweet

    def list(self):
        return self.session.query(Sweet).order_by(Sweet.id).all()

    def get(self, sweet_id):
        sweet = self.session.get(Sweet, sweet_id)
        if sweet is None:
            raise NotFound('Sweet not found', field='id')
        return sweet

    def search(self, name=None, category=None, minPrice=None, maxPrice=None):
        query = self.session.query(Sweet)
        if name:
            query = query.filter(Sweet.name.like(f'%{name}%'))
        if category:
            query = query.filter(Sweet.category == category)
        if minPrice is not None:
            query = query.filter(Sweet.price >= minPrice)
        if maxPrice is not None:
            query = query.filter(Sweet.price <= maxPrice)
        return query.order_by(Sweet.id).all()

    def update(self, sweet_id, changes):
        sweet = self.get(sweet_id)
        changed = False
        for field in EDITABLE_FIELDS:
            if field in changes and getattr(sweet, field) != changes[field]:
                setattr(sweet, field, changes[field])
                changed = True
        if not changed:
            return sweet
        self.session.commit()
        logger.info('Updated sweet %s', sweet_id)
        return sweet

    def remove(self, sweet_id):
        sweet = self.get(sweet_id)
        snapshot = sweet.to_dict()
        self.session.query(Purchase).filter(Purchase.sweet_id == sweet_id) \
            .update({Purchase.sweet_id: None}, synchronize_session=False)
        self.session.delete(sweet)
        self.session.commit()
        logger.info('Deleted sweet %s (%s)', sweet_id, snapshot['name'])
        return snapshot

    def purchase(self, user_id, sweet_id):
        """Sell one unit of a sweet to ``user_id`` and record the sale.

        The decrement is a single guarded UPDATE, so two concurrent buyers
        can never take the last unit twice.
        """
        result = self.session.execute(
            update(Sweet)
            .where(Sweet.id == sweet_id, Sweet.stock > 0)
            .values(stock=Sweet.stock - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            self.get(sweet_id)
            logger.warning('Purchase of sweet %s by user %s rejected: out of stock', sweet_id, user_id)
            raise Conflict('Sweet out of stock', field='stock')

        self.session.add(Purchase(user_id=user_id, sweet_id=sweet_id, quantity=1))
        self.session.commit()
        sweet = self.get(sweet_id)
        logger.info('User %s purchased sweet %s, %s left', user_id, sweet_id, sweet.stock)
        return sweet

    def restock(self, sweet_id, quantity):
        sweet = self.get(sweet_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError('Quantity must be positive', field='quantity')
        if sweet.stock + quantity > MAX_STOCK:
            raise ValidationError('Valid quantity is required', field='quantity')

        self.session.execute(
            update(Sweet)
            .where(Sweet.id == sweet_id)
            .values(stock=Sweet.stock + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        self.session.refresh(sweet)
        logger.info('Restocked sweet %s by %s, now %s', sweet_id, quantity, sweet.stock)
        return sweet
