# backend/models.py
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

ROLES = ('USER', 'ADMIN')


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(10), nullable=False, default='USER')
    created_at = db.Column(db.DateTime, default=utcnow)
    purchases = db.relationship('Purchase', backref='user', lazy=True)

    def to_dict(self):
        return {'id': self.id, 'email': self.email, 'role': self.role}


class Sweet(db.Model):
    __tablename__ = 'sweets'
    __table_args__ = (db.CheckConstraint('stock >= 0', name='ck_sweets_stock_non_negative'),)
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'price': float(self.price),
            'stock': self.stock,
            'description': self.description,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Purchase(db.Model):
    __tablename__ = 'purchases'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    sweet_id = db.Column(db.Integer, db.ForeignKey('sweets.id', ondelete='SET NULL'), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    purchase_date = db.Column(db.DateTime, default=utcnow)
