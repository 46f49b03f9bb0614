# backend/auth.py
import logging
from dataclasses import dataclass
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from errors import Conflict, Forbidden, Unauthenticated
from models import User

logger = logging.getLogger(__name__)

TOKEN_SALT = 'sweet-shop-auth'
DEFAULT_TOKEN_MAX_AGE = 24 * 60 * 60


@dataclass(frozen=True)
class Identity:
    id: int
    email: str
    role: str

    @property
    def is_admin(self):
        return self.role == 'ADMIN'


class TokenSigner:
    """Issues and verifies bearer tokens carrying ``{id, email, role}``."""

    def __init__(self, secret_key, max_age=DEFAULT_TOKEN_MAX_AGE):
        self.serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self.max_age = max_age

    def issue(self, user):
        return self.serializer.dumps(user.to_dict())

    def verify(self, token):
        try:
            data = self.serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.info('Rejected expired token')
            raise Unauthenticated('Invalid token')
        except BadSignature:
            raise Unauthenticated('Invalid token')
        try:
            return Identity(id=int(data['id']), email=data['email'], role=data['role'])
        except (KeyError, TypeError, ValueError):
            raise Unauthenticated('Invalid token')


class AuthService:

    def __init__(self, session, signer):
        self.session = session
        self.signer = signer

    def register(self, email, password, role='USER'):
        if self.session.query(User).filter_by(email=email).first():
            raise Conflict('User already exists', field='email')
        user = User(email=email, password_hash=generate_password_hash(password), role=role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict('User already exists', field='email')
        logger.info('Registered user %s as %s', user.id, user.role)
        return {'user': user.to_dict(), 'token': self.signer.issue(user)}

    def login(self, email, password):
        user = self.session.query(User).filter_by(email=email).first()
        if not user or not check_password_hash(user.password_hash, password):
            logger.warning('Rejected login for %s', email)
            raise Unauthenticated('Invalid credentials')
        logger.info('User %s logged in', user.id)
        return {'user': user.to_dict(), 'token': self.signer.issue(user)}


def authenticate(header):
    """Resolve an ``Authorization`` header value to an :class:`Identity`.

    The identity comes from the token alone; a role change in the store is
    only picked up once the caller logs in again.
    """
    if not header or not header.startswith('Bearer '):
        raise Unauthenticated('No token provided')
    return current_app.extensions['token_signer'].verify(header[len('Bearer '):])


def require_admin(identity):
    if not identity.is_admin:
        raise Forbidden('Admin access required')


def token_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        g.identity = authenticate(request.headers.get('Authorization'))
        return f(*args, **kwargs)
    return wrapped


def admin_required(f):
    @wraps(f)
    @token_required
    def wrapped(*args, **kwargs):
        require_admin(g.identity)
        return f(*args, **kwargs)
    return wrapped
