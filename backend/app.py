# backend/app.py
import logging
import os

import click
from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, g, jsonify, request
from flask.cli import with_appcontext
from werkzeug.exceptions import HTTPException

from auth import DEFAULT_TOKEN_MAX_AGE, AuthService, TokenSigner, admin_required, token_required
from errors import ShopError
from inventory import Inventory
from models import db
from validation import (parse_sweet_id, validate_credentials, validate_quantity, validate_search,
                        validate_sweet, validate_sweet_update)

load_dotenv()

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def create_app(test_config=None):
    app = Flask(__name__)
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///sweet_shop.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'devsecret')
    app.config['TOKEN_MAX_AGE'] = int(os.getenv('TOKEN_MAX_AGE', DEFAULT_TOKEN_MAX_AGE))
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    db.init_app(app)
    app.extensions['token_signer'] = TokenSigner(app.config['SECRET_KEY'], app.config['TOKEN_MAX_AGE'])

    app.register_blueprint(api)
    register_error_handlers(app)
    app.cli.add_command(init_db_command)

    @app.route('/')
    def index():
        return 'Sweet Shop Backend is running'

    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):
    @app.errorhandler(ShopError)
    def handle_shop_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({'error': err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500


@click.command('init-db')
@click.option('--drop', is_flag=True, help='Drop existing tables first.')
@with_appcontext
def init_db_command(drop):
    """Create the shop tables."""
    if drop:
        db.drop_all()
    db.create_all()
    click.echo('Initialized the database.')


def inventory():
    return Inventory(db.session)


def auth_service():
    return AuthService(db.session, current_app.extensions['token_signer'])


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# Auth

@api.route('/auth/register', methods=['POST'])
def register():
    data = validate_credentials(json_body(), allow_role=True)
    result = auth_service().register(data['email'], data['password'], data['role'])
    return jsonify(result), 201


@api.route('/auth/login', methods=['POST'])
def login():
    data = validate_credentials(json_body())
    return jsonify(auth_service().login(data['email'], data['password']))


# Sweets

@api.route('/sweets', methods=['POST'])
@admin_required
def create_sweet():
    sweet = inventory().create(validate_sweet(json_body()))
    return jsonify(sweet.to_dict()), 201


@api.route('/sweets', methods=['GET'])
def list_sweets():
    return jsonify([s.to_dict() for s in inventory().list()])


@api.route('/sweets/search', methods=['GET'])
def search_sweets():
    filters = validate_search(request.args)
    return jsonify([s.to_dict() for s in inventory().search(**filters)])


@api.route('/sweets/<sweet_id>', methods=['GET'])
def get_sweet(sweet_id):
    return jsonify(inventory().get(parse_sweet_id(sweet_id)).to_dict())


@api.route('/sweets/<sweet_id>', methods=['PUT'])
@admin_required
def update_sweet(sweet_id):
    sid = parse_sweet_id(sweet_id)
    sweet = inventory().update(sid, validate_sweet_update(json_body()))
    return jsonify(sweet.to_dict())


@api.route('/sweets/<sweet_id>', methods=['DELETE'])
@admin_required
def delete_sweet(sweet_id):
    sweet = inventory().remove(parse_sweet_id(sweet_id))
    return jsonify({'message': 'Sweet deleted', 'sweet': sweet})


@api.route('/sweets/<sweet_id>/purchase', methods=['POST'])
@token_required
def purchase_sweet(sweet_id):
    sweet = inventory().purchase(g.identity.id, parse_sweet_id(sweet_id))
    return jsonify({'message': 'Purchase successful', 'sweet': sweet.to_dict()})


@api.route('/sweets/<sweet_id>/restock', methods=['POST'])
@admin_required
def restock_sweet(sweet_id):
    sid = parse_sweet_id(sweet_id)
    quantity = validate_quantity(json_body().get('quantity'))
    sweet = inventory().restock(sid, quantity)
    return jsonify({'message': 'Restock successful', 'sweet': sweet.to_dict()})


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=int(os.getenv('PORT', 3000)),
                     debug=os.getenv('FLASK_DEBUG') == '1')
