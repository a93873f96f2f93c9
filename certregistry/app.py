# certregistry/app.py

import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException, NotFound

from certregistry.config import config
from certregistry.errors import RegistryError
from certregistry.models import db, TokenBlocklist
from certregistry.seed import init_db_command, seed_command
from certregistry.routes.auth import auth_bp
from certregistry.routes.institutions import institutions_bp
from certregistry.routes.certificates import certificates_bp

def create_app(config_name=None):
    if config_name is None:
        config_name = os.getenv('FLASK_CONFIG', 'default')

    PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    INSTANCE_FOLDER_PATH = os.path.join(PROJECT_ROOT, 'instance')

    app = Flask(__name__, instance_path=INSTANCE_FOLDER_PATH)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    CORS(app)
    jwt = JWTManager(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        jti = jwt_payload["jti"]
        token = db.session.query(TokenBlocklist.id).filter_by(jti=jti).scalar()
        return token is not None

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(institutions_bp)
    app.register_blueprint(certificates_bp)

    if not app.debug and not app.testing:
        log_dir = os.path.join(PROJECT_ROOT, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(os.path.join(log_dir, 'certregistry.log'), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Certificate Registry startup')

    @app.errorhandler(RegistryError)
    def handle_registry_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return jsonify(error="NotFound", message="The requested resource was not found."), 404

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(error=e.name, message=e.description), e.code

    @app.errorhandler(Exception)
    def handle_generic_error(e):
        app.logger.exception(f"An unhandled exception occurred: {e}")
        return jsonify(error="Internal Server Error", message="An unexpected error occurred."), 500

    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)

    @app.route("/")
    def index():
        return jsonify(service="certificate-registry", status="running")

    return app
