"""
Purchase Gate: Flask application
Purchase-gated authentication: purchase check, password creation, login, onboarding.
"""

import time
from datetime import datetime, timezone
from flask import Flask, jsonify, request
from flasgger import Swagger
from werkzeug.exceptions import HTTPException
from purchase_gate.config import load_config
from purchase_gate.extensions import jwt, gateway, blocklist
from purchase_gate.services.errors import GatewayError

START_TIME = time.monotonic()


def create_app(overrides=None):
    app = Flask(__name__)

    # Configuration
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize Extensions
    jwt.init_app(app)
    gateway.init_app(app)
    blocklist.init_app(app)
    register_jwt_loaders()
    register_error_handlers(app)

    Swagger(app, template={
        "info": {"title": "Purchase Gate API", "version": "1.0.0"},
        "securityDefinitions": {
            "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"}
        },
    })

    # Register Blueprints
    from purchase_gate.routes.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    from purchase_gate.routes.webhooks import webhooks_bp
    app.register_blueprint(webhooks_bp, url_prefix='/webhook')

    if app.config['ENABLE_TEST_ROUTES']:
        from purchase_gate.routes.testing import testing_bp
        app.register_blueprint(testing_bp)

    # --- Health check ---------------------------------------------------
    @app.route('/health')
    def health():
        return jsonify({
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "port": app.config['PORT'],
            "uptime": round(time.monotonic() - START_TIME, 3),
        })

    @app.route('/')
    def index():
        endpoints = [
            'GET /health',
            'POST /webhook/purchase',
            'POST /auth/check-purchase',
            'POST /auth/create-password',
            'POST /auth/login',
            'POST /auth/complete-onboarding',
            'GET /auth/me',
            'POST /auth/logout',
        ]
        if app.config['ENABLE_TEST_ROUTES']:
            endpoints += ['POST /simulate-purchase', 'GET /debug/data']

        return jsonify({
            "message": "Purchase Gate API Server",
            "version": "1.0.0",
            "status": "running",
            "endpoints": endpoints,
        })

    return app


def register_jwt_loaders():
    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        return jwt_payload['jti'] in blocklist

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'success': False, 'error': 'Missing authorization token'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'success': False, 'error': 'Invalid token'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'success': False, 'error': 'Token has expired'}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return jsonify({'success': False, 'error': 'Token has been revoked'}), 401


def register_error_handlers(app):

    @app.errorhandler(GatewayError)
    def handle_gateway_error(e):
        app.logger.info("%s %s rejected: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({'success': False, 'error': 'Endpoint not found', 'path': request.path}), 404

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'success': False, 'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({'success': False, 'error': 'Internal server error'}), 500


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'])
