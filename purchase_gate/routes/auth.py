from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity
from purchase_gate.extensions import gateway, blocklist
from purchase_gate.routes import json_body
from purchase_gate.services.errors import Forbidden
from purchase_gate.services.stores import normalize_email

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/check-purchase', methods=['POST'])
def check_purchase():
    """
    Check whether an email has an active purchase
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
          properties:
            email:
              type: string
    responses:
      200:
        description: Lookup result (hasPurchase true or false)
      400:
        description: Missing email
    """
    email = normalize_email(json_body().get('email'))
    result = gateway.current.check_purchase(email)
    current_app.logger.info("Purchase lookup for %s: %s", email, 'FOUND' if result['hasPurchase'] else 'NOT FOUND')

    if not email:
        return jsonify(result), 400
    return jsonify(result), 200


@auth_bp.route('/create-password', methods=['POST'])
def create_password():
    """
    Create the password of a first-time buyer
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
            name:
              type: string
    responses:
      200:
        description: User created, token issued
      400:
        description: Missing email or password, or invalid password
      404:
        description: No purchase for this email
      403:
        description: Purchase is not active
      409:
        description: User already exists
    """
    data = json_body()
    result = gateway.current.create_password(data.get('email'), data.get('password'), data.get('name'))
    current_app.logger.info("User created: %s", result['user']['email'])

    return jsonify({'success': True, **result}), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate a returning user
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful
      400:
        description: Missing email or password, or invalid password
      401:
        description: Invalid credentials
      403:
        description: Purchase no longer active
    """
    data = json_body()
    result = gateway.current.login(data.get('email'), data.get('password'))
    current_app.logger.info("Login successful: %s", result['user']['email'])

    return jsonify({'success': True, **result}), 200


@auth_bp.route('/complete-onboarding', methods=['POST'])
@jwt_required()
def complete_onboarding():
    """
    Mark onboarding as completed
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email:
              type: string
    responses:
      200:
        description: Onboarding completed
      403:
        description: Token belongs to another user
      404:
        description: User not found
    """
    data = json_body()
    identity = get_jwt_identity()
    email = normalize_email(data.get('email')) or identity

    if email != identity:
        raise Forbidden('Cannot complete onboarding for another user')

    gateway.current.complete_onboarding(email)
    current_app.logger.info("Onboarding completed: %s", email)

    return jsonify({'success': True}), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """
    Get the profile of the authenticated user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: User profile
      404:
        description: User not found
    """
    return jsonify({'success': True, 'user': gateway.current.profile(get_jwt_identity())}), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """
    Logout user (Revoke token)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
    """
    blocklist.add(get_jwt()['jti'])
    return jsonify({'success': True}), 200
