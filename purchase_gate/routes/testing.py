"""
Testing Routes: registered only when ENABLE_TEST_ROUTES is set.
Seed purchases without a payment provider and inspect store contents.
"""

from flask import Blueprint, jsonify, current_app
from purchase_gate.extensions import gateway
from purchase_gate.routes import json_body
from purchase_gate.services.auth_gateway import SIMULATED_PRODUCT_ID

testing_bp = Blueprint('testing', __name__)


@testing_bp.route('/simulate-purchase', methods=['POST'])
def simulate_purchase():
    """
    Simulate a purchase for an email
    ---
    tags:
      - Testing
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
            name:
              type: string
    responses:
      200:
        description: Purchase simulated
      400:
        description: Missing email
    """
    data = json_body()
    purchase = gateway.current.register_purchase(
        data.get('email'),
        name=data.get('name'),
        product_id=SIMULATED_PRODUCT_ID,
    )
    current_app.logger.info("Purchase simulated for %s", purchase.email)

    return jsonify({
        'success': True,
        'message': 'Purchase simulated',
        'data': {
            'email': purchase.email,
            'name': purchase.name,
            'purchaseId': purchase.purchase_id,
        }
    }), 200


@testing_bp.route('/debug/data', methods=['GET'])
def debug_data():
    """
    List stored purchase and user emails
    ---
    tags:
      - Testing
    responses:
      200:
        description: Store keys and counts
    """
    return jsonify(gateway.current.snapshot()), 200
