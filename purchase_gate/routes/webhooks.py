from flask import Blueprint, request, jsonify, current_app
import hmac
from purchase_gate.extensions import gateway
from purchase_gate.routes import json_body

webhooks_bp = Blueprint('webhooks', __name__)

APPROVED_EVENTS = {'PURCHASE_APPROVED', 'PURCHASE_COMPLETE'}
REVOKING_EVENTS = {'PURCHASE_REFUNDED', 'PURCHASE_CHARGEBACK', 'PURCHASE_CANCELED'}


@webhooks_bp.route('/purchase', methods=['POST'])
@webhooks_bp.route('/hotmart', methods=['POST'])
def purchase_webhook():
    """
    Handle payment provider webhooks
    ---
    tags:
      - Webhooks
    parameters:
      - in: header
        name: X-Hotmart-Hottok
        type: string
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            event:
              type: string
            data:
              type: object
    responses:
      200:
        description: Event acknowledged (always, the provider retries on non-2xx)
    """
    try:
        expected = current_app.config.get('WEBHOOK_TOKEN')
        if expected:
            received = request.headers.get('X-Hotmart-Hottok', '')
            if not hmac.compare_digest(received.encode('utf-8'), expected.encode('utf-8')):
                current_app.logger.warning("Webhook rejected: invalid hottok")
                return jsonify({'success': True}), 200

        payload = json_body()
        handle_event(payload.get('event'), payload.get('data') or {})
    except Exception:
        current_app.logger.exception("Webhook processing failed")

    # Return a success response to confirm receipt
    return jsonify({'success': True}), 200


def handle_event(event, data):
    buyer = data.get('buyer') or {}
    email = buyer.get('email')

    if event in APPROVED_EVENTS:
        purchase = data.get('purchase') or {}
        product = purchase.get('product') or {}
        record = gateway.current.register_purchase(
            email,
            name=buyer.get('name'),
            purchase_id=purchase.get('transaction'),
            product_id=product.get('id'),
        )
        current_app.logger.info("Purchase registered for %s (%s)", record.email, record.purchase_id)
    elif event in REVOKING_EVENTS:
        if gateway.current.deactivate_purchase(email):
            current_app.logger.info("Purchase deactivated for %s after %s", email, event)
        else:
            current_app.logger.info("No purchase to deactivate for %s", email)
    else:
        current_app.logger.info("Ignoring webhook event %s", event)
