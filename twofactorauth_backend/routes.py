"""
TOTP BACKEND API ROUTES - FLASK BLUEPRINT

All endpoints are stateless: the Base32 secret travels in the JSON body and is
never stored or logged. Engine settings (issuer, digits, period, algorithm)
come from the app configuration, see app.create_app().

EXAMPLES:
curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d "{}"
curl -X POST http://localhost:5000/api/totp -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP"}'
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from twofactorauth import QRException, TimeException, TwoFactorAuthException
from twofactorauth.otp_core import (
    DEFAULT_DISCREPANCY,
    DEFAULT_QR_SIZE,
    DEFAULT_SECRET_BITS,
    MAX_DISCREPANCY,
    MAX_QR_SIZE,
    MAX_SECRET_BITS,
)

logger = logging.getLogger(__name__)

otp_bp = Blueprint('otp', __name__, url_prefix='/api')


def _engine():
    return current_app.extensions["twofactorauth"]


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _missing(data, *fields):
    """Name of the first required field missing from the JSON body, or None."""
    for field in fields:
        if field not in data or data[field] in (None, ""):
            return field
    return None


def _int_field(data, name, default=None, minimum=None, maximum=None):
    value = data.get(name, default)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")
    if minimum is not None and number < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise ValueError(f"{name} must be <= {maximum}")
    return number


@otp_bp.errorhandler(TwoFactorAuthException)
def handle_tfa_error(e):
    status = 502 if isinstance(e, (QRException, TimeException)) else 400
    logger.warning("Request failed with %s: %s", type(e).__name__, e)
    return jsonify({"error": str(e)}), status


@otp_bp.errorhandler(ValueError)
def handle_value_error(e):
    return jsonify({"error": str(e)}), 400


@otp_bp.route('/secret', methods=['POST'])
def create_secret():
    """
    CREATE A NEW SECRET

      curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d '{"bits": 160}'
    """
    data = _json_body()
    bits = _int_field(data, 'bits', DEFAULT_SECRET_BITS, maximum=MAX_SECRET_BITS)
    secret = _engine().create_secret(bits)
    logger.info("Created secret with %s bits of entropy", bits)
    return jsonify({"secret": secret})


@otp_bp.route('/totp', methods=['POST'])
def get_totp():
    """
    CURRENT TOTP CODE

    Input:  {"secret": "...", "time": 1426847216}   # time optional
    Output: {"code": "543160", "remaining": 4}
    """
    data = _json_body()
    if _missing(data, 'secret'):
        return jsonify({"error": "secret is required"}), 400

    tfa = _engine()
    timestamp = tfa.get_time(_int_field(data, 'time'))
    code = tfa.get_code(str(data['secret']), timestamp)
    return jsonify({"code": code, "remaining": tfa.get_remaining_seconds(timestamp)})


@otp_bp.route('/verify_totp', methods=['POST'])
def verify_totp():
    """
    VERIFY A TOTP CODE

    Input:
      {
        "secret": "...",
        "code": "123456",
        "discrepancy": 1,     # optional, +/- steps
        "time": 1426847216    # optional
      }
    Output: {"valid": true} or {"valid": false}
    """
    data = _json_body()
    field = _missing(data, 'secret', 'code')
    if field:
        return jsonify({"error": f"{field} is required"}), 400

    valid = _engine().verify_code(
        str(data['secret']),
        str(data['code']),
        discrepancy=_int_field(data, 'discrepancy', DEFAULT_DISCREPANCY, minimum=0, maximum=MAX_DISCREPANCY),
        time=_int_field(data, 'time'),
    )
    return jsonify({"valid": valid})


@otp_bp.route('/otpauth_uri', methods=['POST'])
def get_otpauth_uri():
    data = _json_body()
    field = _missing(data, 'secret', 'label')
    if field:
        return jsonify({"error": f"{field} is required"}), 400

    return jsonify({"uri": _engine().get_qr_text(str(data['label']), str(data['secret']))})


@otp_bp.route('/qr_code', methods=['POST'])
def get_qr_code():
    """
    QR CODE AS DATA URI

    Input:  {"secret": "...", "label": "alice@example.com", "size": 200}
    Output: {"qr_code": "data:image/png;base64,..."}
    """
    data = _json_body()
    field = _missing(data, 'secret', 'label')
    if field:
        return jsonify({"error": f"{field} is required"}), 400

    qr_code = _engine().get_qr_code_image_as_data_uri(
        str(data['label']),
        str(data['secret']),
        _int_field(data, 'size', DEFAULT_QR_SIZE, maximum=MAX_QR_SIZE),
    )
    return jsonify({"qr_code": qr_code})
