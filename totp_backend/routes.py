"""
TOTP JSON API — Flask blueprint

Every endpoint works on an account enrolled in the secret store.

EXAMPLES:
curl http://localhost:3000/api/accounts
curl http://localhost:3000/api/totp/alice@example.com
curl http://localhost:3000/api/uri/alice@example.com
curl -X POST http://localhost:3000/api/verify/alice@example.com -H "Content-Type: application/json" -d "{\"code\": \"123456\"}"
"""
import logging

from flask import Blueprint, current_app, jsonify, request

from totp_core.otp_core import (
    DEFAULT_WINDOW,
    current_time_ms,
    format_otpauth_uri,
    seconds_remaining,
    totp,
    verify_totp,
)
from totp_database.db_manager import find_secret, load_secrets

logger = logging.getLogger(__name__)

otp_bp = Blueprint('otp', __name__, url_prefix='/api')


def _lookup(account):
    return find_secret(account, current_app.config["TOTP_DB_PATH"])


def _not_found(account):
    return jsonify({"error": f"Account {account} not found"}), 404


@otp_bp.route('/accounts', methods=['GET'])
def list_accounts():
    secrets = load_secrets(current_app.config["TOTP_DB_PATH"])
    return jsonify([{"account": s.account, "issuer": s.issuer} for s in secrets])


@otp_bp.route('/totp/<path:account>', methods=['GET'])
def get_totp(account):
    """
    Current TOTP code and the seconds it stays valid.

    Output: {"code": "123456", "remaining": 17}
    """
    stored = _lookup(account)
    if stored is None:
        return _not_found(account)

    now = current_time_ms()
    code = totp(stored.secret, now)
    return jsonify({"code": code, "remaining": seconds_remaining(now)})


@otp_bp.route('/uri/<path:account>', methods=['GET'])
def get_uri(account):
    stored = _lookup(account)
    if stored is None:
        return _not_found(account)
    return jsonify({"uri": format_otpauth_uri(stored.secret, stored.account, stored.issuer)})


@otp_bp.route('/verify/<path:account>', methods=['POST'])
def verify_route(account):
    """
    Verify a TOTP code.

    Input (JSON body):
      {
        "code": "123456",     # code to check, as a string
        "window": 1           # accepted +/- steps of clock drift
      }

    Output:
      {"valid": true}  or  {"valid": false}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("code"), str):
        return jsonify({"error": "Code is required"}), 400

    stored = _lookup(account)
    if stored is None:
        return _not_found(account)

    window = data.get("window", DEFAULT_WINDOW)
    valid = verify_totp(data["code"], stored.secret, window=window)
    logger.info("TOTP verification for '%s': %s", account, "ok" if valid else "failed")
    return jsonify({"valid": valid})
