"""
Public API endpoints — ClubPass.

Endpoints:
    POST /api/issue-pass    - Verify a member and issue wallet passes
    GET  /api/clubs         - Clubs available for issuance
    GET  /api/create-class  - Create/update the Google Wallet class for a club
"""

import base64
import logging
from functools import wraps
from flask import Blueprint, current_app, request, jsonify

from utils.errors import ClubPassError, ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def handle_errors(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ClubPassError as e:
            if e.status_code >= 500:
                logger.error("%s in %s: %s", type(e).__name__, f.__name__, e)
            return jsonify({"error": e.public_message}), e.status_code
        except Exception:
            logger.exception("Error in %s", f.__name__)
            return jsonify({"error": "Internal Server Error"}), 500
    return decorated


def services():
    return current_app.extensions['clubpass']


@api_bp.route('/issue-pass', methods=['POST'])
@handle_errors
def issue_pass():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Missing required fields")

    issued = services().issuer.issue(
        first_name=body.get('firstName'),
        last_name=body.get('lastName'),
        card_number=body.get('cardNumber'),
        club=body.get('club'),
    )

    apple_bytes = issued.apple_pass_bytes
    return jsonify({
        "success": True,
        "message": "Passes generated successfully",
        "googlePassUrl": issued.google_save_url,
        "applePassData": base64.b64encode(apple_bytes).decode('ascii') if apple_bytes else None,
        "applePassStatus": issued.apple_status,
        "memberId": issued.member_id,
    })


@api_bp.route('/clubs', methods=['GET'])
@handle_errors
def list_clubs():
    return jsonify({
        "clubs": [
            {"id": c.id, "displayName": c.display_name, "benefits": list(c.benefits)}
            for c in services().clubs
        ]
    })


@api_bp.route('/create-class', methods=['GET'])
@handle_errors
def create_class():
    from utils.wallet_classes import club_class_template

    svc = services()
    if svc.google_credentials is None or svc.class_manager is None:
        raise ConfigurationError("Missing GOOGLE_ISSUER_ID or Google service account env vars")

    club = svc.clubs.get(request.args.get('club', ''))
    if club is None:
        raise ValidationError("Invalid club")

    result = svc.class_manager.create_club_class(
        svc.google_credentials.issuer_id,
        club.google_class_id_suffix,
        club_class_template(club),
    )

    return jsonify({
        "success": True,
        "message": "Class created/updated successfully",
        "data": result
    })
