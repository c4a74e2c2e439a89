"""
Roster upload routes — ClubPass.

Routes:
    POST /members/upload   - Hash a roster CSV and overwrite the club's roster
                             (localhost only)
"""

import logging
from functools import wraps
from flask import Blueprint, request, jsonify

from routes.api_routes import handle_errors, services
from utils.errors import ValidationError
from utils.roster_import import hash_roster_csv

logger = logging.getLogger(__name__)

members_bp = Blueprint('members', __name__, url_prefix='/members')

LOCAL_HOSTS = ('localhost', '127.0.0.1')


def require_localhost(f):
    """Decorator: roster uploads are only accepted on a local host."""
    @wraps(f)
    def decorated(*args, **kwargs):
        host = (request.host or '').split(':')[0]
        if host not in LOCAL_HOSTS:
            return jsonify({"error": "This feature is only available on localhost."}), 403
        return f(*args, **kwargs)
    return decorated


@members_bp.route('/upload', methods=['POST'])
@require_localhost
@handle_errors
def upload_members():
    file = request.files.get('file')
    club_id = request.form.get('clubId', '').strip()

    if not file or not club_id:
        raise ValidationError("Missing file or club ID")

    svc = services()
    club = svc.clubs.get(club_id)
    if club is None:
        raise ValidationError("Invalid club configuration")

    try:
        text = file.read().decode('utf-8')
    except UnicodeDecodeError:
        raise ValidationError("CSV Parsing Error: file is not UTF-8")

    entries = hash_roster_csv(text, club)
    svc.roster_store.replace_roster(club.id, entries)

    logger.info("Replaced roster for %s with %d members", club.id, len(entries))
    return jsonify({"success": True, "count": len(entries)})
