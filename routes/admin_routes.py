"""
Wallet class admin routes — ClubPass.

Development-only JSON endpoints for inspecting and editing Google Wallet
classes. Outside development every route answers 404.

Routes:
    GET    /api/admin/classes          - List the issuer's classes
    GET    /api/admin/classes/<id>     - Get one class
    POST   /api/admin/classes          - Create or update a class {id, json}
    DELETE /api/admin/classes?id=...   - Always fails: classes can't be deleted
"""

import json
from functools import wraps
from flask import Blueprint, current_app, request, jsonify

from routes.api_routes import handle_errors, services
from utils.errors import ConfigurationError, ValidationError

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def require_development(f):
    """Decorator: hide the route unless running in development."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if current_app.config.get('ENV') != 'development':
            return jsonify({"error": "Not found"}), 404
        return f(*args, **kwargs)
    return decorated


def _class_manager():
    svc = services()
    if svc.class_manager is None or svc.google_credentials is None:
        raise ConfigurationError("Missing GOOGLE_ISSUER_ID")
    return svc.class_manager


@admin_bp.route('/classes', methods=['GET'])
@require_development
@handle_errors
def list_classes():
    manager = _class_manager()
    return jsonify(manager.list_classes(services().google_credentials.issuer_id))


@admin_bp.route('/classes/<class_id>', methods=['GET'])
@require_development
@handle_errors
def get_class(class_id: str):
    wallet_class = _class_manager().get_class(class_id)
    if wallet_class is None:
        return jsonify({"error": f"Class {class_id} not found"}), 404
    return jsonify(wallet_class)


@admin_bp.route('/classes', methods=['POST'])
@require_development
@handle_errors
def upsert_class():
    body = request.get_json(silent=True) or {}
    class_id = body.get('id')
    raw_json = body.get('json')

    if not class_id or not raw_json:
        raise ValidationError("Missing 'id' or 'json' body fields")

    try:
        resource = json.loads(raw_json) if isinstance(raw_json, str) else raw_json
    except ValueError:
        raise ValidationError("Invalid JSON format")

    if not isinstance(resource, dict):
        raise ValidationError("Invalid JSON format")

    result = _class_manager().ensure_class(class_id, resource)
    return jsonify({"success": True, "data": result})


@admin_bp.route('/classes', methods=['DELETE'])
@require_development
@handle_errors
def delete_class():
    class_id = request.args.get('id')
    if not class_id:
        raise ValidationError("Missing 'id' query parameter")

    _class_manager().delete_class(class_id)
    return jsonify({"success": True, "message": f"Class {class_id} deleted"})
