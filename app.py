"""
ClubPass — Flask application entry point.

Issues Google Wallet and Apple Wallet membership passes to club members
after checking their name and card number against the club's hashed
roster (uploaded ahead of time to Supabase Storage).

Usage:
    python app.py
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from config import config


@dataclass
class Services:
    clubs: object
    roster_store: object
    class_manager: object
    issuer: object
    google_credentials: object = None


def build_services(cfg=config) -> Services:
    """
    Wire the issuance engine from configuration.

    Missing Google credentials don't stop the app from starting; issuance and
    class admin then fail with ConfigurationError. Missing Apple credentials
    just disable Apple passes.
    """
    from utils.apple_pass import AppleCredentials
    from utils.clubs import load_clubs
    from utils.database import SupabaseRosterStore
    from utils.google_pass import GoogleCredentials, missing_google_settings
    from utils.issuance import PassIssuer
    from utils.verification import CredentialVerifier
    from utils.wallet_classes import GoogleWalletClient, WalletClassManager

    logger = logging.getLogger(__name__)

    clubs = load_clubs(cfg.CLUBS_CONFIG_PATH)
    roster_store = SupabaseRosterStore(cfg.SUPABASE_URL, cfg.SUPABASE_KEY, cfg.SUPABASE_STORAGE_BUCKET)

    google_credentials = GoogleCredentials.from_config(cfg)
    class_manager: Optional[WalletClassManager] = None
    if google_credentials:
        client = GoogleWalletClient.from_service_account(
            google_credentials.service_account_email, google_credentials.private_key
        )
        class_manager = WalletClassManager(client)
    else:
        logger.warning(
            "Google Wallet not configured (missing %s). Pass issuance is disabled.",
            ", ".join(missing_google_settings(cfg))
        )

    apple_credentials = AppleCredentials.from_config(cfg)
    if apple_credentials is None:
        logger.warning("Apple Wallet configuration incomplete. Apple passes will be skipped.")

    issuer = PassIssuer(
        clubs=clubs,
        verifier=CredentialVerifier(roster_store),
        class_manager=class_manager,
        google_credentials=google_credentials,
        apple_credentials=apple_credentials,
        strip_image_url=cfg.PASS_STRIP_IMAGE_URL,
    )

    return Services(
        clubs=clubs,
        roster_store=roster_store,
        class_manager=class_manager,
        issuer=issuer,
        google_credentials=google_credentials,
    )


def create_app(services: Optional[Services] = None) -> Flask:
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config['ENV'] = config.ENV
    app.config['DEBUG'] = config.DEBUG

    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.extensions['clubpass'] = services or build_services(config)

    from routes.admin_routes import admin_bp
    from routes.api_routes import api_bp
    from routes.member_routes import members_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(members_bp)

    @app.route('/health')
    def health():
        svc = app.extensions['clubpass']
        return jsonify({
            "status": "ok",
            "clubs": len(svc.clubs),
            "googleWalletConfigured": svc.google_credentials is not None,
            "appleWalletConfigured": svc.issuer.apple_credentials is not None,
        })

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({"error": "Internal Server Error"}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.getenv('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=config.DEBUG)
