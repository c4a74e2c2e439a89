"""
Google Wallet pass objects and save links.

The generic object for a member is embedded in a signed JWT ("savetowallet"
claim set); the JWT appended to the save endpoint is the link the member
opens to add the pass.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import jwt

from utils.clubs import ClubDefinition
from utils.errors import ConfigurationError

SAVE_URL_PREFIX = "https://pay.google.com/gp/v/save/"
BACKGROUND_COLOR = "#dbd5ff"
LANGUAGE = "en-US"


@dataclass(frozen=True)
class GoogleCredentials:
    issuer_id: str
    service_account_email: str
    private_key: str

    @classmethod
    def from_config(cls, config) -> Optional["GoogleCredentials"]:
        if not (config.GOOGLE_ISSUER_ID and config.GOOGLE_SERVICE_ACCOUNT_EMAIL
                and config.GOOGLE_PRIVATE_KEY):
            return None
        return cls(
            issuer_id=config.GOOGLE_ISSUER_ID,
            service_account_email=config.GOOGLE_SERVICE_ACCOUNT_EMAIL,
            private_key=config.GOOGLE_PRIVATE_KEY,
        )


def _localized(value: str) -> Dict[str, Any]:
    return {"defaultValue": {"language": LANGUAGE, "value": value}}


def _image(uri: str, description: str) -> Dict[str, Any]:
    return {
        "sourceUri": {"uri": uri},
        "contentDescription": _localized(description),
    }


def display_member_id(member_id: str) -> str:
    """Short, human-readable member id shown on both passes."""
    return member_id[:8].upper()


def build_google_object(pass_data, club: ClubDefinition, issuer_id: str,
                        hero_image_url: str, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Map a PassData record onto a Google Wallet genericObject.

    Args:
        pass_data: PassData for the verified member.
        club: The member's club.
        issuer_id: Google Wallet issuer id.
        hero_image_url: Footer image shown below the card.
        today: Date used for the "Valid Until" year (defaults to today).
    """
    today = today or date.today()

    generic_object = {
        "id": f"{issuer_id}.{pass_data.member_id}",
        "classId": f"{issuer_id}.{club.google_class_id_suffix}",
        "cardTitle": _localized(club.display_name),
        "subheader": _localized("Name"),
        "header": _localized(pass_data.name),
        "textModulesData": [
            {
                "id": "member_id",
                "header": "Member ID",
                "body": display_member_id(pass_data.member_id),
            },
            {
                "id": "valid_for",
                "header": "Valid Until",
                "body": str(today.year),
            },
        ],
        "barcode": {
            "type": "QR_CODE",
            "value": pass_data.member_id,
            "alternateText": club.display_name,
        },
        "hexBackgroundColor": BACKGROUND_COLOR,
        "heroImage": _image(hero_image_url, "Footer Image"),
    }

    if club.logo_url:
        generic_object["logo"] = _image(club.logo_url, "Club Logo")

    return generic_object


def build_save_claims(generic_object: Dict[str, Any], service_account_email: str,
                      issued_at: Optional[int] = None) -> Dict[str, Any]:
    return {
        "iss": service_account_email,
        "aud": "google",
        "typ": "savetowallet",
        "iat": issued_at if issued_at is not None else int(time.time()),
        "origins": [],
        "payload": {
            "genericObjects": [generic_object],
        },
    }


def sign_save_token(claims: Dict[str, Any], private_key_pem: str) -> str:
    return jwt.encode(claims, private_key_pem, algorithm="RS256")


def save_url(token: str) -> str:
    return f"{SAVE_URL_PREFIX}{token}"


def generate_google_pass(pass_data, club: ClubDefinition, credentials: GoogleCredentials,
                         hero_image_url: str) -> str:
    """
    Build, sign and link a Google Wallet pass.

    Returns:
        The "Add to Google Wallet" URL.

    Raises:
        ConfigurationError: credentials are missing.
    """
    if credentials is None:
        raise ConfigurationError("Google Wallet credentials are not configured")

    generic_object = build_google_object(pass_data, club, credentials.issuer_id, hero_image_url)
    claims = build_save_claims(generic_object, credentials.service_account_email)
    return save_url(sign_save_token(claims, credentials.private_key))


def missing_google_settings(config) -> List[str]:
    return [
        name for name in (
            'GOOGLE_ISSUER_ID', 'GOOGLE_SERVICE_ACCOUNT_EMAIL', 'GOOGLE_PRIVATE_KEY'
        )
        if not getattr(config, name, '')
    ]
