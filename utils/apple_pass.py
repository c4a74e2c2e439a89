"""
Apple Wallet .pkpass generation.

A .pkpass is a zip archive holding:
    pass.json      - pass metadata, fields and barcode
    *.png          - logo / icon / strip images
    manifest.json  - SHA-1 digest of every other file
    signature      - detached PKCS#7 signature over manifest.json, made with
                     the pass type certificate and carrying the WWDR
                     intermediate certificate
"""

import hashlib
import io
import json
import logging
import zipfile
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7

from utils.clubs import ClubDefinition
from utils.google_pass import display_member_id

logger = logging.getLogger(__name__)

PKPASS_CONTENT_TYPE = "application/vnd.apple.pkpass"
IMAGE_TIMEOUT = 10  # seconds

ImageFetcher = Callable[[str], Optional[bytes]]


@dataclass(frozen=True)
class AppleCredentials:
    signer_cert: str
    signer_key: str
    wwdr_cert: str
    pass_type_identifier: str
    team_identifier: str
    key_password: str = ''

    @classmethod
    def from_config(cls, config) -> Optional["AppleCredentials"]:
        """Return credentials only when the whole signing bundle is present."""
        values = (
            config.APPLE_WALLET_SIGNER_CERT,
            config.APPLE_WALLET_PRIVATE_KEY,
            config.APPLE_WALLET_WWDR_CERT,
            config.APPLE_WALLET_PASS_TYPE_ID,
            config.APPLE_WALLET_TEAM_ID,
        )
        if not all(values):
            return None
        return cls(*values, key_password=config.APPLE_WALLET_KEY_PASSWORD or '')


def fetch_image(url: str) -> Optional[bytes]:
    """Download an image for embedding. Failures are logged and yield None."""
    try:
        response = requests.get(url, timeout=IMAGE_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("Error fetching image for pass %s: %s", url, e)
        return None

    if response.status_code != 200:
        logger.warning("Failed to fetch image: %s (%s)", url, response.status_code)
        return None
    return response.content


def build_pass_json(pass_data, club: ClubDefinition, credentials: AppleCredentials,
                    today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()

    return {
        "formatVersion": 1,
        "passTypeIdentifier": credentials.pass_type_identifier,
        "teamIdentifier": credentials.team_identifier,
        "serialNumber": pass_data.member_id,
        "organizationName": club.display_name,
        "description": f"Membership Pass for {club.display_name}",
        "logoText": club.display_name,
        # Same purple as the Google Wallet card (#dbd5ff)
        "backgroundColor": "rgb(219, 213, 255)",
        "foregroundColor": "rgb(0, 0, 0)",
        "labelColor": "rgb(60, 60, 60)",
        "storeCard": {
            "primaryFields": [
                {"key": "name", "label": "Name", "value": pass_data.name},
            ],
            "secondaryFields": [
                {
                    "key": "memberId",
                    "label": "Member ID",
                    "value": display_member_id(pass_data.member_id),
                },
                {"key": "validYear", "label": "Valid Until", "value": str(today.year)},
            ],
        },
        "barcodes": [
            {
                "format": "PKBarcodeFormatQR",
                "message": pass_data.member_id,
                "messageEncoding": "iso-8859-1",
                "altText": pass_data.member_id,
            }
        ],
    }


def create_manifest(files: Dict[str, bytes]) -> Dict[str, str]:
    return {name: hashlib.sha1(content).hexdigest() for name, content in files.items()}


def sign_manifest(manifest_bytes: bytes, credentials: AppleCredentials) -> bytes:
    """Detached DER PKCS#7 signature over the exact manifest.json bytes."""
    signer_cert = x509.load_pem_x509_certificate(credentials.signer_cert.encode('utf-8'))
    wwdr_cert = x509.load_pem_x509_certificate(credentials.wwdr_cert.encode('utf-8'))
    signer_key = serialization.load_pem_private_key(
        credentials.signer_key.encode('utf-8'),
        password=credentials.key_password.encode('utf-8') if credentials.key_password else None,
    )

    return (
        pkcs7.PKCS7SignatureBuilder()
        .set_data(manifest_bytes)
        .add_signer(signer_cert, signer_key, hashes.SHA256())
        .add_certificate(wwdr_cert)
        .sign(
            serialization.Encoding.DER,
            [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
        )
    )


def _collect_images(club: ClubDefinition, strip_image_url: str,
                    fetch: ImageFetcher) -> Dict[str, bytes]:
    images: Dict[str, bytes] = {}

    if club.logo_url:
        logo = fetch(club.logo_url)
        if logo:
            # Same resolution reused for every slot
            for name in ("logo.png", "logo@2x.png", "icon.png", "icon@2x.png"):
                images[name] = logo

    if strip_image_url:
        strip = fetch(strip_image_url)
        if strip:
            images["strip.png"] = strip
            images["strip@2x.png"] = strip

    return images


def build_apple_pass(pass_data, club: ClubDefinition, credentials: AppleCredentials,
                     strip_image_url: str, fetch: ImageFetcher = fetch_image) -> bytes:
    """
    Generate a signed .pkpass archive for a verified member.

    Args:
        pass_data: PassData for the member.
        club: The member's club.
        credentials: Complete Apple signing bundle.
        strip_image_url: Remote strip image; skipped if it can't be fetched.
        fetch: Image downloader, returns None on failure.

    Returns:
        The .pkpass archive bytes.
    """
    logger.info("Generating Apple Pass for member %s (%s)", display_member_id(pass_data.member_id), club.id)

    files: Dict[str, bytes] = {
        "pass.json": json.dumps(build_pass_json(pass_data, club, credentials)).encode('utf-8'),
    }
    files.update(_collect_images(club, strip_image_url, fetch))

    manifest_bytes = json.dumps(create_manifest(files), sort_keys=True).encode('utf-8')
    files["manifest.json"] = manifest_bytes
    files["signature"] = sign_manifest(manifest_bytes, credentials)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buf.getvalue()
