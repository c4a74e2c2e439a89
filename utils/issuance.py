"""
Pass issuance: turns a verified membership claim into wallet passes.

    validate -> verify -> ensure class -> Google pass -> Apple pass (optional)

Google Wallet is the baseline: any failure up to and including the Google
pass aborts the request. Apple Wallet is best-effort: it is skipped when the
signing bundle is incomplete, and a generation error is logged and reported
as PlatformFailed while the request still succeeds.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from utils.apple_pass import AppleCredentials, ImageFetcher, build_apple_pass, fetch_image
from utils.clubs import ClubDefinition, ClubRegistry
from utils.crypto import TRIM_CHARACTERS
from utils.errors import ConfigurationError, ValidationError, VerificationFailure
from utils.google_pass import GoogleCredentials, generate_google_pass
from utils.verification import CredentialVerifier
from utils.wallet_classes import WalletClassManager, club_class_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassData:
    name: str
    card_number: str
    club: str
    member_id: str


@dataclass(frozen=True)
class PlatformSuccess:
    artifact: bytes


@dataclass(frozen=True)
class PlatformSkipped:
    reason: str


@dataclass(frozen=True)
class PlatformFailed:
    error: Exception


PlatformResult = Union[PlatformSuccess, PlatformSkipped, PlatformFailed]


@dataclass(frozen=True)
class IssuedPasses:
    google_save_url: str
    apple: PlatformResult
    member_id: str

    @property
    def apple_pass_bytes(self) -> Optional[bytes]:
        if isinstance(self.apple, PlatformSuccess):
            return self.apple.artifact
        return None

    @property
    def apple_status(self) -> str:
        if isinstance(self.apple, PlatformSuccess):
            return "issued"
        if isinstance(self.apple, PlatformSkipped):
            return "skipped"
        return "failed"


def generate_member_id() -> str:
    return str(uuid.uuid4())


def _require_text(value) -> str:
    if not isinstance(value, str) or not value.strip(TRIM_CHARACTERS):
        raise ValidationError("Missing required fields")
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        # Lone surrogates survive JSON decoding but cannot be hashed
        raise ValidationError("Invalid characters in request")
    return value.strip(TRIM_CHARACTERS)


class PassIssuer:
    """
    Issues Google (mandatory) and Apple (optional) passes for club members.

    Holds only injected, read-only collaborators; each call to `issue` is
    independent.
    """

    def __init__(
        self,
        clubs: ClubRegistry,
        verifier: CredentialVerifier,
        class_manager: Optional[WalletClassManager],
        google_credentials: Optional[GoogleCredentials],
        apple_credentials: Optional[AppleCredentials],
        strip_image_url: str,
        image_fetcher: ImageFetcher = fetch_image,
    ):
        self.clubs = clubs
        self.verifier = verifier
        self.class_manager = class_manager
        self.google_credentials = google_credentials
        self.apple_credentials = apple_credentials
        self.strip_image_url = strip_image_url
        self.image_fetcher = image_fetcher

    def issue(self, first_name: str, last_name: str, card_number: str, club: str) -> IssuedPasses:
        """
        Verify a membership claim and issue wallet passes for it.

        Raises:
            ValidationError: a field is missing, not a string or not encodable as UTF-8.
            VerificationFailure: unknown club, no roster or no match.
            ConfigurationError: Google Wallet credentials are missing.
            UpstreamError: the wallet class could not be created/updated.
        """
        first_name = _require_text(first_name)
        last_name = _require_text(last_name)
        card_number = _require_text(card_number)
        club_ref = _require_text(club)

        club_def = self.clubs.get(club_ref)
        if club_def is None:
            logger.warning("Issuance requested for unknown club %r", club_ref)
            raise VerificationFailure()

        verification_name = club_def.format_name(first_name, last_name)
        if not self.verifier.verify(verification_name, card_number, club_def.id):
            raise VerificationFailure()

        google = self._google_credentials()
        self.class_manager.ensure_class(
            f"{google.issuer_id}.{club_def.google_class_id_suffix}",
            club_class_template(club_def),
        )

        pass_data = PassData(
            name=f"{first_name} {last_name}",
            card_number=card_number,
            club=club_def.id,
            member_id=generate_member_id(),
        )

        google_save_url = generate_google_pass(pass_data, club_def, google, self.strip_image_url)
        apple = self._generate_apple(pass_data, club_def)

        logger.info("Issued passes for %s (apple: %s)", club_def.id, type(apple).__name__)
        return IssuedPasses(
            google_save_url=google_save_url,
            apple=apple,
            member_id=pass_data.member_id,
        )

    def _google_credentials(self) -> GoogleCredentials:
        if self.google_credentials is None:
            raise ConfigurationError("Google Wallet credentials are not configured")
        return self.google_credentials

    def _generate_apple(self, pass_data: PassData, club: ClubDefinition) -> PlatformResult:
        if self.apple_credentials is None:
            return PlatformSkipped("Apple Wallet not configured")

        try:
            archive = build_apple_pass(
                pass_data, club, self.apple_credentials,
                self.strip_image_url, fetch=self.image_fetcher,
            )
        except Exception as e:
            logger.exception("Failed to generate Apple Pass")
            return PlatformFailed(e)

        return PlatformSuccess(archive)
