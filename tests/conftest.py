"""Shared fixtures: in-memory roster store, fake wallet platform, test keys and certificates."""
import copy
from datetime import datetime, timezone, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from utils.apple_pass import AppleCredentials
from utils.clubs import ClubRegistry, BUILTIN_CLUBS, ClubDefinition
from utils.crypto import hash_member_data
from utils.errors import UpstreamError
from utils.google_pass import GoogleCredentials

CLUB_ID = "data-science-student-society"
ISSUER_ID = "3388000000012345678"
SERVICE_ACCOUNT = "wallet-issuer@clubpass-test.iam.gserviceaccount.com"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeRosterStore:
    """RosterStore keeping rosters in a dict. Missing rosters raise like storage does."""

    def __init__(self, rosters=None):
        self.rosters = dict(rosters or {})
        self.loads = []

    def load_roster(self, club_id):
        self.loads.append(club_id)
        if club_id not in self.rosters:
            raise UpstreamError(f"Object not found: {club_id}-members.json")
        return copy.deepcopy(self.rosters[club_id])

    def replace_roster(self, club_id, entries):
        self.rosters[club_id] = list(entries)


class FakeResponse:
    def __init__(self, status_code, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = {200: 'OK', 404: 'Not Found', 409: 'Conflict', 500: 'Internal Server Error'}.get(status_code, '')

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


class FakeWalletPlatform:
    """WalletPlatformClient holding classes in memory; insert of an existing id answers 409."""

    def __init__(self):
        self.classes = {}
        self.calls = []
        self.fail_with = None

    def insert_class(self, body):
        self.calls.append(('insert', body['id']))
        if self.fail_with:
            return FakeResponse(self.fail_with, text='backend exploded')
        if body['id'] in self.classes:
            return FakeResponse(409, text='Resource already exists')
        self.classes[body['id']] = copy.deepcopy(body)
        return FakeResponse(200, copy.deepcopy(body))

    def update_class(self, class_id, body):
        self.calls.append(('update', class_id))
        if class_id not in self.classes:
            return FakeResponse(404, text='not found')
        self.classes[class_id] = copy.deepcopy(body)
        return FakeResponse(200, copy.deepcopy(body))

    def get_class(self, class_id):
        self.calls.append(('get', class_id))
        if self.fail_with:
            return FakeResponse(self.fail_with, text='backend exploded')
        if class_id not in self.classes:
            return FakeResponse(404)
        return FakeResponse(200, copy.deepcopy(self.classes[class_id]))

    def list_classes(self, issuer_id):
        self.calls.append(('list', issuer_id))
        if self.fail_with:
            return FakeResponse(self.fail_with, text='backend exploded')
        resources = [c for cid, c in self.classes.items() if cid.startswith(f"{issuer_id}.")]
        return FakeResponse(200, {"resources": resources})


def _make_cert(key, common_name, issuer_key=None, issuer_name=None):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(issuer_name or name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(issuer_key or key, hashes.SHA256())
    )


def _pem_key(key) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode('utf-8')


def _pem_cert(cert) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode('utf-8')


@pytest.fixture(scope='session')
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope='session')
def google_credentials(rsa_key):
    return GoogleCredentials(
        issuer_id=ISSUER_ID,
        service_account_email=SERVICE_ACCOUNT,
        private_key=_pem_key(rsa_key),
    )


@pytest.fixture(scope='session')
def google_public_key(rsa_key):
    return rsa_key.public_key()


@pytest.fixture(scope='session')
def apple_credentials():
    wwdr_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    wwdr_cert = _make_cert(wwdr_key, "Test WWDR Intermediate")
    signer_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    signer_cert = _make_cert(
        signer_key, "Pass Type ID: pass.com.clubpass.test",
        issuer_key=wwdr_key, issuer_name=wwdr_cert.subject,
    )
    return AppleCredentials(
        signer_cert=_pem_cert(signer_cert),
        signer_key=_pem_key(signer_key),
        wwdr_cert=_pem_cert(wwdr_cert),
        pass_type_identifier="pass.com.clubpass.test",
        team_identifier="ABCDE12345",
    )


@pytest.fixture
def clubs():
    return ClubRegistry(BUILTIN_CLUBS)


@pytest.fixture
def club(clubs) -> ClubDefinition:
    return clubs.get(CLUB_ID)


@pytest.fixture(scope='session')
def doe_roster():
    """Roster for the built-in club holding John Doe (card 12345678) and one other member."""
    return [
        hash_member_data("Smith, Alice", "87654321", CLUB_ID),
        hash_member_data("Doe, John", "12345678", CLUB_ID),
    ]


@pytest.fixture
def roster_store(doe_roster):
    return FakeRosterStore({CLUB_ID: doe_roster})


@pytest.fixture
def wallet_platform():
    return FakeWalletPlatform()


@pytest.fixture
def image_fetcher():
    fetched = []

    def fetch(url):
        fetched.append(url)
        return FAKE_PNG

    fetch.fetched = fetched
    return fetch
