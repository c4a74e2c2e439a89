"""Tests for the HTTP layer (Flask test client, in-memory collaborators)."""
import base64
import io
import zipfile

import pytest

from app import Services, create_app
from conftest import CLUB_ID, ISSUER_ID
from utils.issuance import PassIssuer
from utils.verification import CredentialVerifier
from utils.wallet_classes import WalletClassManager

STRIP_URL = "https://assets.example.com/footer.png"
CLASS_ID = f"{ISSUER_ID}.club-pass-v1"


@pytest.fixture
def make_client(clubs, roster_store, wallet_platform, google_credentials, image_fetcher):
    def make(google=google_credentials, apple=None, env='production'):
        class_manager = WalletClassManager(wallet_platform) if google else None
        issuer = PassIssuer(
            clubs=clubs,
            verifier=CredentialVerifier(roster_store),
            class_manager=class_manager,
            google_credentials=google,
            apple_credentials=apple,
            strip_image_url=STRIP_URL,
            image_fetcher=image_fetcher,
        )
        app = create_app(Services(
            clubs=clubs,
            roster_store=roster_store,
            class_manager=class_manager,
            issuer=issuer,
            google_credentials=google,
        ))
        app.config['TESTING'] = True
        app.config['ENV'] = env
        return app.test_client()
    return make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def dev_client(make_client):
    return make_client(env='development')


def _claim(**overrides):
    body = {"firstName": "John", "lastName": "Doe", "cardNumber": "12345678", "club": CLUB_ID}
    body.update(overrides)
    return body


class TestIssuePass:
    def test_success_google_only(self, client):
        resp = client.post('/api/issue-pass', json=_claim())
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["success"] is True
        assert data["googlePassUrl"].startswith("https://pay.google.com/gp/v/save/")
        assert data["applePassData"] is None
        assert data["applePassStatus"] == "skipped"
        assert len(data["memberId"]) == 36

    def test_success_with_apple(self, make_client, apple_credentials):
        resp = make_client(apple=apple_credentials).post('/api/issue-pass', json=_claim())
        data = resp.get_json()
        assert data["applePassStatus"] == "issued"
        archive = base64.b64decode(data["applePassData"])
        assert "pass.json" in zipfile.ZipFile(io.BytesIO(archive)).namelist()

    def test_verification_failure(self, client):
        resp = client.post('/api/issue-pass', json=_claim(cardNumber="12345679"))
        assert resp.status_code == 403
        assert resp.get_json() == {"error": "Verification failed. Invalid Name or Card Number."}

    def test_unknown_club_indistinguishable(self, client):
        unknown = client.post('/api/issue-pass', json=_claim(club="chess-club"))
        mismatch = client.post('/api/issue-pass', json=_claim(cardNumber="00000000"))
        assert unknown.status_code == mismatch.status_code == 403
        assert unknown.get_json() == mismatch.get_json()

    def test_missing_fields(self, client):
        resp = client.post('/api/issue-pass', json={"firstName": "John"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Missing required fields"}

    def test_non_json_body(self, client):
        resp = client.post('/api/issue-pass', data="not json", content_type='text/plain')
        assert resp.status_code == 400

    def test_google_not_configured(self, make_client):
        resp = make_client(google=None).post('/api/issue-pass', json=_claim())
        assert resp.status_code == 500
        assert "Google Wallet" in resp.get_json()["error"]

    def test_upstream_failure(self, client, wallet_platform):
        wallet_platform.fail_with = 500
        resp = client.post('/api/issue-pass', json=_claim())
        assert resp.status_code == 502

    def test_unencodable_name_same_status_with_or_without_roster(self, client, roster_store):
        claim = _claim(firstName="Jo\ud800hn")
        with_roster = client.post('/api/issue-pass', json=claim)
        roster_store.rosters.clear()
        without_roster = client.post('/api/issue-pass', json=claim)
        assert with_roster.status_code == without_roster.status_code == 400
        assert with_roster.get_json() == without_roster.get_json()


class TestClubsAndClasses:
    def test_list_clubs(self, client):
        data = client.get('/api/clubs').get_json()
        assert data["clubs"][0]["id"] == CLUB_ID
        assert data["clubs"][0]["displayName"] == "Data Science Student Society"
        assert len(data["clubs"][0]["benefits"]) == 3

    def test_create_class(self, client, wallet_platform):
        resp = client.get(f'/api/create-class?club={CLUB_ID}')
        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == CLASS_ID
        assert CLASS_ID in wallet_platform.classes

    def test_create_class_unknown_club(self, client):
        assert client.get('/api/create-class?club=nope').status_code == 400

    def test_health(self, client):
        data = client.get('/health').get_json()
        assert data["status"] == "ok"
        assert data["googleWalletConfigured"] is True
        assert data["appleWalletConfigured"] is False


class TestAdminClasses:
    def test_hidden_outside_development(self, client):
        assert client.get('/api/admin/classes').status_code == 404
        assert client.delete(f'/api/admin/classes?id={CLASS_ID}').status_code == 404

    def test_upsert_and_list(self, dev_client, wallet_platform):
        resp = dev_client.post('/api/admin/classes', json={"id": CLASS_ID, "json": '{"issuerName": "DSCubed"}'})
        assert resp.status_code == 200
        assert wallet_platform.classes[CLASS_ID]["issuerName"] == "DSCubed"

        resp = dev_client.post('/api/admin/classes', json={"id": CLASS_ID, "json": '{"issuerName": "DSC"}'})
        assert resp.status_code == 200
        assert wallet_platform.classes[CLASS_ID]["issuerName"] == "DSC"

        listed = dev_client.get('/api/admin/classes').get_json()
        assert [c["id"] for c in listed["resources"]] == [CLASS_ID]

    def test_upsert_invalid_json(self, dev_client):
        resp = dev_client.post('/api/admin/classes', json={"id": CLASS_ID, "json": "{not json"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid JSON format"}

    def test_upsert_missing_fields(self, dev_client):
        assert dev_client.post('/api/admin/classes', json={"id": CLASS_ID}).status_code == 400

    def test_get_class(self, dev_client):
        dev_client.post('/api/admin/classes', json={"id": CLASS_ID, "json": "{}"})
        assert dev_client.get(f'/api/admin/classes/{CLASS_ID}').get_json()["id"] == CLASS_ID
        assert dev_client.get(f'/api/admin/classes/{ISSUER_ID}.missing').status_code == 404

    def test_delete_is_unsupported(self, dev_client):
        resp = dev_client.delete(f'/api/admin/classes?id={CLASS_ID}')
        assert resp.status_code == 405
        assert "does not support deleting" in resp.get_json()["error"]

    def test_delete_requires_id(self, dev_client):
        assert dev_client.delete('/api/admin/classes').status_code == 400


class TestMemberUpload:
    CSV = b'Name,Card Number\n"Doe, Jane",11112222\n"Roe, Richard",33334444\n'

    def _upload(self, client, data=CSV, club_id=CLUB_ID, host='localhost:5000'):
        return client.post(
            '/members/upload',
            data={"file": (io.BytesIO(data), "members.csv"), "clubId": club_id},
            content_type='multipart/form-data',
            base_url=f'http://{host}',
        )

    def test_upload_replaces_roster(self, client, roster_store):
        resp = self._upload(client)
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "count": 2}
        assert len(roster_store.rosters[CLUB_ID]) == 2

        issued = client.post('/api/issue-pass', json=_claim(firstName="Jane", cardNumber="11112222"))
        assert issued.status_code == 200
        # Full overwrite: the previous roster is gone
        old = client.post('/api/issue-pass', json=_claim())
        assert old.status_code == 403

    def test_only_localhost(self, client, roster_store, doe_roster):
        resp = self._upload(client, host='clubpass.example.com')
        assert resp.status_code == 403
        assert roster_store.rosters[CLUB_ID] == doe_roster

    def test_missing_columns(self, client):
        resp = self._upload(client, data=b"First,Last\nJane,Doe\n")
        assert resp.status_code == 400
        assert "No valid records found" in resp.get_json()["error"]

    def test_unknown_club(self, client):
        assert self._upload(client, club_id="chess-club").status_code == 400
