"""
Google Wallet generic class lifecycle.

A class is the per-club template every issued pass object points at. Its id
is `{issuer_id}.{club_suffix}`. Classes are created once and replaced in
place afterwards; the Wallet API has no delete.
"""

import copy
import logging
from typing import Any, Dict, Optional, Protocol

import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from utils.clubs import ClubDefinition
from utils.errors import UnsupportedOperation, UpstreamError

logger = logging.getLogger(__name__)

BASE_URL = "https://walletobjects.googleapis.com/walletobjects/v1"
SCOPES = ["https://www.googleapis.com/auth/wallet_object.issuer"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
REQUEST_TIMEOUT = 30  # seconds


class WalletPlatformClient(Protocol):
    """Raw REST calls against the wallet platform's class collection."""

    def insert_class(self, body: Dict[str, Any]) -> requests.Response: ...

    def update_class(self, class_id: str, body: Dict[str, Any]) -> requests.Response: ...

    def get_class(self, class_id: str) -> requests.Response: ...

    def list_classes(self, issuer_id: str) -> requests.Response: ...


class GoogleWalletClient:
    """WalletPlatformClient for the Google Wallet REST API (genericClass)."""

    def __init__(self, session: requests.Session):
        self._session = session

    @classmethod
    def from_service_account(cls, client_email: str, private_key: str) -> "GoogleWalletClient":
        credentials = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": client_email,
                "private_key": private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )
        return cls(AuthorizedSession(credentials))

    def insert_class(self, body: Dict[str, Any]) -> requests.Response:
        return self._session.post(f"{BASE_URL}/genericClass", json=body, timeout=REQUEST_TIMEOUT)

    def update_class(self, class_id: str, body: Dict[str, Any]) -> requests.Response:
        return self._session.put(
            f"{BASE_URL}/genericClass/{class_id}", json=body, timeout=REQUEST_TIMEOUT
        )

    def get_class(self, class_id: str) -> requests.Response:
        return self._session.get(f"{BASE_URL}/genericClass/{class_id}", timeout=REQUEST_TIMEOUT)

    def list_classes(self, issuer_id: str) -> requests.Response:
        return self._session.get(
            f"{BASE_URL}/genericClass",
            params={"issuerId": issuer_id},
            timeout=REQUEST_TIMEOUT,
        )


class WalletClassManager:

    def __init__(self, client: WalletPlatformClient):
        self._client = client

    def ensure_class(self, class_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create the class, or replace it if it already exists.

        Args:
            class_id: Full class id, `{issuer_id}.{suffix}`.
            body: genericClass resource. Its `id` is forced to `class_id`.

        Returns:
            The class resource as returned by the platform.

        Raises:
            UpstreamError: insert failed with anything but 409, or the
                           follow-up update failed.
        """
        resource = copy.deepcopy(body)
        resource['id'] = class_id

        response = self._client.insert_class(resource)

        if response.status_code == 409:
            logger.info("Class %s exists, updating...", class_id)
            response = self._client.update_class(class_id, resource)
        else:
            logger.info("Creating wallet class %s", class_id)

        if not response.ok:
            raise UpstreamError(f"Operation failed: {response.text}")

        return response.json()

    def create_club_class(self, issuer_id: str, class_id_suffix: str,
                          class_template: Dict[str, Any]) -> Dict[str, Any]:
        return self.ensure_class(f"{issuer_id}.{class_id_suffix}", class_template)

    def list_classes(self, issuer_id: str) -> Dict[str, Any]:
        response = self._client.list_classes(issuer_id)
        if not response.ok:
            raise UpstreamError(f"List failed: {response.status_code} {response.reason}")
        return response.json()

    def get_class(self, class_id: str) -> Optional[Dict[str, Any]]:
        response = self._client.get_class(class_id)
        if response.status_code == 404:
            return None
        if not response.ok:
            raise UpstreamError(f"Get failed: {response.status_code} {response.reason}")
        return response.json()

    def delete_class(self, class_id: str) -> None:
        logger.warning("Attempted to delete class %s", class_id)
        raise UnsupportedOperation(
            "Google Wallet API does not support deleting Classes. "
            "You must archive them or reuse the ID."
        )


def club_class_template(club: ClubDefinition) -> Dict[str, Any]:
    """
    Default genericClass body for a club.

    The card row shows the `member_id` and `valid_for` text modules that
    every issued object carries.
    """
    def field_ref(module_id: str) -> Dict[str, Any]:
        return {
            "firstValue": {
                "fields": [{"fieldPath": f"object.textModulesData['{module_id}']"}]
            }
        }

    return {
        "classTemplateInfo": {
            "cardTemplateOverride": {
                "cardRowTemplateInfos": [
                    {
                        "twoItems": {
                            "startItem": field_ref("member_id"),
                            "endItem": field_ref("valid_for"),
                        }
                    }
                ]
            }
        },
        "multipleDevicesAndHoldersAllowedStatus": "MULTIPLE_HOLDERS",
    }
