"""
Roster storage on Supabase Storage.

Each club has one JSON blob, `{club_id}-members.json`, holding a list of
`{"hash": "<hex>"}` entries. Uploading a roster overwrites the blob.
"""

import json
import logging
from typing import Dict, List, Optional, Protocol

from supabase import create_client, Client

from utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


def roster_key(club_id: str) -> str:
    return f"{club_id}-members.json"


class RosterStore(Protocol):
    def load_roster(self, club_id: str) -> List[Dict[str, str]]:
        """Return the club's roster entries. Raises UpstreamError if unavailable."""
        ...

    def replace_roster(self, club_id: str, entries: List[Dict[str, str]]) -> None:
        """Overwrite the club's roster with `entries`."""
        ...


def create_supabase_client(url: str, key: str) -> Client:
    if not url or url == 'https://your-project.supabase.co':
        raise ConfigurationError(
            "SUPABASE_URL is not configured. "
            "Add your Supabase project URL to .env"
        )
    if not key or key == 'your-supabase-service-role-key':
        raise ConfigurationError(
            "SUPABASE_SERVICE_ROLE_KEY is not configured. "
            "Add your Supabase service role key to .env"
        )
    return create_client(url, key)


class SupabaseRosterStore:
    """
    RosterStore backed by a Supabase Storage bucket.

    The client is created on first use so the app can start without
    storage credentials; the first roster access then raises
    ConfigurationError.
    """

    def __init__(self, url: str, key: str, bucket: str, client: Optional[Client] = None):
        self._url = url
        self._key = key
        self._bucket = bucket
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_supabase_client(self._url, self._key)
        return self._client

    def _storage(self):
        if not self._bucket:
            raise ConfigurationError("SUPABASE_STORAGE_BUCKET env var is not set")
        return self.client.storage.from_(self._bucket)

    def load_roster(self, club_id: str) -> List[Dict[str, str]]:
        file_name = roster_key(club_id)
        storage = self._storage()
        logger.info("Fetching %s from bucket %s", file_name, self._bucket)
        try:
            data = storage.download(file_name)
        except Exception as e:
            raise UpstreamError(
                f"Could not fetch {file_name} from bucket {self._bucket}: {e}"
            ) from e

        try:
            return json.loads(data)
        except ValueError as e:
            raise UpstreamError(f"Roster {file_name} is not valid JSON") from e

    def replace_roster(self, club_id: str, entries: List[Dict[str, str]]) -> None:
        file_name = roster_key(club_id)
        body = json.dumps(entries).encode('utf-8')
        storage = self._storage()
        try:
            storage.upload(
                path=file_name,
                file=body,
                file_options={"content-type": "application/json", "upsert": "true"},
            )
        except Exception as e:
            logger.error("Supabase upload error for %s: %s", file_name, e)
            raise UpstreamError(f"Failed to upload to storage: {e}") from e

        logger.info("Uploaded %d roster entries to %s", len(entries), file_name)
