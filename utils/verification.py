"""
Membership verification against a club's hashed roster.

A claim (name, card number, club) is verified by recomputing its scrypt hash
and looking for a byte-exact match in the club's roster blob. Storage
problems count as "no valid members" and never raise.
"""

import logging

from utils.crypto import TRIM_CHARACTERS, derive_member_key, hashes_match
from utils.database import RosterStore
from utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class CredentialVerifier:

    def __init__(self, roster_store: RosterStore):
        self._store = roster_store

    def verify(self, name: str, card_number: str, club_id: str) -> bool:
        """
        Check whether (name, card_number) is on the club's roster.

        Args:
            name: Name in roster format, e.g. "Doe, John". Case-insensitive.
            card_number: Member card / student number.
            club_id: Club identifier; also the hash salt.

        Returns:
            True on the first matching roster entry, False otherwise
            (including a missing or unreadable roster).

        Raises:
            Any KDF error from the hash derivation.
        """
        clean_name = str(name or '').strip(TRIM_CHARACTERS)
        clean_card = str(card_number or '').strip(TRIM_CHARACTERS)

        if not clean_name or not clean_card or not club_id:
            return False

        # KDF errors must not depend on whether the roster exists
        candidate = derive_member_key(clean_name, clean_card, club_id)

        try:
            members = self._store.load_roster(club_id)
        except UpstreamError as e:
            # If the roster doesn't exist, nobody is a member
            logger.warning("Could not fetch members list for %s: %s", club_id, e)
            return False
        except ConfigurationError as e:
            logger.error("Roster storage not configured: %s", e)
            return False

        if not isinstance(members, list):
            logger.error("Roster for %s is not a list, treating as empty", club_id)
            return False

        logger.debug("Loaded %d members for %s. Checking against: %s", len(members), club_id, clean_name)

        for entry in members:
            if not isinstance(entry, dict):
                continue
            if hashes_match(candidate, entry.get('hash')):
                logger.info("Verification result for %s: True", club_id)
                return True

        logger.info("Verification result for %s: False", club_id)
        return False
