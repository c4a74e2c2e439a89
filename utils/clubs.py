"""
Club definitions for ClubPass.

A ClubRegistry is built once at process start (from the built-in clubs or a
JSON file) and handed to the components that need it.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_NAME_FORMAT = "{last}, {first}"


@dataclass(frozen=True)
class ClubDefinition:
    id: str
    display_name: str
    google_class_id_suffix: str
    logo_url: Optional[str] = None
    name_column: str = "Name"
    card_number_column: str = "Card Number"
    name_format: str = DEFAULT_NAME_FORMAT
    benefits: tuple = field(default_factory=tuple)

    def format_name(self, first_name: str, last_name: str) -> str:
        """Render the roster-style name, e.g. "Doe, John" for "{last}, {first}"."""
        fmt = self.name_format or DEFAULT_NAME_FORMAT
        return fmt.replace("{last}", last_name).replace("{first}", first_name)

    @classmethod
    def from_dict(cls, data: dict) -> "ClubDefinition":
        columns = data.get('memberTableColumns', {})
        return cls(
            id=data['id'],
            display_name=data['displayName'],
            google_class_id_suffix=data['googleClassIdSuffix'],
            logo_url=data.get('logoUrl'),
            name_column=columns.get('nameColumn', 'Name'),
            card_number_column=columns.get(
                'cardNumberColumn', columns.get('studentIdColumn', 'Card Number')
            ),
            name_format=data.get('nameFormat', DEFAULT_NAME_FORMAT),
            benefits=tuple(data.get('benefits', [])),
        )


BUILTIN_CLUBS = [
    ClubDefinition(
        id="data-science-student-society",
        display_name="Data Science Student Society",
        google_class_id_suffix="club-pass-v1",
        logo_url="https://c3-pass-assets.vercel.app/clubs/dscubed-logo.png",
        name_column="Name",
        card_number_column="Card Number",
        name_format="{last}, {first}",
        benefits=(
            "Carte Crepes - 10%",
            "Professors Walk Cafe - 10%",
            "Gilbert - 10% on coffee",
        ),
    ),
]


class ClubRegistry:
    """Read-only lookup of clubs by id or display name."""

    def __init__(self, clubs: List[ClubDefinition]):
        self._clubs: Dict[str, ClubDefinition] = {}
        for club in clubs:
            if club.id in self._clubs:
                raise ValueError(f"Duplicate club id: {club.id}")
            self._clubs[club.id] = club

    def get(self, identifier: str) -> Optional[ClubDefinition]:
        if not identifier:
            return None
        club = self._clubs.get(identifier)
        if club:
            return club
        for candidate in self._clubs.values():
            if candidate.display_name == identifier:
                return candidate
        return None

    def options(self) -> List[str]:
        return [c.display_name for c in self._clubs.values()]

    def __iter__(self) -> Iterator[ClubDefinition]:
        return iter(self._clubs.values())

    def __len__(self) -> int:
        return len(self._clubs)


def load_clubs(path: str = '') -> ClubRegistry:
    """
    Build the club registry.

    Args:
        path: Optional JSON file holding a list of club objects in the
              camelCase shape used by the admin tooling. Empty means use
              the built-in clubs.

    Raises:
        OSError / ValueError / KeyError if the file is unreadable or malformed.
    """
    if not path:
        return ClubRegistry(BUILTIN_CLUBS)

    with open(path, 'r', encoding='utf-8') as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Club config {path} must contain a JSON list")

    clubs = [ClubDefinition.from_dict(item) for item in raw]
    logger.info("Loaded %d club definitions from %s", len(clubs), path)
    return ClubRegistry(clubs)
