"""
Roster CSV import.

Turns an uploaded member list into hashed roster entries. Header names are
matched loosely ("Card Number", "card_number" and "cardnumber" are the same
column); rows missing a name or card number are skipped.
"""

import csv
import io
import re
from typing import Dict, List

from utils.clubs import ClubDefinition
from utils.crypto import TRIM_CHARACTERS, hash_member_data
from utils.errors import ValidationError


def normalize_header(header: str) -> str:
    return re.sub(r'[\s_]+', '', (header or '').lower().strip())


def hash_roster_csv(text: str, club: ClubDefinition) -> List[Dict[str, str]]:
    """
    Hash every usable row of a roster CSV for `club`.

    Raises:
        ValidationError: the file has no header row or no usable rows.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip('\ufeff')))
    if not reader.fieldnames:
        raise ValidationError("CSV Parsing Error: missing header row")

    columns = {normalize_header(h): h for h in reader.fieldnames}
    name_header = columns.get(normalize_header(club.name_column))
    card_header = columns.get(normalize_header(club.card_number_column))

    entries = []
    if name_header and card_header:
        for row in reader:
            name_raw = (row.get(name_header) or '').strip(TRIM_CHARACTERS)
            card_raw = (row.get(card_header) or '').strip(TRIM_CHARACTERS)
            if name_raw and card_raw:
                entries.append(hash_member_data(name_raw, card_raw, club.id))

    if not entries:
        raise ValidationError(
            f"No valid records found. Ensure CSV has '{club.name_column}' "
            f"and '{club.card_number_column}' columns."
        )
    return entries
