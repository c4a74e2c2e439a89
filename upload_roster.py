"""
Hash a club roster CSV and optionally upload it.

    python upload_roster.py <club_id> members.csv            # print roster JSON
    python upload_roster.py <club_id> members.csv --upload   # overwrite in Supabase

Output:
    - The hashed roster (JSON list of {"hash": ...}), no plaintext
    - With --upload, the number of entries written to {club_id}-members.json

Warning: uploading replaces the club's whole roster. Members missing from
the CSV can no longer get passes.
"""

import argparse
import json
import os
import sys

sys.path.insert(0, os.path.dirname(__file__))

from config import config
from utils.clubs import load_clubs
from utils.database import SupabaseRosterStore
from utils.roster_import import hash_roster_csv


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Hash a club roster CSV")
    parser.add_argument('club_id', help="Club id or display name")
    parser.add_argument('csv_path', help="Roster CSV with name and card number columns")
    parser.add_argument('--upload', action='store_true', help="Overwrite the roster in Supabase Storage")
    args = parser.parse_args(argv)

    club = load_clubs(config.CLUBS_CONFIG_PATH).get(args.club_id)
    if club is None:
        print(f"Unknown club: {args.club_id}", file=sys.stderr)
        return 1

    with open(args.csv_path, 'r', encoding='utf-8') as f:
        entries = hash_roster_csv(f.read(), club)

    if not args.upload:
        print(json.dumps(entries, indent=2))
        return 0

    store = SupabaseRosterStore(config.SUPABASE_URL, config.SUPABASE_KEY, config.SUPABASE_STORAGE_BUCKET)
    store.replace_roster(club.id, entries)

    print("=" * 60)
    print(f"Roster uploaded for {club.display_name}")
    print("=" * 60)
    print()
    print(f"  Entries: {len(entries)}")
    print(f"  Bucket:  {config.SUPABASE_STORAGE_BUCKET}")
    print(f"  File:    {club.id}-members.json")
    print("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
