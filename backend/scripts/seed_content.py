"""CLI script to load portfolio content from a JSON file into the backend DB.
Usage: python scripts/seed_content.py FILE [--replace] [--dry-run]

The file holds an object with any of the keys `personal_info`, `skills`,
`projects`, `experiences`, `educations` and `certifications`; see
`scripts/sample_content.json`.
"""
import sys
import argparse
import json
import pathlib
# Ensure `backend/` is on sys.path so `portfolio` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from portfolio.database import engine, create_db_and_tables
from portfolio import services


def main(path: pathlib.Path, replace: bool = False, dry_run: bool = False) -> int:
    """Import `path` and print a per-section summary.

    Returns the number of rejected items, so the exit status is non-zero
    when anything failed validation.
    """
    if not path.exists():
        print(f'File not found: {path}')
        return 1
    try:
        document = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        print(f'Invalid JSON in {path}: {e}')
        return 1
    create_db_and_tables()
    with Session(engine) as session:
        svc = services.PortfolioImportService(session)
        try:
            summary = svc.import_document(document, replace=replace, dry_run=dry_run)
        except ValueError as e:
            print(f'Cannot import {path}: {e}')
            return 1
    total_errors = 0
    for section, result in summary.items():
        errors = result['errors']
        total_errors += len(errors)
        print(f'{section}: created {result["created"]}, errors {len(errors)}')
        for err in errors:
            print(f'  item {err["index"]}: {err["error"]}')
    if dry_run:
        print('Dry run: nothing was written')
    return total_errors


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('file', type=pathlib.Path, help='JSON document with portfolio sections')
    parser.add_argument('--replace', action='store_true', help='Delete existing rows of each provided section first')
    parser.add_argument('--dry-run', action='store_true', help='Validate only')
    args = parser.parse_args()
    sys.exit(1 if main(args.file, replace=args.replace, dry_run=args.dry_run) else 0)
