#!/usr/bin/env python3
"""
Import tickets from an Excel export without going through the API.

Usage:
    python scripts/import_tickets.py PATH.xlsx
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.c1_database_session import get_db_manager
from src.c2_ticket_service import TicketImportService
from src.core.logging_config import configure_logging

load_dotenv()


def main():
    parser = argparse.ArgumentParser(description="Import tickets from an .xlsx file")
    parser.add_argument("path", type=Path, help="Spreadsheet to import")
    args = parser.parse_args()

    if not args.path.is_file():
        print(f"❌ File not found: {args.path}")
        return 1

    configure_logging()
    get_db_manager().create_tables()

    try:
        result = asyncio.run(TicketImportService.import_tickets(args.path.read_bytes()))
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    print(f"Imported: {result['imported']}")
    print(f"Skipped (already present): {result['skipped']}")
    for error in result["errors"]:
        print(f"  row {error['row']}: {error['error']}")
    return 0 if not result["errors"] else 2


if __name__ == "__main__":
    sys.exit(main())
