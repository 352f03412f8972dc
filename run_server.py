#!/usr/bin/env python3
"""
TicketDesk API server

Usage:
    python run_server.py [--host HOST] [--port PORT] [--reload] [--drop-db]

Options:
    --host      Interface to bind (default: SERVER_HOST or 0.0.0.0)
    --port      Port to listen on (default: SERVER_PORT or 5000)
    --reload    Restart on code changes (development)
    --drop-db   Drop every table before starting
"""

import argparse
import sys

import uvicorn
from dotenv import load_dotenv

from src.c1_database_session import get_db_manager
from src.core.config import get_settings
from src.core.logging_config import configure_logging

# Load environment variables from .env file
load_dotenv()


def main():
    """Start the TicketDesk API."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the TicketDesk API server")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.server.host,
        help="Interface to bind",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.server.port,
        help="Port to listen on",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when code changes",
    )
    parser.add_argument(
        "--drop-db",
        action="store_true",
        help="Drop every table before starting",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level)

    if args.drop_db:
        if settings.is_production:
            print("[TicketDesk] Refusing to drop the database in production")
            return 1
        print(f"[TicketDesk] Dropping tables in {settings.database.database_url}")
        get_db_manager().drop_tables()

    print(f"[TicketDesk] Environment: {settings.environment}")
    print(f"[TicketDesk] Listening on http://{args.host}:{args.port}")
    uvicorn.run(
        "src.api.server:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
