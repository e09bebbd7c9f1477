#!/usr/bin/env python3
"""
CLI tool for the slot roster.

Usage:
    python -m app.cli.roster init       # create the six open slots
    python -m app.cli.roster summary    # print occupancy and the slot list
    python -m app.cli.roster audit      # report slot/application inconsistencies

The database is taken from DATABASE_URL (see app/config.py).
"""
import asyncio
import argparse
import sys

from app.application.review_service import ReviewService
from app.db import connection
from app.domain.entities import AlreadyInitializedError, DomainError
from app.domain.unit_of_work import get_unit_of_work


async def init_roster(database_url: str = None) -> int:
    """Create the six open slots. Returns a process exit code."""
    await connection.init_db(database_url)
    try:
        try:
            async with get_unit_of_work(connection.async_session_maker()) as uow:
                slots = await ReviewService(uow).initialize_slots()
        except AlreadyInitializedError as e:
            print(f"⚠️  {e.message}")
            return 1

        print("✅ Roster initialized:")
        for slot in slots:
            print(f"  • Position {slot.position}: {slot.status.value} (id {slot.id})")
        return 0
    finally:
        await connection.close_db()


async def show_summary(database_url: str = None) -> int:
    """Print occupancy and every slot."""
    await connection.init_db(database_url)
    try:
        async with get_unit_of_work(connection.async_session_maker()) as uow:
            service = ReviewService(uow)
            summary = await service.slot_summary()
            slots = await service.list_slots()

        print(f"Slots: {summary.filled} filled / {summary.open} open (total {summary.total})")
        for slot in slots:
            occupant = f"{slot.occupant_name} ({slot.occupant_role})" if slot.occupant_name else "-"
            print(f"  • Position {slot.position}: {slot.status.value:<6} {occupant}")
        return 0
    finally:
        await connection.close_db()


async def audit(database_url: str = None) -> int:
    """Print roster inconsistencies. Exit code 2 when any are found."""
    await connection.init_db(database_url)
    try:
        async with get_unit_of_work(connection.async_session_maker()) as uow:
            issues = await ReviewService(uow).audit_roster()

        if not issues:
            print("✅ Roster is consistent")
            return 0

        print(f"❌ Found {len(issues)} issue(s):")
        for issue in issues:
            refs = []
            if issue.slot_id is not None:
                refs.append(f"slot_id={issue.slot_id}")
            if issue.application_id is not None:
                refs.append(f"application_id={issue.application_id}")
            print(f"  • [{issue.kind}] {issue.detail} {' '.join(refs)}".rstrip())
        return 2
    finally:
        await connection.close_db()


COMMANDS = {
    "init": init_roster,
    "summary": show_summary,
    "audit": audit,
}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Manage the Leader/Co-Leader slot roster',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the six open slots
  %(prog)s init

  # Check the roster against a specific database
  %(prog)s audit --database-url sqlite+aiosqlite:///./event_roster.db
        """
    )

    parser.add_argument(
        'command',
        choices=sorted(COMMANDS),
        help='init, summary or audit'
    )

    parser.add_argument(
        '--database-url',
        help='Override DATABASE_URL'
    )

    args = parser.parse_args(argv)

    try:
        return asyncio.run(COMMANDS[args.command](args.database_url))
    except DomainError as e:
        print(f"❌ {e.code}: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
