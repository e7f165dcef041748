"""Create the skip list table and seed it with names.

Usage:
    python -m labreport.scripts.seed_skip_list --category "Sérologie" --test-type "Groupage"

Idempotent: creates the table if missing and skips names already present
with the same type.
"""

import argparse
import asyncio

from sqlalchemy import select

from labreport.database import Base, async_session_maker, engine
from labreport.models.skip_range import SkipRangeCheck
from labreport.schemas.results import ExceptionKind


async def seed_skip_list(entries: list[tuple[ExceptionKind, str]]) -> int:
    """Insert missing entries and return how many were added."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    added = 0
    async with async_session_maker() as session:
        for kind, value in entries:
            result = await session.execute(
                select(SkipRangeCheck.id).where(
                    SkipRangeCheck.type == kind.value,
                    SkipRangeCheck.value == value,
                )
            )
            if result.scalar_one_or_none() is not None:
                print(f"  Already present: {kind.value} {value!r}")
                continue
            session.add(SkipRangeCheck(type=kind.value, value=value))
            added += 1
            print(f"  Added: {kind.value} {value!r}")
        await session.commit()

    await engine.dispose()
    return added


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the range-check skip list")
    parser.add_argument("--category", action="append", default=[], help="Category name to skip")
    parser.add_argument("--test-type", action="append", default=[], help="Test type name to skip")
    args = parser.parse_args()

    entries = [(ExceptionKind.CATEGORY, v.strip()) for v in args.category if v.strip()]
    entries += [(ExceptionKind.TEST_TYPE, v.strip()) for v in args.test_type if v.strip()]
    if not entries:
        parser.error("nothing to seed: pass --category and/or --test-type")

    added = asyncio.run(seed_skip_list(entries))
    print(f"Done: {added} entr{'y' if added == 1 else 'ies'} added")


if __name__ == "__main__":
    main()
