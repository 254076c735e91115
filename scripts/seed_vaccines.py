"""
Seed the vaccine catalogue from the doses-per-vial table.

Usage:
    python scripts/seed_vaccines.py

Creates missing vaccines and updates doses_per_vial on existing ones.
"""

import asyncio
import sys
from pathlib import Path

from sqlalchemy import select

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from vaxsync.core.vials import VACCINE_VIAL_MAPPING  # noqa: E402
from vaxsync.database import async_session_factory, engine  # noqa: E402
from vaxsync.models.vaccine import Vaccine  # noqa: E402


async def seed_vaccines() -> None:
    async with async_session_factory() as db:
        created = 0
        updated = 0

        for name, doses_per_vial in VACCINE_VIAL_MAPPING.items():
            result = await db.execute(select(Vaccine).where(Vaccine.name == name))
            vaccine = result.scalar_one_or_none()

            if vaccine is None:
                db.add(Vaccine(name=name, doses_per_vial=doses_per_vial))
                created += 1
            elif vaccine.doses_per_vial != doses_per_vial:
                vaccine.doses_per_vial = doses_per_vial
                updated += 1

        await db.commit()

    await engine.dispose()
    print(f"Vaccines: {created} created, {updated} updated")


if __name__ == "__main__":
    asyncio.run(seed_vaccines())
