#!/usr/bin/env python3
"""
Seed a fresh database with the school's starting configuration.

Creates the class list, common fee item definitions and the default
payroll settings (SSNIT 5.5% / 13% and the Ghana PAYE table). Rows that
already exist are left alone, so running it twice is harmless.

Usage:
    python scripts/seed_defaults.py --dry-run   # no writes
    python scripts/seed_defaults.py --confirm   # commit

Requires migrations to be applied (alembic upgrade head).
"""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database.session import async_session
from src.core.logging_utils import redact_database_url
from src.modules.fees.models import AppliesTo, FeeItem
from src.modules.payroll.models import PayrollSettings, TaxBracket
from src.modules.payroll.service import DEFAULT_PAYROLL_SETTINGS
from src.modules.students.models import SchoolClass

# (code, name, category)
CLASSES = [
    ("CRECHE", "Creche", "Pre-school"),
    ("N1", "Nursery 1", "Pre-school"),
    ("N2", "Nursery 2", "Pre-school"),
    ("KG1", "KG 1", "Kindergarten"),
    ("KG2", "KG 2", "Kindergarten"),
    ("B1", "Basic 1", "Primary"),
    ("B2", "Basic 2", "Primary"),
    ("B3", "Basic 3", "Primary"),
    ("B4", "Basic 4", "Primary"),
    ("B5", "Basic 5", "Primary"),
    ("B6", "Basic 6", "Primary"),
    ("JHS1", "JHS 1", "Junior High"),
    ("JHS2", "JHS 2", "Junior High"),
    ("JHS3", "JHS 3", "Junior High"),
]

# (name, is_optional, applies_to)
FEE_ITEMS = [
    ("Admission Fees", False, [AppliesTo.NEW]),
    ("School Fees", False, [AppliesTo.TERM1, AppliesTo.TERM2_3]),
    ("Books Fee", False, [AppliesTo.NEW, AppliesTo.TERM1]),
    ("Printing Fee", False, [AppliesTo.TERM1, AppliesTo.TERM2_3]),
    ("Uniform Fee", True, []),
    ("Canteen Fees", True, []),
    ("Transport Fees", True, []),
]


async def seed_classes(session: AsyncSession) -> None:
    existing = set((await session.execute(select(SchoolClass.code))).scalars().all())
    created = 0
    for order, (code, name, category) in enumerate(CLASSES):
        if code in existing:
            continue
        session.add(SchoolClass(code=code, name=name, category=category, display_order=order))
        created += 1
    await session.flush()
    print(f"  Classes: {created} created, {len(existing)} already present.")


async def seed_fee_items(session: AsyncSession) -> None:
    existing = set((await session.execute(select(FeeItem.name))).scalars().all())
    created = 0
    for name, is_optional, applies_to in FEE_ITEMS:
        if name in existing:
            continue
        session.add(
            FeeItem(name=name, is_optional=is_optional, applies_to=[t.value for t in applies_to])
        )
        created += 1
    await session.flush()
    print(f"  Fee items: {created} created, {len(existing)} already present.")


async def seed_payroll_settings(session: AsyncSession) -> None:
    if await session.scalar(select(PayrollSettings.id).limit(1)):
        print("  Payroll settings already saved, left unchanged.")
        return
    defaults = DEFAULT_PAYROLL_SETTINGS
    session.add(
        PayrollSettings(
            ssnit_employee_rate=defaults.employee_rate,
            ssnit_employer_rate=defaults.employer_rate,
            tax_brackets=[
                TaxBracket(lower_bound=b.lower, upper_bound=b.upper, rate=b.rate)
                for b in defaults.bands
            ],
        )
    )
    await session.flush()
    print(f"  Payroll settings: SSNIT {defaults.employee_rate}%/{defaults.employer_rate}%, "
          f"{len(defaults.bands)} PAYE brackets.")


async def run_seed(session: AsyncSession, dry_run: bool) -> None:
    await seed_classes(session)
    await seed_fee_items(session)
    await seed_payroll_settings(session)

    if dry_run:
        await session.rollback()
        print("\n[DRY-RUN] Rolled back, no data written.")
    else:
        await session.commit()
        print("\nSeed completed successfully.")


async def main() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Seed classes, fee items and payroll defaults")
    parser.add_argument("--dry-run", action="store_true", help="Do not commit")
    parser.add_argument("--confirm", action="store_true", help="Commit changes")
    args = parser.parse_args()
    if not args.dry_run and not args.confirm:
        print("Use --dry-run or --confirm")
        sys.exit(1)

    print("Database:", redact_database_url(settings.database_url))
    print("Mode:", "DRY-RUN" if args.dry_run else "CONFIRM")
    async with async_session() as session:
        await run_seed(session, dry_run=args.dry_run)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
