"""
Schema setup, in-place column migrations and demo data.

    python -m inscription.core.init_db [init|seed|verify|reset]
"""

import asyncio
import logging
import sys
from collections import namedtuple
from decimal import Decimal

from sqlalchemy import func, inspect, select, text

from inscription.core.config import ENVIRONMENT, SEED_DEMO_DATA
from inscription.core.database import Base, async_session, db_manager, db_operation, engine
from inscription.core.exceptions import ConfigurationError, DatabaseError
from inscription.registration.models import (
    AgeGroup,
    Discipline,
    PlanType,
    SubscriptionPlan,
)

logger = logging.getLogger(__name__)

# Columns added after the first deployment; create_all does not alter tables
ColumnMigration = namedtuple("ColumnMigration", "table column ddl")
_AGE_GROUP_VALUES = ", ".join(f"'{group.value}'" for group in AgeGroup)
COLUMN_MIGRATIONS = (
    ColumnMigration(
        "subscription_plans",
        "age_group",
        f"VARCHAR(20) CONSTRAINT plan_age_group CHECK (age_group IN ({_AGE_GROUP_VALUES}))",
    ),
    ColumnMigration("members", "idempotency_key", "VARCHAR(100) UNIQUE"),
)

RESETTABLE_ENVIRONMENTS = ("development", "dev", "test")

DEMO_SEASON_LABEL = "2025-2026"
DEMO_DISCIPLINES = ("Judo", "Karaté", "Boxe anglaise")
# (name suffix, type, price, age group)
DEMO_PLANS = (
    ("Enfant - Saison", PlanType.season, Decimal("180.00"), AgeGroup.child),
    ("Ado - Saison", PlanType.season, Decimal("220.00"), AgeGroup.teen),
    ("Adulte - Saison", PlanType.season, Decimal("260.00"), AgeGroup.adult),
    ("Adulte - Semestre", PlanType.semester1, Decimal("150.00"), AgeGroup.adult),
    ("Adulte - Trimestre", PlanType.quarter, Decimal("90.00"), AgeGroup.adult),
    ("Adulte - Mois", PlanType.month, Decimal("35.00"), AgeGroup.adult),
)


def _existing_columns(sync_conn, table: str) -> set:
    return {column["name"] for column in inspect(sync_conn).get_columns(table)}


async def run_migrations():
    async with engine.begin() as conn:
        for migration in COLUMN_MIGRATIONS:
            columns = await conn.run_sync(_existing_columns, migration.table)
            if migration.column in columns:
                continue
            await conn.execute(
                text(
                    f"ALTER TABLE {migration.table} "
                    f"ADD COLUMN {migration.column} {migration.ddl}"
                )
            )
            logger.info(f"Added column {migration.table}.{migration.column}")


def _demo_plans(discipline: Discipline):
    for suffix, plan_type, price, age_group in DEMO_PLANS:
        yield SubscriptionPlan(
            name=f"{discipline.name} {suffix}",
            type=plan_type.value,
            season_label=DEMO_SEASON_LABEL,
            price=price,
            discipline_id=discipline.id,
            age_group=age_group,
            active=True,
        )


@db_operation
async def seed_demo_data() -> bool:
    """Insert demo disciplines and plans; no-op when any discipline exists"""
    async with async_session() as session:
        existing = (await session.execute(select(func.count(Discipline.id)))).scalar()
        if existing:
            logger.info(f"Seed skipped, {existing} discipline(s) already present")
            return False

        try:
            for name in DEMO_DISCIPLINES:
                discipline = Discipline(name=name, active=True)
                session.add(discipline)
                await session.flush()
                session.add_all(list(_demo_plans(discipline)))
            await session.commit()
        except Exception as e:
            await session.rollback()
            raise DatabaseError(f"Seeding demo data failed: {e}") from e

    logger.info(
        f"Seeded {len(DEMO_DISCIPLINES)} disciplines with {len(DEMO_PLANS)} plans each"
    )
    return True


async def init_database():
    """Connect, create tables, migrate, then seed when SEED_DEMO_DATA is set"""
    try:
        await db_manager.check_connection()
        await db_manager.create_tables()
        await run_migrations()
        if SEED_DEMO_DATA:
            await seed_demo_data()
    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Database initialization failed: {type(e).__name__} - {e}")
        raise DatabaseError(f"Database initialization failed: {e}") from e

    logger.info("Database ready")


async def verify_database_setup() -> bool:
    """The form needs at least one active discipline with an active plan"""
    async with async_session() as session:
        query = (
            select(func.count(func.distinct(Discipline.id)))
            .join(SubscriptionPlan, SubscriptionPlan.discipline_id == Discipline.id)
            .where(Discipline.active.is_(True), SubscriptionPlan.active.is_(True))
        )
        offered = (await session.execute(query)).scalar()

    if not offered:
        raise DatabaseError("No active discipline offers an active subscription plan")

    logger.info(f"{offered} discipline(s) open for registration")
    return True


async def reset_database():
    """Drop every table and initialize again; refused outside development/test"""
    if ENVIRONMENT not in RESETTABLE_ENVIRONMENTS:
        raise ConfigurationError(
            "ENVIRONMENT", f"Database reset is not allowed in {ENVIRONMENT}"
        )

    logger.warning("Dropping all tables")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await init_database()


COMMANDS = {
    "init": init_database,
    "seed": seed_demo_data,
    "verify": verify_database_setup,
    "reset": reset_database,
}


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "init"
    if command not in COMMANDS:
        print(f"Unknown command: {command}. Available: {', '.join(COMMANDS)}")
        sys.exit(1)

    try:
        asyncio.run(COMMANDS[command]())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.error(f"{command} failed: {e}")
        sys.exit(1)
