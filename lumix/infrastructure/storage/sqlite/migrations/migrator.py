"""
Versioned SQL schema migrations.

Migration files are named ``vNNN_name.sql`` and applied in version order.
Applied versions are recorded with a checksum in ``schema_migrations``; an
applied file that was edited afterwards stops the run. An existing database
is snapshotted with SQLite's online backup before migrating and restored
from the snapshot if a migration fails.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from lumix.config import get_logger, get_settings
from lumix.core.exceptions import ConfigurationError, PersistenceError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = (
    "companies",
    "clients",
    "invoices",
    "invoice_items",
    "payroll_runs",
    "payroll_items",
)

_FILENAME = re.compile(r"v(\d+)_(\w+)\.sql")

_TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT,
    applied_at TEXT DEFAULT (datetime('now')),
    execution_time_ms INTEGER
)
"""


@dataclass(frozen=True)
class Migration:
    version: str
    name: str
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode()).hexdigest()[:16]


@dataclass
class MigrationStatus:
    """Schema state of a database file."""

    exists: bool
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    missing_tables: list[str] = field(default_factory=list)

    @property
    def is_current(self) -> bool:
        return self.exists and not self.pending and not self.missing_tables


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """Migration files in *directory*, lowest version first."""
    migrations = []
    for path in sorted(directory.glob("v*.sql")):
        match = _FILENAME.fullmatch(path.name)
        if match is None:
            logger.warning("migration_file_skipped", path=str(path))
            continue
        migrations.append(
            Migration(
                version=match.group(1),
                name=match.group(2),
                sql=path.read_text(encoding="utf-8"),
            )
        )
    return migrations


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _copy_database(source: Path, target: Path) -> None:
    """Copy a database page by page, including uncheckpointed WAL content."""
    async with aiosqlite.connect(source) as src, aiosqlite.connect(target) as dst:
        await src.backup(dst)


async def _apply(conn: aiosqlite.Connection, migration: Migration) -> None:
    started = time.perf_counter()
    await conn.executescript(migration.sql)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    await conn.execute(
        """
        INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
        VALUES (?, ?, ?, ?)
        """,
        (migration.version, migration.name, migration.checksum, elapsed_ms),
    )
    await conn.commit()
    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms,
    )


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
    directory: Path = MIGRATIONS_DIR,
) -> list[str]:
    """
    Apply pending migrations.

    Returns:
        Versions applied by this call, in order.

    Raises:
        ConfigurationError: If an applied migration file has changed.
        PersistenceError: If a migration failed. The database is restored
            from its snapshot when one was taken.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    snapshot: Path | None = None
    if create_backup_before and db_path.exists():
        snapshot = db_path.with_suffix(f".backup_{datetime.now(UTC):%Y%m%d_%H%M%S}.db")
        await _copy_database(db_path, snapshot)
        logger.info("database_backup_created", backup_path=str(snapshot))

    applied_now: list[str] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            await conn.execute(_TRACKING_TABLE)
            await conn.commit()

            applied = await _applied_checksums(conn)
            for migration in discover_migrations(directory):
                if migration.version not in applied:
                    await _apply(conn, migration)
                    applied_now.append(migration.version)
                elif applied[migration.version] != migration.checksum:
                    raise ConfigurationError(
                        f"Migration v{migration.version} was edited after it was applied.",
                        code="MIGRATION_CHECKSUM_MISMATCH",
                        details={"version": migration.version},
                    )
    except aiosqlite.Error as e:
        logger.error("migration_failed", db_path=str(db_path), error=str(e))
        if snapshot is not None:
            await _copy_database(snapshot, db_path)
            logger.warning("database_restored_from_backup", backup_path=str(snapshot))
        raise PersistenceError("migrate database", str(e)) from e
    finally:
        if snapshot is not None:
            snapshot.unlink(missing_ok=True)

    logger.info("database_initialized", db_path=str(db_path), applied=applied_now)
    return applied_now


# Alias used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(
    db_path: Path | None = None,
    directory: Path = MIGRATIONS_DIR,
) -> MigrationStatus:
    """Report applied and pending migrations and any missing tables."""
    db_path = db_path or get_settings().storage.db_path
    versions = [m.version for m in discover_migrations(directory)]

    if not db_path.exists():
        return MigrationStatus(exists=False, pending=versions, missing_tables=list(REQUIRED_TABLES))

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied_checksums(conn)
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}

    return MigrationStatus(
        exists=True,
        applied=sorted(applied),
        pending=[v for v in versions if v not in applied],
        missing_tables=[t for t in REQUIRED_TABLES if t not in tables],
    )


def main() -> None:
    """Entry point of ``lumix-migrate``."""
    import argparse

    parser = argparse.ArgumentParser(description="Apply or inspect Lumix schema migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Report schema state and exit")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration snapshot")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        print(f"Database exists: {status.exists}")
        print(f"Applied: {', '.join(status.applied) or '-'}")
        print(f"Pending: {', '.join(status.pending) or '-'}")
        if status.missing_tables:
            print(f"Missing tables: {', '.join(status.missing_tables)}")
        raise SystemExit(0 if status.is_current else 1)

    applied = asyncio.run(
        initialize_database(args.db_path, create_backup_before=not args.no_backup)
    )
    print(f"Applied: {', '.join(applied) or 'nothing to apply'}")


if __name__ == "__main__":
    main()
