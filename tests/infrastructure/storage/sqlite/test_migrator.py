"""Tests for the schema migrator."""

import sys

import aiosqlite
import pytest

from lumix.core.exceptions import ConfigurationError, PersistenceError
from lumix.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
)
from lumix.infrastructure.storage.sqlite.migrations.migrator import REQUIRED_TABLES, main


async def _tables(db_path) -> set[str]:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row[0] for row in await cursor.fetchall()}


class TestInitializeDatabase:
    async def test_fresh_database(self, tmp_path):
        db_path = tmp_path / "lumix.db"

        assert await initialize_database(db_path, create_backup_before=False) == ["001"]

        status = await get_migration_status(db_path)
        assert status.is_current
        assert status.applied == ["001"]
        assert set(REQUIRED_TABLES) <= await _tables(db_path)

    async def test_rerun_applies_nothing_and_removes_snapshot(self, tmp_path):
        db_path = tmp_path / "lumix.db"
        await initialize_database(db_path, create_backup_before=False)

        assert await initialize_database(db_path) == []
        assert list(tmp_path.glob("*.backup_*")) == []

    async def test_edited_migration_rejected(self, tmp_path):
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        script = migrations / "v001_base.sql"
        script.write_text("CREATE TABLE widgets (id INTEGER PRIMARY KEY);")
        db_path = tmp_path / "lumix.db"
        await initialize_database(db_path, create_backup_before=False, directory=migrations)

        script.write_text("CREATE TABLE widgets (id INTEGER PRIMARY KEY, name TEXT);")
        with pytest.raises(ConfigurationError) as exc_info:
            await initialize_database(db_path, directory=migrations)

        assert exc_info.value.code == "MIGRATION_CHECKSUM_MISMATCH"
        assert exc_info.value.details["version"] == "001"

    async def test_failed_migration_restores_snapshot(self, tmp_path):
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "v001_base.sql").write_text("CREATE TABLE widgets (id INTEGER PRIMARY KEY);")
        db_path = tmp_path / "lumix.db"
        await initialize_database(db_path, create_backup_before=False, directory=migrations)

        (migrations / "v002_broken.sql").write_text(
            "CREATE TABLE gadgets (id INTEGER PRIMARY KEY);\nCREATE TABLE broken (;"
        )
        with pytest.raises(PersistenceError) as exc_info:
            await initialize_database(db_path, directory=migrations)

        assert exc_info.value.details["operation"] == "migrate database"
        tables = await _tables(db_path)
        assert "widgets" in tables
        assert "gadgets" not in tables
        status = await get_migration_status(db_path, directory=migrations)
        assert status.applied == ["001"]
        assert status.pending == ["002"]
        assert list(tmp_path.glob("*.backup_*")) == []


class TestMigrationStatus:
    async def test_missing_database(self, tmp_path):
        status = await get_migration_status(tmp_path / "absent.db")

        assert not status.exists
        assert not status.is_current
        assert status.pending == ["001"]
        assert status.missing_tables == list(REQUIRED_TABLES)

    async def test_reports_missing_tables(self, tmp_path):
        db_path = tmp_path / "lumix.db"
        await initialize_database(db_path, create_backup_before=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("DROP TABLE payroll_items")
            await conn.commit()

        status = await get_migration_status(db_path)

        assert status.exists
        assert status.pending == []
        assert status.missing_tables == ["payroll_items"]
        assert not status.is_current


class TestMigrateCommand:
    def test_migrate_then_status(self, tmp_path, monkeypatch, capsys):
        db_path = tmp_path / "lumix.db"

        monkeypatch.setattr(sys, "argv", ["lumix-migrate", "--db-path", str(db_path), "--no-backup"])
        main()
        assert "Applied: 001" in capsys.readouterr().out

        monkeypatch.setattr(sys, "argv", ["lumix-migrate", "--db-path", str(db_path), "--status"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "Database exists: True" in out
        assert "Pending: -" in out

    def test_status_of_missing_database_fails(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(
            sys, "argv", ["lumix-migrate", "--db-path", str(tmp_path / "absent.db"), "--status"]
        )
        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Missing tables: companies" in capsys.readouterr().out
