"""Versioned SQL migrations."""

from lumix.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationStatus,
    get_migration_status,
    initialize_database,
    run_migrations,
)

__all__ = ["MigrationStatus", "get_migration_status", "initialize_database", "run_migrations"]
