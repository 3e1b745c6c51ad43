"""Pytest configuration and fixtures."""

import re
import zlib
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from lumix.core.entities.company import Identity, Role


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Decompress the FlateDecode streams of *pdf_bytes* and return their text.

    fpdf2 compresses page content with zlib. Only stream contents are
    returned, so document metadata (title, producer) never matches.
    """
    texts: list[str] = []
    for match in re.finditer(rb"stream\n(.*?)\nendstream", pdf_bytes, re.DOTALL):
        try:
            texts.append(zlib.decompress(match.group(1)).decode("latin-1", errors="replace"))
        except zlib.error:
            continue
    return "\n".join(texts)


def count_pdf_pages(pdf_bytes: bytes) -> int:
    """Count page objects in *pdf_bytes*."""
    return len(re.findall(rb"/Type\s*/Page(?!s)", pdf_bytes))


@pytest.fixture
def pdf_text() -> Callable[[bytes], str]:
    """Text extractor for rendered PDFs."""
    return extract_pdf_text


@pytest.fixture
def pdf_pages() -> Callable[[bytes], int]:
    """Page counter for rendered PDFs."""
    return count_pdf_pages


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(user_id="user-1", company_id="acme", role=Role.ADMIN, full_name="Ada Admin")


@pytest.fixture
def manager_identity() -> Identity:
    return Identity(user_id="user-2", company_id="acme", role=Role.MANAGER)


@pytest.fixture
def viewer_identity() -> Identity:
    return Identity(user_id="user-3", company_id="acme", role=Role.VIEWER)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Identity headers forwarded by the auth proxy for an admin."""
    return {
        "X-User-Id": "user-1",
        "X-Company-Id": "acme",
        "X-User-Role": "admin",
        "X-User-Name": "Ada Admin",
    }


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return {
        "X-User-Id": "user-3",
        "X-Company-Id": "acme",
        "X-User-Role": "viewer",
    }


@pytest.fixture
async def sqlite_db(tmp_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated temporary database wired into the global connection pool."""
    import lumix.infrastructure.storage.sqlite.connection as conn_module
    from lumix.infrastructure.storage.sqlite.migrations import initialize_database

    db_path = tmp_path / "test.db"
    await initialize_database(db_path, create_backup_before=False)

    conn_module._pool = None
    mock_settings = MagicMock()
    mock_settings.storage.db_path = db_path
    mock_settings.storage.pool_size = 1
    mock_settings.storage.busy_timeout = 5000

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield db_path
        finally:
            await conn_module.close_pool()
