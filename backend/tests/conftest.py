# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import pytest_asyncio

from core.database import dispose_database, get_database_manager, init_database


@pytest_asyncio.fixture
async def db(tmp_path: Path):
    """Fresh SQLite file with all tables; yields the DatabaseManager."""
    await init_database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", create_tables=True)
    try:
        yield get_database_manager()
    finally:
        await dispose_database()
