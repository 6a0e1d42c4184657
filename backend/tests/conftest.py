"""Root conftest — shared test configuration."""

import os

# Never reach a real Postgres from the test suite
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
