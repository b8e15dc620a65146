"""Helpers shared by the test suite."""

import os
from pathlib import Path


def database_url_for_tests(tmp_dir: Path) -> str:
    """PostgreSQL when TEST_DATABASE_URL/DATABASE_URL names one, else a per-test SQLite file."""
    url = os.environ.get("TEST_DATABASE_URL") or os.environ.get("DATABASE_URL", "")
    if url.startswith("postgres"):
        # Fix for running tests on host where host.docker.internal might not resolve
        url = url.replace("host.docker.internal", "localhost")
        for prefix in ("postgresql://", "postgres://"):
            if url.startswith(prefix):
                url = url.replace(prefix, "postgresql+psycopg://", 1)
        return url
    return f"sqlite+aiosqlite:///{tmp_dir / 'test_store.db'}"
