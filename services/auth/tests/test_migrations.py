from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

SERVICE_DIR = Path(__file__).resolve().parents[1]


def test_initial_migration_creates_auth_tables(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = Config(str(SERVICE_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(SERVICE_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)

    command.upgrade(cfg, "head")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        token_columns = {c["name"] for c in inspector.get_columns("refresh_tokens")}
    finally:
        engine.dispose()
    assert {"users", "refresh_tokens", "alembic_version_auth"} <= tables
    assert token_columns == {"id", "user_id", "token_hash", "expires_at", "created_at"}
