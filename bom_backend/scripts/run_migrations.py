"""
Run Alembic migrations to head.

Usage:
    python -m bom_backend.scripts.run_migrations
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect


# Schema state produced by Base.metadata.create_all() for the current models.
CREATE_ALL_BASELINE_REVISION = "20261019_02"


def _build_alembic_config() -> Config:
    project_root = Path(__file__).resolve().parents[2]
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")
    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    db_url = os.getenv("DATABASE_URL")
    if db_url:
        cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def _needs_create_all_bootstrap(cfg: Config) -> bool:
    db_url = cfg.get_main_option("sqlalchemy.url")
    if not db_url:
        return False
    engine = create_engine(db_url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    if "alembic_version" in tables:
        return False
    # Databases built via create_all() have the tables but no Alembic state.
    return "bom_dependency_rules" in tables


def run_migrations_to_head() -> None:
    cfg = _build_alembic_config()
    if _needs_create_all_bootstrap(cfg):
        logging.getLogger("migrations").info("Stamping create_all schema at %s", CREATE_ALL_BASELINE_REVISION)
        command.stamp(cfg, CREATE_ALL_BASELINE_REVISION)
    command.upgrade(cfg, "head")


def main() -> int:
    from ..core.logging_config import setup_logging

    setup_logging()
    try:
        run_migrations_to_head()
    except Exception as exc:
        logging.getLogger("migrations").error("Migration failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
