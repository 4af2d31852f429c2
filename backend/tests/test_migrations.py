"""Alembic migrations build the same schema the models declare."""
from pathlib import Path

from sqlalchemy import create_engine, inspect
from sqlmodel import SQLModel

from alembic import command
from alembic.config import Config
from robobracket import models  # noqa: F401

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"
TABLES = {"event", "team", "match", "categoryresult", "qualifierbye", "advancementhold"}


def _alembic_config(db_url: str) -> Config:
    # No ini file: keeps alembic from reconfiguring logging mid-run
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


def test_upgrade_matches_models(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_alembic_config(db_url), "head")

    inspector = inspect(create_engine(db_url))
    assert TABLES <= set(inspector.get_table_names())

    for table_name in TABLES:
        migrated = {c["name"] for c in inspector.get_columns(table_name)}
        declared = {c.name for c in SQLModel.metadata.tables[table_name].columns}
        assert migrated == declared, table_name

    uniques = {u["name"] for u in inspector.get_unique_constraints("match")}
    assert "uq_match_number" in uniques
    uniques = {u["name"] for u in inspector.get_unique_constraints("categoryresult")}
    assert "uq_category_result" in uniques


def test_downgrade_drops_everything(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _alembic_config(db_url)
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    remaining = set(inspect(create_engine(db_url)).get_table_names())
    assert not TABLES & remaining
