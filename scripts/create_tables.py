"""Create the results table in the configured SQL database.

Reads DATABASE_URL (or PG* vars) from .env / environment.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from loterias.config import resolve_database_url  # noqa: E402
from loterias.db import create_app_engine  # noqa: E402
from loterias.models.base import Base  # noqa: E402

# Import models so they register with Base.metadata
from loterias import models  # noqa: E402,F401


def main() -> int:
    """Create all ORM tables in the target database."""

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)

    # Reconciliation reads the newest contest per game on every run.
    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(
                text("CREATE INDEX IF NOT EXISTS ix_resultados_loteria_concurso_desc ON resultados (loteria, concurso DESC)")
            )

    print("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
