"""Copy stored results from SQL (SQLAlchemy) to MongoDB.

Copies every row of `resultados` into the `resultados` collection, keyed by
`_id = {loteria, concurso}`. Writes are upserts, so the script can be re-run.

Usage:
  # source SQL
  export DATABASE_URL="sqlite:///./loterias.db"

  # target Mongo
  export MONGODB_URI="mongodb://localhost:27017"
  export MONGODB_DB="loterias"

  python scripts/migrate_sql_to_mongo.py --skip-existing

Notes:
- This does NOT delete your SQL DB.
- Use `--drop-target` only if you want to clear the Mongo collection first.
"""

from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
from collections.abc import Sequence

from dotenv import load_dotenv
from pymongo import MongoClient

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from loterias.config import resolve_database_url  # noqa: E402
from loterias.db import MONGO_COLLECTION, build_repository  # noqa: E402
from loterias.games import Game  # noqa: E402
from loterias.repositories.resultado_repository import MongoResultRepository  # noqa: E402

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Migrate stored results from SQL to MongoDB")
    parser.add_argument("--sql-url", dest="sql_url", type=str, default=None)
    parser.add_argument("--mongo-uri", dest="mongo_uri", type=str, default=None)
    parser.add_argument("--mongo-db", dest="mongo_db", type=str, default=None)
    parser.add_argument("--drop-target", action="store_true", help="Drop the target collection before import")
    parser.add_argument("--skip-existing", action="store_true", help="Skip contests already present in Mongo")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    sql_url = str(args.sql_url or resolve_database_url())
    mongo_uri = str(args.mongo_uri or os.getenv("MONGODB_URI") or "mongodb://localhost:27017")
    mongo_db_name = str(args.mongo_db or os.getenv("MONGODB_DB") or "loterias")

    logger.info("Target Mongo: %s (db=%s)", mongo_uri, mongo_db_name)

    source, _engine = build_repository({"DB_BACKEND": "sql", "DATABASE_URL": sql_url})

    client: MongoClient = MongoClient(mongo_uri)
    col = client[mongo_db_name][MONGO_COLLECTION]
    if args.drop_target:
        logger.warning("Dropping target collection: %s", MONGO_COLLECTION)
        col.drop()
    target = MongoResultRepository(col)

    total = 0
    for game in Game:
        results = list(source.find_by_game(game))
        if args.skip_existing:
            existing = {doc["_id"]["concurso"] for doc in col.find({"_id.loteria": game.value}, {"_id": 1})}
            results = [r for r in results if r.contest not in existing]

        for start in range(0, len(results), BATCH_SIZE):
            target.save_all(results[start : start + BATCH_SIZE])

        logger.info("%s: copied %d results", game.value, len(results))
        total += len(results)

    client.close()
    logger.info("Copied results: %d", total)
    logger.info("Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
