"""Apply pending SQL migrations from backend/migrations in filename order.

Usage: python scripts/apply_migrations.py   (run from the backend directory)
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(BACKEND_ROOT))

import asyncpg  # noqa: E402

from app.settings import settings  # noqa: E402

logger = logging.getLogger("wayfarer.migrations")

MIGRATION_DIR = BACKEND_ROOT / "migrations"

_BOOTSTRAP = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


async def main() -> int:
    files = sorted(p for p in MIGRATION_DIR.glob("*.sql"))
    if not files:
        logger.warning("no migrations found in %s", MIGRATION_DIR)
        return 0

    conn = await asyncpg.connect(dsn=settings.postgres_url, ssl="require" if settings.postgres_ssl else "disable")
    try:
        await conn.execute(_BOOTSTRAP)
        applied = {row["version"] for row in await conn.fetch("SELECT version FROM schema_migrations")}
        for path in files:
            version = path.stem
            if version in applied:
                logger.info("skip %s (already applied)", version)
                continue
            logger.info("applying %s", version)
            async with conn.transaction():
                await conn.execute(path.read_text(encoding="utf-8"))
                await conn.execute("INSERT INTO schema_migrations (version) VALUES ($1)", version)
    finally:
        await conn.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    sys.exit(asyncio.run(main()))
