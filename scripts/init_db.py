from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from student_portal.database.bootstrap import ensure_indexes, list_collections, ping
from student_portal.database.connection import MongoConfig, MongoConnection


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = MongoConnection(
        MongoConfig(
            uri=settings.MONGODB_URI,
            database=settings.MONGODB_DB,
            timeout_ms=int(getattr(settings, "MONGODB_TIMEOUT_MS", 3000)),
        )
    )
    try:
        if not ping(conn.client()):
            print(f"FAILED: MongoDB not reachable at {settings.MONGODB_URI}")
            return 1

        db = conn.database()
        ensure_indexes(db)
        print(f"OK: indexes ready on {settings.MONGODB_DB} (collections={', '.join(list_collections(db)) or '-'})")
        return 0
    finally:
        conn.close()


if __name__ == "__main__":
    raise SystemExit(main())
