import logging
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _default_sqlite_url() -> str:
	data_dir = PROJECT_ROOT / "data"
	data_dir.mkdir(parents=True, exist_ok=True)
	db_path = data_dir / "blog.db"
	return f"sqlite:///{db_path}"


def _flag(name: str, default: str = "0") -> bool:
	return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL") or _default_sqlite_url()
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
PORT = int(os.getenv("PORT", "5000"))

# key the snapshot is stored under; matches the client's localStorage key
STORAGE_KEY = os.getenv("BLOG_STORAGE_KEY", "blog-storage")
PERSIST_ASYNC = _flag("BLOG_PERSIST_ASYNC")
DIST_DIR = Path(os.getenv("BLOG_DIST_DIR", str(PROJECT_ROOT / "dist")))
LOG_LEVEL = os.getenv("BLOG_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
	logging.basicConfig(
		level=getattr(logging, level, logging.INFO),
		format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
	)
