from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import DATABASE_URL


def make_engine(url: str):
	# check_same_thread is needed for SQLite with threads (Flask dev server)
	return create_engine(
		url,
		echo=False,
		future=True,
		connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
	)


def make_session_factory(engine):
	return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


_engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(_engine)
Base = declarative_base()


def get_engine():
	return _engine


def get_session():
	return SessionLocal()


def init_db(engine=None) -> None:
	"""Create tables on SQLite; other databases are migrated with Alembic."""
	engine = engine or _engine
	if engine.dialect.name == "sqlite":
		# models register themselves on Base when imported
		from . import models  # noqa: F401
		Base.metadata.create_all(bind=engine)
		ensure_sqlite_column(engine, "store_snapshots", "version", "INTEGER NOT NULL DEFAULT 1")


def ensure_sqlite_column(engine, table_name: str, column_name: str, column_ddl: str) -> None:
	"""Add a column if missing (SQLite only). column_ddl excludes the column name.
	Example: ensure_sqlite_column(engine, 'store_snapshots', 'version', 'INTEGER')
	"""
	if engine.dialect.name != "sqlite":
		return
	with engine.connect() as conn:
		rows = conn.execute(text(f"PRAGMA table_info({table_name})"))
		existing = {r[1] for r in rows}
		if column_name not in existing:
			conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_ddl}"))
			conn.commit()
