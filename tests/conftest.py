import pytest
from datetime import datetime, timedelta, timezone

from blog.app import create_app
from blog.db import init_db, make_engine, make_session_factory
from blog.persistence import SqlSnapshotBackend
from blog.seed import seed_state
from blog.state import BlogState
from blog.store import Store

ADMIN_EMAIL = "haishublog@example.com"
ADMIN_PASSWORD = "password123"


class FakeClock:
	"""A clock that only moves when a test tells it to."""

	def __init__(self, start):
		self.now = start

	def __call__(self):
		return self.now

	def advance(self, **kwargs):
		self.now = self.now + timedelta(**kwargs)
		return self.now


@pytest.fixture
def clock():
	return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
	"""A store seeded with the mock users, articles, comments and notifications."""
	return Store(seed_state(), clock=clock)


@pytest.fixture
def empty_store(clock):
	return Store(BlogState(), clock=clock)


@pytest.fixture
def session_factory(tmp_path):
	"""Session factory bound to a throwaway SQLite file with the tables created."""
	engine = make_engine(f"sqlite:///{tmp_path / 'blog.db'}")
	init_db(engine)
	yield make_session_factory(engine)
	engine.dispose()


@pytest.fixture
def sql_backend(session_factory):
	return SqlSnapshotBackend(session_factory=session_factory, key="test-storage")


@pytest.fixture
def dist_dir(tmp_path):
	dist = tmp_path / "dist"
	dist.mkdir()
	(dist / "index.html").write_text('<div id="app"></div>', encoding="utf-8")
	(dist / "main.js").write_text("console.log('blog')", encoding="utf-8")
	return dist


@pytest.fixture
def client(store, dist_dir):
	app = create_app(store=store, dist_dir=dist_dir)
	app.config["TESTING"] = True
	return app.test_client()


@pytest.fixture
def admin_client(client):
	resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
	assert resp.status_code == 200
	return client


@pytest.fixture
def reader_client(client):
	resp = client.post("/api/auth/login", json={"email": "aqing@example.com", "password": "123456"})
	assert resp.status_code == 200
	return client
