"""Snapshot persistence for the blog store.

The store never talks to storage directly. After each committed mutation a
``PersistOnMutation`` hook builds a ``PersistedState`` and hands it to a
backend. Saving is best-effort: errors are logged and the in-memory state
stays authoritative for the session.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Optional, Protocol, Tuple

from sqlalchemy.exc import IntegrityError

from .config import STORAGE_KEY
from .entities import Article, Comment, Notification, User
from .state import BlogState

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _payload_seq(payload: Optional[Dict[str, Any]]) -> int:
	# snapshots written before sequencing count as the oldest possible
	try:
		return int((payload or {}).get("seq") or 0)
	except (TypeError, ValueError):
		return 0


@dataclass(frozen=True)
class PersistedState:
	current_user: Optional[User] = None
	articles: Tuple[Article, ...] = ()
	comments: Tuple[Comment, ...] = ()
	notifications: Tuple[Notification, ...] = ()
	favorites: Dict[str, FrozenSet[str]] = field(default_factory=dict)
	# None means "not persisted", keep whatever user list the seed has
	users: Optional[Tuple[User, ...]] = None
	# write order; a backend ignores a payload older than the one it holds
	seq: int = 0

	@classmethod
	def from_state(cls, state: BlogState, seq: int = 0) -> "PersistedState":
		return cls(
			current_user=state.current_user,
			articles=state.articles,
			comments=state.comments,
			notifications=state.notifications,
			favorites=dict(state.favorites),
			users=state.users,
			seq=seq,
		)

	def apply_to(self, base: BlogState) -> BlogState:
		return BlogState(
			users=self.users if self.users is not None else base.users,
			current_user=self.current_user,
			articles=self.articles,
			comments=self.comments,
			notifications=self.notifications,
			favorites=dict(self.favorites),
		)

	def to_payload(self) -> Dict[str, Any]:
		state: Dict[str, Any] = {
			"currentUser": self.current_user.to_dict() if self.current_user else None,
			"articles": [a.to_dict() for a in self.articles],
			"comments": [c.to_dict() for c in self.comments],
			"notifications": [n.to_dict() for n in self.notifications],
			"favorites": {uid: sorted(ids) for uid, ids in self.favorites.items()},
		}
		if self.users is not None:
			state["users"] = [u.to_dict() for u in self.users]
		return {"state": state, "version": SNAPSHOT_VERSION, "seq": self.seq}

	@classmethod
	def from_payload(cls, payload: Dict[str, Any]) -> "PersistedState":
		state = payload["state"]
		current = state.get("currentUser")
		current_user = User.from_dict(current) if current else None
		raw_favorites = state.get("favorites") or {}
		if isinstance(raw_favorites, list):
			# older snapshots kept one flat list; it belonged to whoever was logged in
			raw_favorites = {current_user.id: raw_favorites} if current_user else {}
		favorites = {str(uid): frozenset(str(i) for i in ids) for uid, ids in raw_favorites.items() if ids}
		users = state.get("users")
		return cls(
			current_user=current_user,
			articles=tuple(Article.from_dict(a) for a in state.get("articles") or []),
			comments=tuple(Comment.from_dict(c) for c in state.get("comments") or []),
			notifications=tuple(Notification.from_dict(n) for n in state.get("notifications") or []),
			favorites=favorites,
			users=tuple(User.from_dict(u) for u in users) if users is not None else None,
			seq=_payload_seq(payload),
		)


class SnapshotBackend(Protocol):
	def save(self, snapshot: PersistedState) -> None:
		...

	def load(self) -> Optional[PersistedState]:
		...


class MemorySnapshotBackend:
	"""Keeps the serialized snapshot in process; used by tests and no-db mode."""

	def __init__(self, payload: Optional[Dict[str, Any]] = None):
		self.payload = payload
		self.save_count = 0

	def save(self, snapshot: PersistedState) -> None:
		if self.payload is not None and _payload_seq(self.payload) >= snapshot.seq:
			return
		# round-trip through JSON so unserializable values fail here like they would on disk
		self.payload = json.loads(json.dumps(snapshot.to_payload(), ensure_ascii=False))
		self.save_count += 1

	def load(self) -> Optional[PersistedState]:
		if self.payload is None:
			return None
		return PersistedState.from_payload(self.payload)


class SqlSnapshotBackend:
	def __init__(self, session_factory: Optional[Callable[[], Any]] = None, key: str = STORAGE_KEY):
		if session_factory is None:
			from .db import get_session
			session_factory = get_session
		self._session_factory = session_factory
		self.key = key

	def write_payload(self, payload: Dict[str, Any]) -> bool:
		"""Store ``payload`` unless the row already holds the same or a newer seq.

		Returns whether the row was written. Workers may run writes out of
		order or redeliver one, so a stale payload is dropped here.
		"""
		from .models import StoreSnapshot
		seq = _payload_seq(payload)
		for attempt in range(2):
			with self._session_factory() as session:
				try:
					row = session.get(StoreSnapshot, self.key, with_for_update=True)
					if row is None:
						session.add(StoreSnapshot(key=self.key, payload=payload, version=payload.get("version", SNAPSHOT_VERSION)))
					elif _payload_seq(row.payload) >= seq:
						log.debug("skipping stale snapshot %s seq=%s (stored seq=%s)", self.key, seq, _payload_seq(row.payload))
						session.rollback()
						return False
					else:
						row.payload = payload
						row.version = payload.get("version", SNAPSHOT_VERSION)
					session.commit()
					return True
				except IntegrityError:
					# another writer inserted the row first; compare against it
					session.rollback()
					if attempt:
						raise
				except Exception:
					session.rollback()
					raise
		return False

	def save(self, snapshot: PersistedState) -> None:
		self.write_payload(snapshot.to_payload())

	def load(self) -> Optional[PersistedState]:
		from .models import StoreSnapshot
		with self._session_factory() as session:
			row = session.get(StoreSnapshot, self.key)
			if row is None:
				return None
			return PersistedState.from_payload(row.payload)


class CelerySnapshotBackend:
	"""Non-blocking variant: the write happens in a Celery worker.

	Reads still go straight to the database; they only happen at startup.
	"""

	def __init__(self, key: str = STORAGE_KEY, reader: Optional[SqlSnapshotBackend] = None):
		self.key = key
		self.reader = reader or SqlSnapshotBackend(key=key)

	def save(self, snapshot: PersistedState) -> None:
		from tasks.persist_snapshot import persist_snapshot  # lazy import to avoid overhead
		persist_snapshot.delay(self.key, snapshot.to_payload())

	def load(self) -> Optional[PersistedState]:
		return self.reader.load()


class PersistOnMutation:
	"""After-mutation hook that writes the persisted subset of the state."""

	def __init__(self, backend: SnapshotBackend, seq: int = 0):
		self.backend = backend
		self.seq = seq

	def __call__(self, state: BlogState, action: Any) -> None:
		# the store calls hooks one commit at a time, so seq follows commit order
		self.seq += 1
		try:
			self.backend.save(PersistedState.from_state(state, seq=self.seq))
		except Exception:
			log.exception("failed to persist blog state after %s", type(action).__name__)


def default_backend() -> SnapshotBackend:
	from .config import PERSIST_ASYNC
	from .db import init_db
	init_db()
	if PERSIST_ASYNC:
		return CelerySnapshotBackend()
	return SqlSnapshotBackend()


def load_snapshot(backend: Optional[SnapshotBackend]) -> Optional[PersistedState]:
	"""Last good snapshot, or None when the caller should start from the seed."""
	if backend is None:
		return None
	try:
		snapshot = backend.load()
	except Exception:
		log.warning("could not read persisted blog state, starting from seed data", exc_info=True)
		return None
	if snapshot is None:
		log.info("no persisted blog state found, starting from seed data")
	return snapshot
