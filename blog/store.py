"""The blog's domain store.

A ``Store`` holds the current ``BlogState`` and turns method calls into
actions for the pure reducer in ``blog.state``. Nothing here raises on bad
input: unknown ids are silent no-ops. Side effects such as persistence are
attached with ``after_mutation`` and run only after a mutation commits;
views watch changes through ``subscribe``.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from . import selectors
from .auth import Authenticator, MockAuthenticator
from .entities import ROLE_READER, ROLES, Article, Comment, Notification, User
from .persistence import PersistOnMutation, SnapshotBackend, load_snapshot
from .state import (
	AddArticle,
	AddComment,
	AddNotification,
	BlogState,
	DeleteArticle,
	IncrementViews,
	LikeArticle,
	LikeComment,
	Login,
	Logout,
	MarkAllNotificationsRead,
	MarkNotificationRead,
	RegisterUser,
	ToggleFavorite,
	UpdateArticle,
	reduce,
)
from .text_utils import parse_iso, utcnow

log = logging.getLogger(__name__)

Listener = Callable[[BlogState, Any], None]


def _max_numeric_id(state: BlogState) -> int:
	ids = [
		int(item.id)
		for group in (state.users, state.articles, state.comments, state.notifications)
		for item in group
		if item.id.isdigit()
	]
	return max(ids, default=0)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
	for key in keys:
		if data.get(key) is not None:
			return data[key]
	return default


class Store:
	def __init__(
		self,
		state: Optional[BlogState] = None,
		authenticator: Optional[Authenticator] = None,
		clock: Optional[Callable[[], datetime]] = None,
	):
		self._state = state if state is not None else BlogState()
		self._authenticator = authenticator or MockAuthenticator()
		self._clock = clock or utcnow
		self._hooks: List[Listener] = []
		self._listeners: List[Listener] = []
		self._last_id = _max_numeric_id(self._state)
		# one mutation at a time; reentrant so an observer may dispatch
		self._lock = threading.RLock()

	@property
	def state(self) -> BlogState:
		return self._state

	@property
	def current_user(self) -> Optional[User]:
		return self._state.current_user

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		self._listeners.append(listener)
		return lambda: self._listeners.remove(listener) if listener in self._listeners else None

	def after_mutation(self, hook: Listener) -> Callable[[], None]:
		self._hooks.append(hook)
		return lambda: self._hooks.remove(hook) if hook in self._hooks else None

	def dispatch(self, action: Any) -> BlogState:
		with self._lock:
			new_state = reduce(self._state, action)
			if new_state is self._state:
				return new_state
			self._state = new_state
			# effects first so listeners observe state that has already been handed to storage;
			# still under the lock so snapshots are saved in commit order
			for fn in list(self._hooks) + list(self._listeners):
				try:
					fn(new_state, action)
				except Exception:
					log.exception("observer %r failed after %s", fn, type(action).__name__)
			return new_state

	def _now(self) -> datetime:
		# naive clock values are taken as UTC so they sort against the seed timestamps
		return parse_iso(self._clock())

	def _new_id(self, now: datetime) -> str:
		# millisecond timestamps, bumped so two calls in the same millisecond never collide
		with self._lock:
			candidate = int(now.timestamp() * 1000)
			if candidate <= self._last_id:
				candidate = self._last_id + 1
			self._last_id = candidate
			return str(candidate)

	def _find_user_by_email(self, email: str) -> Optional[User]:
		key = (email or "").strip().lower()
		return next((u for u in self._state.users if u.email.lower() == key), None)

	# auth

	def login(self, email: str, password: str) -> bool:
		user = self._find_user_by_email(email)
		if user is None or not self._authenticator.verify(user, password or ""):
			log.info("login rejected for %s", (email or "").strip())
			return False
		self.dispatch(Login(user))
		return True

	def logout(self) -> None:
		self.dispatch(Logout())

	def register(self, user_data: Mapping[str, Any]) -> bool:
		email = (user_data.get("email") or "").strip()
		if self._find_user_by_email(email) is not None:
			log.info("registration rejected, email already in use: %s", email)
			return False
		now = self._now()
		role = user_data.get("role") or ROLE_READER
		user = User(
			id=self._new_id(now),
			name=(user_data.get("name") or "").strip(),
			email=email,
			avatar=user_data.get("avatar") or "",
			bio=user_data.get("bio") or "",
			role=role if role in ROLES else ROLE_READER,
			created_at=now,
		)
		self.dispatch(RegisterUser(user))
		return True

	# articles

	def add_article(self, data: Mapping[str, Any]) -> Article:
		now = self._now()
		article = Article(id=self._new_id(now), title="", slug="", content="", created_at=now, updated_at=now)
		article = article.with_changes(data, now)
		self.dispatch(AddArticle(article))
		return article

	def update_article(self, article_id: str, changes: Mapping[str, Any]) -> None:
		self.dispatch(UpdateArticle(article_id, dict(changes), self._now()))

	def delete_article(self, article_id: str) -> None:
		self.dispatch(DeleteArticle(article_id))

	def like_article(self, article_id: str) -> None:
		self.dispatch(LikeArticle(article_id))

	def increment_views(self, article_id: str) -> None:
		self.dispatch(IncrementViews(article_id))

	# comments

	def add_comment(self, data: Mapping[str, Any]) -> Comment:
		now = self._now()
		author = data.get("author")
		user_id = _pick(data, "userId", "user_id")
		if user_id is None and isinstance(author, Mapping):
			user_id = author.get("id")
		if user_id is None and self.current_user is not None:
			user_id = self.current_user.id
		comment = Comment(
			id=self._new_id(now),
			article_id=str(_pick(data, "articleId", "article_id", default="")),
			user_id=str(user_id or ""),
			content=data.get("content") or "",
			created_at=now,
		)
		self.dispatch(AddComment(comment))
		return comment

	def like_comment(self, comment_id: str) -> None:
		self.dispatch(LikeComment(comment_id))

	# favorites, scoped to the logged-in user

	def toggle_favorite(self, article_id: str) -> bool:
		user = self.current_user
		if user is None:
			return False
		self.dispatch(ToggleFavorite(user.id, article_id))
		return self.is_favorite(article_id)

	def is_favorite(self, article_id: str) -> bool:
		user = self.current_user
		if user is None:
			return False
		return article_id in self._state.favorites.get(user.id, frozenset())

	# notifications

	def add_notification(self, data: Mapping[str, Any]) -> Notification:
		now = self._now()
		related = _pick(data, "relatedId", "related_id")
		notification = Notification(
			id=self._new_id(now),
			user_id=str(_pick(data, "userId", "user_id", default="")),
			type=data.get("type") or "article",
			title=data.get("title") or "",
			message=data.get("message") or "",
			read=bool(data.get("read", False)),
			created_at=now,
			related_id=str(related) if related is not None else None,
			action_url=_pick(data, "actionUrl", "action_url"),
		)
		self.dispatch(AddNotification(notification))
		return notification

	def mark_notification_as_read(self, notification_id: str) -> None:
		self.dispatch(MarkNotificationRead(notification_id))

	def mark_all_notifications_as_read(self, user_id: str) -> None:
		self.dispatch(MarkAllNotificationsRead(user_id))

	def get_unread_notifications(self, user_id: str) -> List[Notification]:
		return selectors.unread_notifications(self._state, user_id)


def create_store(
	backend: Optional[SnapshotBackend] = None,
	seed: Optional[BlogState] = None,
	authenticator: Optional[Authenticator] = None,
	clock: Optional[Callable[[], datetime]] = None,
) -> Store:
	"""Build a store from the last good snapshot, or the seed when there is none."""
	if seed is None:
		from .seed import seed_state
		seed = seed_state()
	snapshot = load_snapshot(backend)
	state = snapshot.apply_to(seed) if snapshot is not None else seed
	store = Store(state, authenticator=authenticator, clock=clock)
	if backend is not None:
		# continue numbering after the restored snapshot so later writes are never taken as stale
		store.after_mutation(PersistOnMutation(backend, seq=snapshot.seq if snapshot is not None else 0))
	return store
