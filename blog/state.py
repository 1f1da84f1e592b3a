"""Immutable blog state and the pure reducer that advances it.

Every action carries whatever ids and timestamps it needs, so
``reduce(state, action)`` never reads the clock and returns the very same
state object when the action does not apply (unknown id, already read, ...).
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from .entities import Article, Comment, Notification, User


@dataclass(frozen=True)
class BlogState:
	users: Tuple[User, ...] = ()
	current_user: Optional[User] = None
	articles: Tuple[Article, ...] = ()
	comments: Tuple[Comment, ...] = ()
	notifications: Tuple[Notification, ...] = ()
	# user id -> favorited article ids
	favorites: Mapping[str, FrozenSet[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Login:
	user: User


@dataclass(frozen=True)
class Logout:
	pass


@dataclass(frozen=True)
class RegisterUser:
	user: User


@dataclass(frozen=True)
class AddArticle:
	article: Article


@dataclass(frozen=True)
class UpdateArticle:
	article_id: str
	changes: Mapping[str, Any]
	at: datetime


@dataclass(frozen=True)
class DeleteArticle:
	article_id: str


@dataclass(frozen=True)
class LikeArticle:
	article_id: str


@dataclass(frozen=True)
class IncrementViews:
	article_id: str


@dataclass(frozen=True)
class AddComment:
	comment: Comment


@dataclass(frozen=True)
class LikeComment:
	comment_id: str


@dataclass(frozen=True)
class ToggleFavorite:
	user_id: str
	article_id: str


@dataclass(frozen=True)
class AddNotification:
	notification: Notification


@dataclass(frozen=True)
class MarkNotificationRead:
	notification_id: str


@dataclass(frozen=True)
class MarkAllNotificationsRead:
	user_id: str


def _map_one(items: tuple, item_id: str, fn: Callable[[Any], Any]) -> Optional[tuple]:
	"""Replace the item with ``item_id``; None when nothing matched or changed."""
	for i, item in enumerate(items):
		if item.id == item_id:
			new_item = fn(item)
			if new_item is item:
				return None
			return items[:i] + (new_item,) + items[i + 1:]
	return None


def _login(state: BlogState, action: Login) -> BlogState:
	return replace(state, current_user=action.user)


def _logout(state: BlogState, action: Logout) -> BlogState:
	if state.current_user is None:
		return state
	return replace(state, current_user=None)


def _register(state: BlogState, action: RegisterUser) -> BlogState:
	return replace(state, users=state.users + (action.user,), current_user=action.user)


def _add_article(state: BlogState, action: AddArticle) -> BlogState:
	return replace(state, articles=(action.article,) + state.articles)


def _update_article(state: BlogState, action: UpdateArticle) -> BlogState:
	articles = _map_one(state.articles, action.article_id, lambda a: a.with_changes(action.changes, action.at))
	return state if articles is None else replace(state, articles=articles)


def _delete_article(state: BlogState, action: DeleteArticle) -> BlogState:
	articles = tuple(a for a in state.articles if a.id != action.article_id)
	if len(articles) == len(state.articles):
		return state
	comments = tuple(c for c in state.comments if c.article_id != action.article_id)
	return replace(state, articles=articles, comments=comments)


def _like_article(state: BlogState, action: LikeArticle) -> BlogState:
	articles = _map_one(state.articles, action.article_id, lambda a: replace(a, likes=a.likes + 1))
	return state if articles is None else replace(state, articles=articles)


def _increment_views(state: BlogState, action: IncrementViews) -> BlogState:
	articles = _map_one(state.articles, action.article_id, lambda a: replace(a, views=a.views + 1))
	return state if articles is None else replace(state, articles=articles)


def _add_comment(state: BlogState, action: AddComment) -> BlogState:
	return replace(state, comments=state.comments + (action.comment,))


def _like_comment(state: BlogState, action: LikeComment) -> BlogState:
	comments = _map_one(state.comments, action.comment_id, lambda c: replace(c, likes=c.likes + 1))
	return state if comments is None else replace(state, comments=comments)


def _toggle_favorite(state: BlogState, action: ToggleFavorite) -> BlogState:
	current = state.favorites.get(action.user_id, frozenset())
	if action.article_id in current:
		updated = current - {action.article_id}
	else:
		updated = current | {action.article_id}
	favorites: Dict[str, FrozenSet[str]] = dict(state.favorites)
	if updated:
		favorites[action.user_id] = updated
	else:
		favorites.pop(action.user_id, None)
	return replace(state, favorites=favorites)


def _add_notification(state: BlogState, action: AddNotification) -> BlogState:
	return replace(state, notifications=(action.notification,) + state.notifications)


def _mark_read(n: Notification) -> Notification:
	return n if n.read else replace(n, read=True)


def _mark_notification_read(state: BlogState, action: MarkNotificationRead) -> BlogState:
	notifications = _map_one(state.notifications, action.notification_id, _mark_read)
	return state if notifications is None else replace(state, notifications=notifications)


def _mark_all_notifications_read(state: BlogState, action: MarkAllNotificationsRead) -> BlogState:
	if not any(n.user_id == action.user_id and not n.read for n in state.notifications):
		return state
	notifications = tuple(
		_mark_read(n) if n.user_id == action.user_id else n
		for n in state.notifications
	)
	return replace(state, notifications=notifications)


_REDUCERS: Dict[type, Callable[[BlogState, Any], BlogState]] = {
	Login: _login,
	Logout: _logout,
	RegisterUser: _register,
	AddArticle: _add_article,
	UpdateArticle: _update_article,
	DeleteArticle: _delete_article,
	LikeArticle: _like_article,
	IncrementViews: _increment_views,
	AddComment: _add_comment,
	LikeComment: _like_comment,
	ToggleFavorite: _toggle_favorite,
	AddNotification: _add_notification,
	MarkNotificationRead: _mark_notification_read,
	MarkAllNotificationsRead: _mark_all_notifications_read,
}


def reduce(state: BlogState, action: Any) -> BlogState:
	handler = _REDUCERS.get(type(action))
	if handler is None:
		raise TypeError(f"unknown action: {type(action).__name__}")
	return handler(state, action)
