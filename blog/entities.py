from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from .text_utils import normalize_tags, parse_iso, to_iso, utcnow

ROLE_ADMIN = "admin"
ROLE_AUTHOR = "author"
ROLE_USER = "user"
ROLE_READER = "reader"
ROLES = (ROLE_ADMIN, ROLE_AUTHOR, ROLE_USER, ROLE_READER)

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
STATUS_ARCHIVED = "archived"
ARTICLE_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED, STATUS_ARCHIVED)

NOTIFICATION_TYPES = ("like", "comment", "follow", "article")

DEFAULT_CATEGORY = "生活"


def _embedded_id(data: Mapping[str, Any], key: str, embedded: str) -> str:
	# the client sometimes embeds the whole user instead of its id
	value = data.get(key)
	if value is None and isinstance(data.get(embedded), Mapping):
		value = data[embedded].get("id")
	return str(value) if value is not None else ""


@dataclass(frozen=True)
class User:
	id: str
	name: str
	email: str
	avatar: str = ""
	bio: str = ""
	role: str = ROLE_READER
	created_at: datetime = field(default_factory=utcnow)

	@property
	def is_admin(self) -> bool:
		return self.role == ROLE_ADMIN

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"name": self.name,
			"email": self.email,
			"avatar": self.avatar,
			"bio": self.bio,
			"role": self.role,
			"createdAt": to_iso(self.created_at),
		}

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "User":
		role = data.get("role") or ROLE_READER
		return cls(
			id=str(data["id"]),
			name=data.get("name") or "",
			email=data.get("email") or "",
			avatar=data.get("avatar") or "",
			bio=data.get("bio") or "",
			role=role if role in ROLES else ROLE_READER,
			created_at=parse_iso(data.get("createdAt")) or utcnow(),
		)


@dataclass(frozen=True)
class Article:
	id: str
	title: str
	slug: str
	content: str
	excerpt: str = ""
	cover_image: str = ""
	author_id: str = ""
	category: str = DEFAULT_CATEGORY
	tags: Tuple[str, ...] = ()
	status: str = STATUS_DRAFT
	featured: bool = False
	likes: int = 0
	views: int = 0
	created_at: datetime = field(default_factory=utcnow)
	updated_at: datetime = field(default_factory=utcnow)
	published_at: Optional[datetime] = None

	# wire name -> attribute, for the fields an editor may change
	EDITABLE = {
		"title": "title",
		"slug": "slug",
		"excerpt": "excerpt",
		"content": "content",
		"coverImage": "cover_image",
		"cover_image": "cover_image",
		"authorId": "author_id",
		"author_id": "author_id",
		"author": "author_id",
		"category": "category",
		"tags": "tags",
		"status": "status",
		"featured": "featured",
		"publishedAt": "published_at",
		"published_at": "published_at",
	}

	@property
	def is_published(self) -> bool:
		return self.status == STATUS_PUBLISHED

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"title": self.title,
			"slug": self.slug,
			"excerpt": self.excerpt,
			"content": self.content,
			"coverImage": self.cover_image,
			"authorId": self.author_id,
			"category": self.category,
			"tags": list(self.tags),
			"status": self.status,
			"featured": self.featured,
			"likes": self.likes,
			"views": self.views,
			"createdAt": to_iso(self.created_at),
			"updatedAt": to_iso(self.updated_at),
			"publishedAt": to_iso(self.published_at),
		}

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Article":
		created_at = parse_iso(data.get("createdAt")) or utcnow()
		status = data.get("status") or STATUS_DRAFT
		return cls(
			id=str(data["id"]),
			title=data.get("title") or "",
			slug=data.get("slug") or "",
			content=data.get("content") or "",
			excerpt=data.get("excerpt") or "",
			cover_image=data.get("coverImage") or "",
			author_id=_embedded_id(data, "authorId", "author"),
			category=data.get("category") or DEFAULT_CATEGORY,
			tags=tuple(normalize_tags(data.get("tags"))),
			status=status if status in ARTICLE_STATUSES else STATUS_DRAFT,
			featured=bool(data.get("featured", False)),
			likes=int(data.get("likes") or 0),
			views=int(data.get("views") or 0),
			created_at=created_at,
			updated_at=parse_iso(data.get("updatedAt")) or created_at,
			published_at=parse_iso(data.get("publishedAt")),
		)

	def with_changes(self, changes: Mapping[str, Any], updated_at: datetime) -> "Article":
		"""Merge an editor update; counters, id and created_at are not editable."""
		values: Dict[str, Any] = {}
		for key, value in changes.items():
			attr = self.EDITABLE.get(key)
			if attr is None:
				continue
			if attr == "author_id":
				if isinstance(value, Mapping):
					value = value.get("id")
				value = "" if value is None else str(value)
			elif attr == "tags":
				value = tuple(normalize_tags(value))
			elif attr == "published_at":
				value = parse_iso(value)
			elif attr == "featured":
				value = bool(value)
			elif attr == "status" and value not in ARTICLE_STATUSES:
				continue
			elif value is None:
				value = ""
			values[attr] = value
		values["updated_at"] = updated_at
		if values.get("status", self.status) == STATUS_PUBLISHED and not values.get("published_at", self.published_at):
			values["published_at"] = updated_at
		return replace(self, **values)


@dataclass(frozen=True)
class Comment:
	id: str
	article_id: str
	user_id: str
	content: str
	created_at: datetime = field(default_factory=utcnow)
	likes: int = 0

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"articleId": self.article_id,
			"userId": self.user_id,
			"content": self.content,
			"createdAt": to_iso(self.created_at),
			"likes": self.likes,
		}

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Comment":
		return cls(
			id=str(data["id"]),
			article_id=str(data.get("articleId") or ""),
			user_id=_embedded_id(data, "userId", "author"),
			content=data.get("content") or "",
			created_at=parse_iso(data.get("createdAt")) or utcnow(),
			likes=int(data.get("likes") or 0),
		)


@dataclass(frozen=True)
class Notification:
	id: str
	user_id: str
	type: str
	title: str
	message: str = ""
	read: bool = False
	created_at: datetime = field(default_factory=utcnow)
	related_id: Optional[str] = None
	action_url: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		data = {
			"id": self.id,
			"userId": self.user_id,
			"type": self.type,
			"title": self.title,
			"message": self.message,
			"read": self.read,
			"createdAt": to_iso(self.created_at),
		}
		if self.related_id is not None:
			data["relatedId"] = self.related_id
		if self.action_url is not None:
			data["actionUrl"] = self.action_url
		return data

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Notification":
		related = data.get("relatedId")
		return cls(
			id=str(data["id"]),
			user_id=str(data.get("userId") or ""),
			type=data.get("type") or "article",
			title=data.get("title") or "",
			message=data.get("message") or "",
			read=bool(data.get("read", data.get("isRead", False))),
			created_at=parse_iso(data.get("createdAt")) or utcnow(),
			related_id=str(related) if related is not None else None,
			action_url=data.get("actionUrl"),
		)
