from __future__ import annotations

import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .entities import STATUS_DRAFT, STATUS_PUBLISHED, Article, Comment, Notification, User
from .state import BlogState

# Pure projections over a BlogState. None of these mutate their input, so a
# caller may cache results keyed on the identity of the state object.


def published_articles(state: BlogState) -> List[Article]:
	return [a for a in state.articles if a.status == STATUS_PUBLISHED]


def category_counts(state: BlogState) -> List[Tuple[str, int]]:
	# Counter keeps insertion order and most_common sorts stably, so ties stay first-seen
	counts = Counter(a.category for a in published_articles(state))
	return counts.most_common()


def categories(state: BlogState) -> List[str]:
	return list(dict.fromkeys(a.category for a in published_articles(state)))


def popular_tags(state: BlogState, limit: int = 10) -> List[Tuple[str, int]]:
	counts = Counter(tag for a in published_articles(state) for tag in a.tags)
	return counts.most_common(limit)


def recent_articles(state: BlogState, limit: int = 5) -> List[Article]:
	return sorted(published_articles(state), key=lambda a: a.created_at, reverse=True)[:limit]


def popular_articles(state: BlogState, limit: int = 5, published_only: bool = True) -> List[Article]:
	articles = published_articles(state) if published_only else list(state.articles)
	return sorted(articles, key=lambda a: a.views, reverse=True)[:limit]


def _matches(article: Article, query: str) -> bool:
	return (
		query in article.title.lower()
		or query in article.excerpt.lower()
		or any(query in tag.lower() for tag in article.tags)
		or query in article.category.lower()
	)


def search_articles(state: BlogState, query: str = "", category: Optional[str] = None) -> List[Article]:
	results = published_articles(state)
	q = (query or "").strip().lower()
	if q:
		results = [a for a in results if _matches(a, q)]
	if category:
		results = [a for a in results if a.category == category]
	return sorted(results, key=lambda a: a.created_at, reverse=True)


def featured_articles(articles: Iterable[Article]) -> List[Article]:
	return [a for a in articles if a.featured]


def regular_articles(articles: Iterable[Article]) -> List[Article]:
	return [a for a in articles if not a.featured]


def article_statistics(state: BlogState) -> Dict[str, Any]:
	articles = state.articles
	total_views = sum(a.views for a in articles)
	total_likes = sum(a.likes for a in articles)
	avg = math.floor(total_views / len(articles) + 0.5) if articles else 0
	return {
		"total_articles": len(articles),
		"published_articles": sum(1 for a in articles if a.status == STATUS_PUBLISHED),
		"draft_articles": sum(1 for a in articles if a.status == STATUS_DRAFT),
		"total_users": len(state.users),
		"total_comments": len(state.comments),
		"total_views": total_views,
		"total_likes": total_likes,
		"avg_views_per_article": avg,
	}


def _find(items: Sequence[Any], item_id: Optional[str]) -> Optional[Any]:
	if item_id is None:
		return None
	return next((item for item in items if item.id == item_id), None)


def find_article(state: BlogState, article_id: Optional[str]) -> Optional[Article]:
	return _find(state.articles, article_id)


def find_article_by_slug(state: BlogState, slug: str) -> Optional[Article]:
	return next((a for a in state.articles if a.slug == slug), None)


def find_user(state: BlogState, user_id: Optional[str]) -> Optional[User]:
	return _find(state.users, user_id)


def article_author(state: BlogState, article: Article) -> Optional[User]:
	return find_user(state, article.author_id)


def comments_for_article(state: BlogState, article_id: str) -> List[Comment]:
	return sorted((c for c in state.comments if c.article_id == article_id), key=lambda c: c.created_at)


def favorite_articles(state: BlogState, user_id: str) -> List[Article]:
	ids = state.favorites.get(user_id, frozenset())
	return [a for a in state.articles if a.id in ids]


def user_notifications(state: BlogState, user_id: str, limit: int = 20) -> List[Notification]:
	mine = [n for n in state.notifications if n.user_id == user_id]
	return sorted(mine, key=lambda n: n.created_at, reverse=True)[:limit]


def unread_notifications(state: BlogState, user_id: str) -> List[Notification]:
	return [n for n in state.notifications if n.user_id == user_id and not n.read]
