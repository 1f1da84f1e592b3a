from datetime import datetime, timedelta, timezone

from blog import selectors
from blog.entities import Article, Comment, Notification, User
from blog.seed import seed_state
from blog.state import BlogState

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_article(id, category="tea", tags=(), status="published", views=0, days=0, **kwargs):
	at = T0 + timedelta(days=days)
	title = kwargs.pop("title", f"Article {id}")
	return Article(
		id=id, title=title, slug=f"a-{id}", content="c",
		category=category, tags=tuple(tags), status=status, views=views,
		created_at=at, updated_at=at, **kwargs,
	)


def test_category_counts_scenario():
	state = BlogState(articles=(
		make_article("1", "tea"), make_article("2", "tea"), make_article("3", "photo"),
	))
	assert selectors.category_counts(state) == [("tea", 2), ("photo", 1)]


def test_category_counts_skip_drafts_and_keep_first_seen_ties():
	state = BlogState(articles=(
		make_article("1", "photo"),
		make_article("2", "tea"),
		make_article("3", "tea", status="draft"),
		make_article("4", "tea", status="draft"),
	))
	assert selectors.category_counts(state) == [("photo", 1), ("tea", 1)]
	assert selectors.categories(state) == ["photo", "tea"]


def test_popular_tags_counts_and_limit():
	state = BlogState(articles=(
		make_article("1", tags=["green", "oolong"]),
		make_article("2", tags=["oolong", "teaware"]),
		make_article("3", tags=["oolong", "green"]),
		make_article("4", tags=["hidden"], status="draft"),
	))
	assert selectors.popular_tags(state) == [("oolong", 3), ("green", 2), ("teaware", 1)]
	assert selectors.popular_tags(state, limit=1) == [("oolong", 3)]


def test_recent_and_popular_articles():
	state = BlogState(articles=(
		make_article("old", views=50, days=0),
		make_article("new", views=10, days=5),
		make_article("mid", views=30, days=2),
		make_article("draft", views=999, days=9, status="draft"),
	))
	assert [a.id for a in selectors.recent_articles(state, limit=2)] == ["new", "mid"]
	assert [a.id for a in selectors.popular_articles(state)] == ["old", "mid", "new"]
	assert selectors.popular_articles(state, limit=1, published_only=False)[0].id == "draft"


def test_search_matches_title_excerpt_tags_and_category_case_insensitively():
	state = BlogState(articles=(
		make_article("1", category="Photo", title="Morning light", days=1),
		make_article("2", category="tea", tags=["Oolong"], days=2),
		make_article("3", category="tea", excerpt="about GREEN tea", days=3),
		make_article("4", category="tea", title="Oolong draft", status="draft"),
	))
	assert [a.id for a in selectors.search_articles(state, "oolong")] == ["2"]
	assert [a.id for a in selectors.search_articles(state, "green")] == ["3"]
	assert [a.id for a in selectors.search_articles(state, "PHOTO")] == ["1"]
	assert [a.id for a in selectors.search_articles(state, "MORNING")] == ["1"]
	assert [a.id for a in selectors.search_articles(state, category="tea")] == ["3", "2"]


def test_empty_query_returns_all_published_newest_first():
	state = seed_state()
	published = {a.id for a in selectors.published_articles(state)}
	results = selectors.search_articles(state, "")
	assert {a.id for a in results} == published
	assert [a.created_at for a in results] == sorted((a.created_at for a in results), reverse=True)
	assert [a.id for a in selectors.search_articles(state, "   ")] == [a.id for a in results]


def test_featured_split():
	articles = [make_article("1", featured=True), make_article("2")]
	assert [a.id for a in selectors.featured_articles(articles)] == ["1"]
	assert [a.id for a in selectors.regular_articles(articles)] == ["2"]


def test_statistics():
	state = BlogState(
		users=(User(id="u1", name="a", email="a@example.com"),),
		articles=(
			make_article("1", views=10, likes=2),
			make_article("2", views=5, likes=1, status="draft"),
		),
		comments=(Comment(id="c1", article_id="1", user_id="u1", content="x"),),
	)
	stats = selectors.article_statistics(state)
	assert stats == {
		"total_articles": 2,
		"published_articles": 1,
		"draft_articles": 1,
		"total_users": 1,
		"total_comments": 1,
		"total_views": 15,
		"total_likes": 3,
		"avg_views_per_article": 8,
	}


def test_statistics_without_articles():
	stats = selectors.article_statistics(BlogState())
	assert stats["avg_views_per_article"] == 0
	assert stats["total_articles"] == 0


def test_lookups_against_seed():
	state = seed_state()
	article = selectors.find_article_by_slug(state, "oolong-tea-temperature")
	assert article.id == "1"
	assert selectors.article_author(state, article).role == "admin"
	assert selectors.find_article_by_slug(state, "nope") is None
	assert selectors.find_user(state, None) is None
	assert [c.id for c in selectors.comments_for_article(state, "1")] == ["1", "2"]


def test_dangling_author_resolves_to_none():
	state = BlogState(articles=(make_article("1", author_id="gone"),))
	assert selectors.article_author(state, state.articles[0]) is None


def test_favorite_articles_follow_article_order():
	state = BlogState(
		articles=(make_article("1"), make_article("2"), make_article("3")),
		favorites={"u1": frozenset({"3", "1"})},
	)
	assert [a.id for a in selectors.favorite_articles(state, "u1")] == ["1", "3"]
	assert selectors.favorite_articles(state, "u2") == []


def test_user_notifications_newest_first_and_limited():
	notifications = tuple(
		Notification(id=str(i), user_id="u1", type="like", title=str(i), created_at=T0 + timedelta(hours=i), read=i % 2 == 0)
		for i in range(25)
	) + (Notification(id="other", user_id="u2", type="like", title="x"),)
	state = BlogState(notifications=notifications)

	mine = selectors.user_notifications(state, "u1")
	assert len(mine) == 20
	assert mine[0].id == "24"
	assert len(selectors.unread_notifications(state, "u1")) == 12
