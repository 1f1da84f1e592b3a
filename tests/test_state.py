import pytest
from datetime import datetime, timezone

from blog.entities import Article, Comment, Notification
from blog.state import (
	AddArticle,
	BlogState,
	DeleteArticle,
	LikeArticle,
	MarkNotificationRead,
	ToggleFavorite,
	UpdateArticle,
	reduce,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def state():
	return BlogState(
		articles=(
			Article(id="a1", title="One", slug="one", content="c", created_at=T0, updated_at=T0),
			Article(id="a2", title="Two", slug="two", content="c", created_at=T0, updated_at=T0),
		),
		comments=(
			Comment(id="c1", article_id="a1", user_id="u1", content="hi", created_at=T0),
			Comment(id="c2", article_id="a2", user_id="u1", content="hey", created_at=T0),
			Comment(id="c3", article_id="a1", user_id="u2", content="yo", created_at=T0),
		),
		notifications=(
			Notification(id="n1", user_id="u1", type="like", title="t", created_at=T0),
		),
	)


def test_unknown_id_returns_same_state_object(state):
	assert reduce(state, LikeArticle("missing")) is state
	assert reduce(state, DeleteArticle("missing")) is state
	assert reduce(state, UpdateArticle("missing", {"title": "x"}, T0)) is state
	assert reduce(state, MarkNotificationRead("missing")) is state


def test_reducer_does_not_touch_its_input(state):
	before = state.articles
	new_state = reduce(state, LikeArticle("a1"))
	assert new_state is not state
	assert state.articles is before
	assert state.articles[0].likes == 0
	assert new_state.articles[0].likes == 1


def test_delete_cascades_to_comments_only_for_that_article(state):
	new_state = reduce(state, DeleteArticle("a1"))
	assert [a.id for a in new_state.articles] == ["a2"]
	assert [c.id for c in new_state.comments] == ["c2"]


def test_add_article_prepends(state):
	article = Article(id="a3", title="Three", slug="three", content="c")
	new_state = reduce(state, AddArticle(article))
	assert [a.id for a in new_state.articles] == ["a3", "a1", "a2"]


def test_mark_read_twice_is_a_noop_the_second_time(state):
	once = reduce(state, MarkNotificationRead("n1"))
	assert once.notifications[0].read is True
	assert reduce(once, MarkNotificationRead("n1")) is once


def test_toggle_favorite_drops_empty_sets(state):
	on = reduce(state, ToggleFavorite("u1", "a1"))
	assert on.favorites == {"u1": frozenset({"a1"})}
	off = reduce(on, ToggleFavorite("u1", "a1"))
	assert off.favorites == {}


def test_unknown_action_type_raises(state):
	with pytest.raises(TypeError):
		reduce(state, object())
