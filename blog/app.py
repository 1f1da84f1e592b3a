from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS

from . import selectors
from .config import DIST_DIR, PORT, configure_logging
from .entities import ARTICLE_STATUSES, DEFAULT_CATEGORY, ROLE_READER, STATUS_DRAFT, Article, Comment
from .persistence import default_backend
from .state import BlogState
from .store import Store, create_store
from .text_utils import generate_slug, parse_content_blocks, read_time_minutes, share_links, unique_slug

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

ARTICLE_TEXT_FIELDS = ("title", "slug", "excerpt", "content", "coverImage", "category")


def _non_string_field(payload: Dict[str, Any], fields) -> Optional[str]:
	"""Name of the first field that is present but not a JSON string."""
	for field in fields:
		value = payload.get(field)
		if value is not None and not isinstance(value, str):
			return field
	return None


def _valid_tags(value: Any) -> bool:
	if value is None or isinstance(value, str):
		return True
	return isinstance(value, list) and all(isinstance(t, str) for t in value)


def _camel(key: str) -> str:
	head, *rest = key.split("_")
	return head + "".join(part.title() for part in rest)


def _article_dict(state: BlogState, article: Article) -> Dict[str, Any]:
	data = article.to_dict()
	author = selectors.article_author(state, article)
	data["author"] = author.to_dict() if author else None
	data["readTime"] = read_time_minutes(article.content)
	return data


def _comment_dict(state: BlogState, comment: Comment) -> Dict[str, Any]:
	data = comment.to_dict()
	author = selectors.find_user(state, comment.user_id)
	data["author"] = author.to_dict() if author else None
	return data


def create_app(store: Optional[Store] = None, dist_dir: Optional[Path] = None) -> Flask:
	app = Flask(__name__, static_folder=None)
	CORS(app)
	if store is None:
		store = create_store(default_backend())
	app.extensions["blog_store"] = store
	dist = Path(dist_dir or DIST_DIR)

	def _auth_error(admin: bool = False):
		user = store.current_user
		if user is None:
			return jsonify({"error": "login required"}), 401
		if admin and not user.is_admin:
			return jsonify({"error": "admin only"}), 403
		return None

	def _payload() -> Dict[str, Any]:
		data = request.get_json(silent=True)
		return data if isinstance(data, dict) else {}

	def _type_error(payload: Dict[str, Any], fields):
		field = _non_string_field(payload, fields)
		if field:
			return jsonify({"error": f"{field} must be a string"}), 400
		return None

	@app.route("/health", methods=["GET"])  # simple health check
	def health():
		return jsonify({"status": "ok"})

	# quiet down favicon 404 in browser devtools
	@app.route("/favicon.ico")
	def favicon():
		return ("", 204)

	# --- auth ---

	@app.route("/api/auth/login", methods=["POST"])
	def login():
		payload = _payload()
		err = _type_error(payload, ("email", "password"))
		if err:
			return err
		email = (payload.get("email") or "").strip()
		password = payload.get("password") or ""
		if not email or not password:
			return jsonify({"error": "email and password are required"}), 400
		if not store.login(email, password):
			return jsonify({"error": "invalid email or password"}), 401
		return jsonify({"user": store.current_user.to_dict()})

	@app.route("/api/auth/logout", methods=["POST"])
	def logout():
		store.logout()
		return jsonify({"status": "ok"})

	@app.route("/api/auth/register", methods=["POST"])
	def register():
		payload = _payload()
		err = _type_error(payload, ("name", "email", "password", "confirmPassword", "bio", "avatar"))
		if err:
			return err
		name = (payload.get("name") or "").strip()
		email = (payload.get("email") or "").strip()
		password = payload.get("password") or ""
		confirm = payload.get("confirmPassword", password)
		if not name or not email:
			return jsonify({"error": "name and email are required"}), 400
		if "@" not in email:
			return jsonify({"error": "email is invalid"}), 400
		if len(password) < MIN_PASSWORD_LENGTH:
			return jsonify({"error": f"password must be at least {MIN_PASSWORD_LENGTH} characters"}), 400
		if password != confirm:
			return jsonify({"error": "passwords do not match"}), 400
		ok = store.register({
			"name": name,
			"email": email,
			"bio": (payload.get("bio") or "").strip(),
			"avatar": (payload.get("avatar") or "").strip(),
			"role": ROLE_READER,
		})
		if not ok:
			return jsonify({"error": "email already registered"}), 409
		return jsonify({"user": store.current_user.to_dict()}), 201

	@app.route("/api/session", methods=["GET"])
	def session_info():
		user = store.current_user
		return jsonify({"user": user.to_dict() if user else None})

	# --- articles ---

	@app.route("/api/articles", methods=["GET"])  # search / list published
	def list_articles():
		state = store.state
		q = request.args.get("q", default="")
		category = request.args.get("category") or None
		articles = selectors.search_articles(state, q, category)
		return jsonify([_article_dict(state, a) for a in articles])

	@app.route("/api/articles", methods=["POST"])
	def create_article():
		err = _auth_error(admin=True)
		if err:
			return err
		payload = _payload()
		err = _type_error(payload, ARTICLE_TEXT_FIELDS)
		if err:
			return err
		if not _valid_tags(payload.get("tags")):
			return jsonify({"error": "tags must be a list of strings or a comma separated string"}), 400
		title = (payload.get("title") or "").strip()
		content = (payload.get("content") or "").strip()
		if not title or not content:
			return jsonify({"error": "title and content are required"}), 400
		status = payload.get("status") or STATUS_DRAFT
		if status not in ARTICLE_STATUSES:
			return jsonify({"error": f"status must be one of {', '.join(ARTICLE_STATUSES)}"}), 400
		taken = [a.slug for a in store.state.articles]
		slug = (payload.get("slug") or "").strip()
		if slug:
			if slug in taken:
				return jsonify({"error": "slug already in use"}), 409
		else:
			slug = unique_slug(generate_slug(title) or "post", taken)
		article = store.add_article({
			"title": title,
			"slug": slug,
			"excerpt": (payload.get("excerpt") or "").strip(),
			"content": content,
			"coverImage": (payload.get("coverImage") or "").strip(),
			"authorId": store.current_user.id,
			"category": (payload.get("category") or "").strip() or DEFAULT_CATEGORY,
			"tags": payload.get("tags") or [],
			"status": status,
			"featured": bool(payload.get("featured", False)),
		})
		log.info("article %s created: %s", article.id, slug)
		return jsonify(_article_dict(store.state, article)), 201

	@app.route("/api/articles/<slug>", methods=["GET"])  # article detail
	def article_detail(slug: str):
		state = store.state
		article = selectors.find_article_by_slug(state, slug)
		user = store.current_user
		if not article or (not article.is_published and not (user and user.is_admin)):
			return jsonify({"error": "not found"}), 404
		return jsonify({
			"article": _article_dict(state, article),
			"comments": [_comment_dict(state, c) for c in selectors.comments_for_article(state, article.id)],
			"blocks": parse_content_blocks(article.content),
			"share": share_links(f"{request.url_root}article/{article.slug}", article.title, article.excerpt),
			"isFavorite": store.is_favorite(article.id),
		})

	@app.route("/api/articles/<article_id>", methods=["PATCH"])
	def update_article(article_id: str):
		err = _auth_error(admin=True)
		if err:
			return err
		article = selectors.find_article(store.state, article_id)
		if not article:
			return jsonify({"error": "not found"}), 404
		payload = _payload()
		err = _type_error(payload, ARTICLE_TEXT_FIELDS)
		if err:
			return err
		if not _valid_tags(payload.get("tags")):
			return jsonify({"error": "tags must be a list of strings or a comma separated string"}), 400
		# slug is the routing key, so it can be changed but never blanked
		for field in ("title", "content", "slug"):
			if field in payload and not (payload.get(field) or "").strip():
				return jsonify({"error": f"{field} cannot be empty"}), 400
		if "status" in payload and payload["status"] not in ARTICLE_STATUSES:
			return jsonify({"error": f"status must be one of {', '.join(ARTICLE_STATUSES)}"}), 400
		slug = (payload.get("slug") or "").strip()
		if slug and any(a.slug == slug and a.id != article_id for a in store.state.articles):
			return jsonify({"error": "slug already in use"}), 409
		if slug:
			payload["slug"] = slug
		store.update_article(article_id, payload)
		state = store.state
		return jsonify(_article_dict(state, selectors.find_article(state, article_id)))

	@app.route("/api/articles/<article_id>", methods=["DELETE"])
	def delete_article(article_id: str):
		err = _auth_error(admin=True)
		if err:
			return err
		if not selectors.find_article(store.state, article_id):
			return jsonify({"error": "not found"}), 404
		store.delete_article(article_id)
		log.info("article %s deleted", article_id)
		return jsonify({"deleted": True})

	@app.route("/api/articles/<article_id>/like", methods=["POST"])
	def like_article(article_id: str):
		store.like_article(article_id)
		article = selectors.find_article(store.state, article_id)
		if not article:
			return jsonify({"error": "not found"}), 404
		return jsonify({"likes": article.likes})

	@app.route("/api/articles/<article_id>/views", methods=["POST"])
	def increment_views(article_id: str):
		store.increment_views(article_id)
		article = selectors.find_article(store.state, article_id)
		if not article:
			return jsonify({"error": "not found"}), 404
		return jsonify({"views": article.views})

	@app.route("/api/articles/<article_id>/comments", methods=["GET"])
	def list_comments(article_id: str):
		state = store.state
		if not selectors.find_article(state, article_id):
			return jsonify({"error": "not found"}), 404
		return jsonify([_comment_dict(state, c) for c in selectors.comments_for_article(state, article_id)])

	@app.route("/api/articles/<article_id>/comments", methods=["POST"])
	def add_comment(article_id: str):
		err = _auth_error()
		if err:
			return err
		payload = _payload()
		err = _type_error(payload, ("content",))
		if err:
			return err
		content = (payload.get("content") or "").strip()
		if not content:
			return jsonify({"error": "content is required"}), 400
		if not selectors.find_article(store.state, article_id):
			return jsonify({"error": "not found"}), 404
		comment = store.add_comment({"articleId": article_id, "userId": store.current_user.id, "content": content})
		return jsonify(_comment_dict(store.state, comment)), 201

	@app.route("/api/comments/<comment_id>/like", methods=["POST"])
	def like_comment(comment_id: str):
		store.like_comment(comment_id)
		comment = next((c for c in store.state.comments if c.id == comment_id), None)
		if not comment:
			return jsonify({"error": "not found"}), 404
		return jsonify({"likes": comment.likes})

	# --- favorites ---

	@app.route("/api/favorites", methods=["GET"])
	def list_favorites():
		err = _auth_error()
		if err:
			return err
		state = store.state
		return jsonify([_article_dict(state, a) for a in selectors.favorite_articles(state, store.current_user.id)])

	@app.route("/api/favorites", methods=["POST"])  # toggle favorite
	def toggle_favorite():
		err = _auth_error()
		if err:
			return err
		article_id = _payload().get("articleId")
		if not article_id:
			return jsonify({"error": "articleId is required"}), 400
		article_id = str(article_id)
		if not selectors.find_article(store.state, article_id):
			return jsonify({"error": "not found"}), 404
		return jsonify({"favorite": store.toggle_favorite(article_id)})

	# --- notifications ---

	@app.route("/api/notifications", methods=["GET"])
	def list_notifications():
		err = _auth_error()
		if err:
			return err
		user_id = store.current_user.id
		state = store.state
		return jsonify({
			"items": [n.to_dict() for n in selectors.user_notifications(state, user_id)],
			"unread": len(selectors.unread_notifications(state, user_id)),
		})

	@app.route("/api/notifications/read-all", methods=["POST"])
	def mark_all_notifications_read():
		err = _auth_error()
		if err:
			return err
		store.mark_all_notifications_as_read(store.current_user.id)
		return jsonify({"unread": 0})

	@app.route("/api/notifications/<notification_id>/read", methods=["POST"])
	def mark_notification_read(notification_id: str):
		err = _auth_error()
		if err:
			return err
		user_id = store.current_user.id
		if not any(n.id == notification_id and n.user_id == user_id for n in store.state.notifications):
			return jsonify({"error": "not found"}), 404
		store.mark_notification_as_read(notification_id)
		return jsonify({"unread": len(store.get_unread_notifications(user_id))})

	# --- derived views ---

	@app.route("/api/sidebar", methods=["GET"])
	def sidebar():
		state = store.state
		return jsonify({
			"categories": [{"category": c, "count": n} for c, n in selectors.category_counts(state)],
			"popularArticles": [_article_dict(state, a) for a in selectors.popular_articles(state)],
			"recentArticles": [_article_dict(state, a) for a in selectors.recent_articles(state)],
			"popularTags": [{"tag": t, "count": n} for t, n in selectors.popular_tags(state, limit=15)],
		})

	@app.route("/api/stats", methods=["GET"])  # admin dashboard numbers
	def stats():
		err = _auth_error(admin=True)
		if err:
			return err
		state = store.state
		data = {_camel(k): v for k, v in selectors.article_statistics(state).items()}
		data["popularArticles"] = [_article_dict(state, a) for a in selectors.popular_articles(state, published_only=False)]
		return jsonify(data)

	# --- legacy endpoints used by the static HTML pages ---

	@app.route("/api/featured-articles", methods=["GET"])
	def featured_articles():
		state = store.state
		articles = selectors.featured_articles(selectors.search_articles(state))
		return jsonify([_article_dict(state, a) for a in articles])

	@app.route("/api/articles-by-category", methods=["GET"])
	def articles_by_category():
		state = store.state
		category = request.args.get("category") or None
		return jsonify([_article_dict(state, a) for a in selectors.search_articles(state, category=category)])

	@app.route("/api/article", methods=["GET"])
	def legacy_article():
		state = store.state
		key = request.args.get("id") or ""
		article = selectors.find_article(state, key) or selectors.find_article_by_slug(state, key)
		if not article or not article.is_published:
			return jsonify({"error": "not found"}), 404
		return jsonify(_article_dict(state, article))

	@app.route("/api/<path:rest>", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
	def api_not_found(rest: str):
		return jsonify({"error": "API endpoint not found"}), 404

	# --- single-page client ---

	@app.route("/", defaults={"path": ""}, methods=["GET"])
	@app.route("/<path:path>", methods=["GET"])
	def spa(path: str):
		if path and (dist / path).is_file():
			resp = send_from_directory(dist, path)
		elif path and os.path.splitext(path)[1]:
			# a missing asset is a real 404, only routes fall back to index.html
			return ("File not found", 404)
		elif (dist / "index.html").is_file():
			resp = send_from_directory(dist, "index.html")
		else:
			return ("File not found", 404)
		resp.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
		resp.headers["Pragma"] = "no-cache"
		resp.headers["Expires"] = "0"
		return resp

	return app


if __name__ == "__main__":
	configure_logging()
	app = create_app()
	log.info("serving blog on port %s", PORT)
	app.run(host="0.0.0.0", port=PORT, debug=True)
