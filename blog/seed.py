from __future__ import annotations

from typing import Any, Dict, List

from .entities import Article, Comment, Notification, User
from .state import BlogState

# Mock content used when no persisted snapshot exists. Kept as plain wire
# dicts so it reads like the JSON the client ships with.

MOCK_USERS: List[Dict[str, Any]] = [
	{
		"id": "1",
		"name": "海叔",
		"email": "haishublog@example.com",
		"avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=150",
		"bio": "喝茶、拍照、学日语，记录生活里的小事。",
		"role": "admin",
		"createdAt": "2024-01-01T00:00:00.000Z",
	},
	{
		"id": "2",
		"name": "小林",
		"email": "kobayashi@example.com",
		"avatar": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=150",
		"bio": "摄影爱好者",
		"role": "user",
		"createdAt": "2024-01-05T08:30:00.000Z",
	},
	{
		"id": "3",
		"name": "阿青",
		"email": "aqing@example.com",
		"avatar": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=150",
		"bio": "",
		"role": "reader",
		"createdAt": "2024-01-10T12:00:00.000Z",
	},
]

MOCK_ARTICLES: List[Dict[str, Any]] = [
	{
		"id": "1",
		"title": "一杯乌龙茶的温度",
		"slug": "oolong-tea-temperature",
		"excerpt": "水温决定了乌龙茶的香气层次，聊聊我的冲泡习惯。",
		"content": (
			"乌龙茶介于绿茶与红茶之间，水温的掌握最见功夫。\n\n"
			"## 水温\n\n"
			"- 轻发酵：90°C 左右\n- 重发酵：接近沸水\n\n"
			"### 小结\n\n"
			"多试几次，找到自己喜欢的那一泡。"
		),
		"coverImage": "https://images.unsplash.com/photo-1544787219-7f47ccb76574?w=800",
		"authorId": "1",
		"category": "茶文化",
		"tags": ["乌龙茶", "冲泡", "茶具"],
		"status": "published",
		"featured": True,
		"likes": 24,
		"views": 320,
		"createdAt": "2024-01-15T10:00:00.000Z",
		"updatedAt": "2024-01-15T10:00:00.000Z",
		"publishedAt": "2024-01-15T10:00:00.000Z",
	},
	{
		"id": "2",
		"title": "清晨的街角",
		"slug": "morning-street-corner",
		"excerpt": "用一支定焦镜头记录城市醒来的样子。",
		"content": (
			"清晨六点的光线最柔和。\n\n"
			"## 器材\n\n"
			"- 35mm 定焦\n- 一卷胶片\n\n"
			"慢慢走，慢慢拍。"
		),
		"coverImage": "https://images.unsplash.com/photo-1477959858617-67f85cf4f1df?w=800",
		"authorId": "1",
		"category": "摄影",
		"tags": ["街拍", "胶片", "城市"],
		"status": "published",
		"featured": True,
		"likes": 18,
		"views": 410,
		"createdAt": "2024-01-20T06:30:00.000Z",
		"updatedAt": "2024-01-21T09:00:00.000Z",
		"publishedAt": "2024-01-20T06:30:00.000Z",
	},
	{
		"id": "3",
		"title": "关于慢下来",
		"slug": "on-slowing-down",
		"excerpt": "忙碌的日子里，给自己留一段空白。",
		"content": "有时候什么都不做，也是一种选择。\n\n### 留白\n\n每天留十分钟给自己。",
		"coverImage": "",
		"authorId": "1",
		"category": "思考",
		"tags": ["生活", "随笔"],
		"status": "published",
		"featured": False,
		"likes": 9,
		"views": 150,
		"createdAt": "2024-02-02T21:15:00.000Z",
		"updatedAt": "2024-02-02T21:15:00.000Z",
		"publishedAt": "2024-02-02T21:15:00.000Z",
	},
	{
		"id": "4",
		"title": "日语助词は和が的区别",
		"slug": "japanese-particles-wa-ga",
		"excerpt": "学日语绕不开的一道坎。",
		"content": (
			"は 提示主题，が 标示主语。\n\n"
			"## 例句\n\n"
			"- 私は学生です\n- 誰が来ましたか\n\n"
			"多读多听，语感自然就来了。"
		),
		"coverImage": "https://images.unsplash.com/photo-1528164344705-47542687000d?w=800",
		"authorId": "1",
		"category": "日语学习",
		"tags": ["日语", "语法", "助词"],
		"status": "published",
		"featured": False,
		"likes": 31,
		"views": 520,
		"createdAt": "2024-02-10T14:00:00.000Z",
		"updatedAt": "2024-02-10T14:00:00.000Z",
		"publishedAt": "2024-02-10T14:00:00.000Z",
	},
	{
		"id": "5",
		"title": "春茶预告",
		"slug": "spring-tea-preview",
		"excerpt": "今年的明前茶，还在路上。",
		"content": "草稿，等茶到了再补充。",
		"coverImage": "",
		"authorId": "1",
		"category": "茶文化",
		"tags": ["绿茶", "冲泡"],
		"status": "draft",
		"featured": False,
		"likes": 0,
		"views": 0,
		"createdAt": "2024-03-01T09:00:00.000Z",
		"updatedAt": "2024-03-01T09:00:00.000Z",
	},
]

MOCK_COMMENTS: List[Dict[str, Any]] = [
	{
		"id": "1",
		"articleId": "1",
		"userId": "2",
		"content": "试了 90 度，果然香气更清爽。",
		"createdAt": "2024-01-16T08:00:00.000Z",
		"likes": 3,
	},
	{
		"id": "2",
		"articleId": "1",
		"userId": "3",
		"content": "请问用什么茶具比较好？",
		"createdAt": "2024-01-17T12:30:00.000Z",
		"likes": 1,
	},
	{
		"id": "3",
		"articleId": "2",
		"userId": "3",
		"content": "第二张的光影很棒！",
		"createdAt": "2024-01-22T19:45:00.000Z",
		"likes": 5,
	},
]

MOCK_NOTIFICATIONS: List[Dict[str, Any]] = [
	{
		"id": "1",
		"userId": "1",
		"type": "comment",
		"title": "新评论",
		"message": "小林 评论了《一杯乌龙茶的温度》",
		"read": False,
		"createdAt": "2024-01-16T08:00:00.000Z",
		"relatedId": "1",
		"actionUrl": "/article/oolong-tea-temperature",
	},
	{
		"id": "2",
		"userId": "1",
		"type": "like",
		"title": "新点赞",
		"message": "阿青 赞了《清晨的街角》",
		"read": True,
		"createdAt": "2024-01-22T19:50:00.000Z",
		"relatedId": "2",
	},
	{
		"id": "3",
		"userId": "2",
		"type": "article",
		"title": "新文章",
		"message": "海叔 发布了《日语助词は和が的区别》",
		"read": False,
		"createdAt": "2024-02-10T14:00:00.000Z",
		"relatedId": "4",
		"actionUrl": "/article/japanese-particles-wa-ga",
	},
]


def seed_state() -> BlogState:
	return BlogState(
		users=tuple(User.from_dict(u) for u in MOCK_USERS),
		articles=tuple(Article.from_dict(a) for a in MOCK_ARTICLES),
		comments=tuple(Comment.from_dict(c) for c in MOCK_COMMENTS),
		notifications=tuple(Notification.from_dict(n) for n in MOCK_NOTIFICATIONS),
	)
