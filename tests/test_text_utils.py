from datetime import datetime, timezone

from blog.text_utils import (
	generate_slug,
	normalize_tags,
	parse_content_blocks,
	parse_iso,
	read_time_minutes,
	share_links,
	to_iso,
	unique_slug,
)


def test_generate_slug_strips_accents_and_symbols():
	assert generate_slug("Olá, Mundo!  Café -- Tea") == "ola-mundo-cafe-tea"
	assert generate_slug("一杯乌龙茶") == ""


def test_unique_slug_appends_a_counter():
	assert unique_slug("tea", ["photo"]) == "tea"
	assert unique_slug("tea", ["tea", "tea-2"]) == "tea-3"


def test_normalize_tags():
	assert normalize_tags(" a, b ,a,, c") == ["a", "b", "c"]
	assert normalize_tags(None) == []


def test_read_time():
	assert read_time_minutes("") == 1
	assert read_time_minutes("word " * 200) == 1
	assert read_time_minutes("word " * 201) == 2


def test_content_blocks():
	content = "Intro line\n\n## Section\n\n### Sub\n\n- one\n- two\n\nOutro ## not a heading"
	assert parse_content_blocks(content) == [
		{"type": "paragraph", "text": "Intro line"},
		{"type": "h2", "text": "Section"},
		{"type": "h3", "text": "Sub"},
		{"type": "list", "items": ["one", "two"]},
		{"type": "paragraph", "text": "Outro ## not a heading"},
	]


def test_share_links_encode_like_the_browser():
	links = share_links("https://blog.example.com/article/tea", "Tea & me", "hi")
	assert links["facebook"] == "https://www.facebook.com/sharer/sharer.php?u=https%3A%2F%2Fblog.example.com%2Farticle%2Ftea"
	assert links["twitter"].startswith("https://twitter.com/intent/tweet?text=Tea%20%26%20me%0A%0Ahi&url=")
	assert links["whatsapp"].endswith("%0A%0Ahttps%3A%2F%2Fblog.example.com%2Farticle%2Ftea")


def test_iso_round_trip():
	dt = datetime(2024, 1, 15, 10, 0, 0, 123000, tzinfo=timezone.utc)
	assert to_iso(dt) == "2024-01-15T10:00:00.123Z"
	assert parse_iso("2024-01-15T10:00:00.123Z") == dt
	assert parse_iso("2024-01-15T10:00:00") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)
	assert parse_iso("not a date") is None
	assert parse_iso(None) is None
