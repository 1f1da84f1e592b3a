from __future__ import annotations

import math
import re
import unicodedata
import urllib.parse
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
	"""Serialize as the client does: UTC, millisecond precision, trailing Z."""
	if dt is None:
		return None
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(raw: Any) -> Optional[datetime]:
	if raw is None or raw == "":
		return None
	if isinstance(raw, datetime):
		dt = raw
	else:
		try:
			dt = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
		except ValueError:
			return None
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt


def generate_slug(title: str) -> str:
	text = unicodedata.normalize("NFD", (title or "").lower())
	text = "".join(ch for ch in text if not unicodedata.combining(ch))
	text = re.sub(r"[^a-z0-9\s-]", "", text)
	text = re.sub(r"\s+", "-", text.strip())
	return re.sub(r"-+", "-", text).strip("-")


def unique_slug(base: str, taken: Iterable[str]) -> str:
	existing = set(taken)
	if base not in existing:
		return base
	n = 2
	while f"{base}-{n}" in existing:
		n += 1
	return f"{base}-{n}"


def normalize_tags(tags: Any) -> List[str]:
	# accepts a list or a comma separated string; keeps first occurrence order
	if tags is None:
		return []
	if isinstance(tags, str):
		tags = tags.split(",")
	out: List[str] = []
	for t in tags:
		t = str(t).strip()
		if t and t not in out:
			out.append(t)
	return out


def read_time_minutes(content: str, words_per_minute: int = 200) -> int:
	words = len((content or "").split())
	return max(1, math.ceil(words / words_per_minute))


def parse_content_blocks(content: str) -> List[Dict[str, Any]]:
	"""Split article text into render blocks.

	Blocks are separated by blank lines. A block starting with ``## `` is a
	section heading, ``### `` a sub-heading, ``- `` a bullet list (one item per
	line); anything else is a paragraph.
	"""
	blocks: List[Dict[str, Any]] = []
	for chunk in (content or "").split("\n\n"):
		if not chunk.strip():
			continue
		if chunk.startswith("## "):
			blocks.append({"type": "h2", "text": chunk.replace("## ", "", 1)})
		elif chunk.startswith("### "):
			blocks.append({"type": "h3", "text": chunk.replace("### ", "", 1)})
		elif chunk.startswith("- "):
			items = [line.replace("- ", "", 1) for line in chunk.split("\n") if line.strip()]
			blocks.append({"type": "list", "items": items})
		else:
			blocks.append({"type": "paragraph", "text": chunk})
	return blocks


def _encode_component(value: str) -> str:
	# same escaping as JavaScript's encodeURIComponent
	return urllib.parse.quote(value, safe="-_.!~*'()")


def share_links(url: str, title: str, description: str = "") -> Dict[str, str]:
	text = f"{title}\n\n{description}"
	return {
		"whatsapp": "https://wa.me/?text=" + _encode_component(f"{text}\n\n{url}"),
		"twitter": (
			"https://twitter.com/intent/tweet?text=" + _encode_component(text)
			+ "&url=" + _encode_component(url)
		),
		"facebook": "https://www.facebook.com/sharer/sharer.php?u=" + _encode_component(url),
		"linkedin": "https://www.linkedin.com/sharing/share-offsite/?url=" + _encode_component(url),
	}
