from __future__ import annotations

import logging
from typing import Any, Dict

from tasks.app import celery_app
from blog.persistence import SqlSnapshotBackend

log = logging.getLogger(__name__)


@celery_app.task
def persist_snapshot(key: str, payload: Dict[str, Any]) -> str:
	# no retries: a newer snapshot supersedes this one anyway
	if SqlSnapshotBackend(key=key).write_payload(payload):
		log.debug("stored blog snapshot %s seq=%s", key, payload.get("seq"))
	return key
