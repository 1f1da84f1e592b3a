from __future__ import annotations

from celery import Celery

from blog.config import REDIS_URL

celery_app = Celery('blog', broker=REDIS_URL, backend=REDIS_URL, include=['tasks.persist_snapshot'])

# a redelivered or late task is dropped by the seq check in SqlSnapshotBackend.write_payload
celery_app.conf.task_acks_late = True
celery_app.conf.worker_max_tasks_per_child = 100
celery_app.conf.task_ignore_result = True
celery_app.conf.timezone = 'UTC'
