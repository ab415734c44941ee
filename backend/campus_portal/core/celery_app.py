from celery import Celery
from campus_portal.core.config import settings
import logging

logging.getLogger('celery.backends.redis').setLevel(logging.ERROR)

celery_app = Celery(
    "campus_portal_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        'campus_portal.tasks.notifications',
        'campus_portal.tasks.maintenance',
    ]
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    task_always_eager=settings.celery_task_always_eager,
    task_eager_propagates=False,

    task_routes={
        'send_email_notification': {'queue': 'notifications'},
        'push_in_app_notification': {'queue': 'notifications'},
        'close_finished_elections': {'queue': 'maintenance'},
        'cleanup_orphan_uploads': {'queue': 'maintenance'},
    },

    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_max_tasks_per_child=1000,

    task_soft_time_limit=120,
    task_time_limit=300,

    result_expires=3600,
    broker_connection_retry_on_startup=True,

    task_default_retry_delay=60,
    task_max_retries=3,

    beat_schedule={
        'close-finished-elections': {
            'task': 'close_finished_elections',
            'schedule': 300.0,
        },
        'cleanup-orphan-uploads': {
            'task': 'cleanup_orphan_uploads',
            'schedule': 21600.0,
        },
    },
)

if __name__ == '__main__':
    celery_app.start()
