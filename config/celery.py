"""
Mas3ndi Celery Configuration
Queue routing and beat scheduling. Usage writes go to their own queue so a
burst of metered traffic never delays housekeeping tasks.
"""

import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('mas3ndi')
app.config_from_object('django.conf:settings', namespace='CELERY')

# Queue definitions
app.conf.task_default_queue = 'default'

app.conf.task_routes = {
    'usage.tasks.record_api_usage': {'queue': 'usage'},
    'usage.*': {'queue': 'default'},
}

app.conf.task_queues = {
    'default': {
        'exchange': 'default',
        'routing_key': 'default',
    },
    'usage': {
        'exchange': 'usage',
        'routing_key': 'usage',
    },
}

app.autodiscover_tasks()

# Celery Beat Schedule
from celery.schedules import crontab

app.conf.beat_schedule = {
    # Drop usage records past the retention window daily at 3 AM
    'purge-usage-records': {
        'task': 'usage.tasks.purge_usage_records',
        'schedule': crontab(hour=3, minute=0),
    },
}
