"""
Celery configuration for the compra project.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set default Django settings module / environment
os.environ.setdefault('DJANGO_ENV', os.environ.get('DJANGO_ENV', 'local'))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'compra.settings')

app = Celery('compra')

# Load configuration from Django settings with CELERY_ namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()

# Celery Beat schedule (periodic tasks)
app.conf.beat_schedule = {
    # Full rollup recompute; repairs any drift from interrupted submissions
    'recompute-all-rollups': {
        'task': 'surveys.tasks.recompute_all_rollups',
        'schedule': crontab(hour=3, minute=0),  # Daily at 3 AM
    },
}

# Task priorities
app.conf.task_default_priority = 5
app.conf.task_inherit_parent_priority = True

app.conf.worker_prefetch_multiplier = 2
app.conf.worker_max_tasks_per_child = 100
app.conf.task_acks_late = True

app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.result_expires = 3600

app.conf.task_routes = {
    'surveys.tasks.recompute_survey_rollup': {
        'queue': 'celery',
        'routing_key': 'analytics',
        'priority': 5,
    },
    'surveys.tasks.recompute_all_rollups': {
        'queue': 'celery',
        'routing_key': 'analytics',
        'priority': 3,
    },
}

app.conf.task_default_queue = 'celery'
