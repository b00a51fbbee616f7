import os
from celery import Celery

settings_module = os.environ.get('DJANGO_SETTINGS_MODULE', 'core.settings.local')
os.environ.setdefault('DJANGO_SETTINGS_MODULE', settings_module)

app = Celery('attribution')
app.config_from_object('django.conf:settings', namespace='CELERY')

# beat schedule and snapshot tasks live in the top-level tasks package
app.autodiscover_tasks(['tasks'], related_name='analytics')
