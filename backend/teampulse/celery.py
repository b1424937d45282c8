import os

from celery import Celery
from dotenv import load_dotenv

# Worker processes read the same .env as the web process
load_dotenv()
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'teampulse.settings')

app = Celery('teampulse')

# CELERY_* keys in teampulse/settings.py configure the app
app.config_from_object('django.conf:settings', namespace='CELERY')

# App-level tasks.py modules, plus the AI engine's background jobs
app.autodiscover_tasks()
app.autodiscover_tasks(['tasks.ai_engine'], related_name='celery_tasks')
