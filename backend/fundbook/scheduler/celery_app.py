from celery import Celery
from celery.schedules import crontab

from fundbook.core.config import settings

app = Celery("fundbook")
app.conf.broker_url = settings.CELERY_BROKER_URL
app.conf.result_backend = settings.CELERY_RESULT_BACKEND
app.conf.timezone = settings.CELERY_TIMEZONE
app.conf.enable_utc = False

app.conf.include = ["fundbook.tasks.snapshots"]

app.conf.beat_schedule = {}

if settings.SNAPSHOT_SCHEDULE_ENABLED:
    # Day 1 of each month snapshots the previous month end
    app.conf.beat_schedule["month-end-snapshot"] = {
        "task": "fundbook.tasks.snapshots.create_period_snapshot",
        "schedule": crontab(
            day_of_month=1,
            hour=settings.SNAPSHOT_HOUR,
            minute=settings.SNAPSHOT_MINUTE,
        ),
    }
