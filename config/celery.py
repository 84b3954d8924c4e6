import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("hotel_reservations")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expire checkouts the gateway never called back for
    "expire-stale-payments": {
        "task": "payments.expire_stale_payments",
        "schedule": 300.0,
        "options": {"expires": 240},
    },
    # Mark confirmed stays whose check-in day has passed as no-shows
    "mark-no-show-bookings": {
        "task": "bookings.mark_no_show_bookings",
        "schedule": crontab(minute=30, hour=12),
    },
}
