from typing import Dict, Optional

from celery import Celery
from celery.schedules import crontab
from app.core.config import settings

RENEWAL_REMINDER_TASK = "tasks.send_renewal_reminders"
EXPIRATION_TASK = "tasks.expire_subscriptions"
QUOTA_REPAIR_TASK = "tasks.repair_expired_quotas"


class LifecycleSchedule:
    """
    Beat entries for the subscription lifecycle passes.

    Installed once when the Celery app is created; ``uninstall`` removes the
    entries again so tests can run passes by hand.
    """

    def __init__(
        self,
        reminder_at: tuple = (settings.RENEWAL_REMINDER_HOUR, settings.RENEWAL_REMINDER_MINUTE),
        expiration_at: tuple = (settings.EXPIRATION_HOUR, settings.EXPIRATION_MINUTE),
        quota_repair_at: tuple = (settings.QUOTA_REPAIR_HOUR, settings.QUOTA_REPAIR_MINUTE),
    ):
        self.reminder_at = reminder_at
        self.expiration_at = expiration_at
        self.quota_repair_at = quota_repair_at
        self._app: Optional[Celery] = None

    def entries(self) -> Dict[str, dict]:
        return {
            'send-renewal-reminders-daily': {
                'task': RENEWAL_REMINDER_TASK,
                'schedule': crontab(hour=self.reminder_at[0], minute=self.reminder_at[1]),
            },
            'expire-subscriptions-daily': {
                'task': EXPIRATION_TASK,
                'schedule': crontab(hour=self.expiration_at[0], minute=self.expiration_at[1]),
            },
            'repair-expired-quotas-daily': {
                'task': QUOTA_REPAIR_TASK,
                'schedule': crontab(hour=self.quota_repair_at[0], minute=self.quota_repair_at[1]),
            },
        }

    @property
    def installed(self) -> bool:
        return self._app is not None

    def install(self, app: Celery) -> None:
        if self._app is app:
            return
        beat_schedule = dict(app.conf.beat_schedule or {})
        beat_schedule.update(self.entries())
        app.conf.beat_schedule = beat_schedule
        self._app = app

    def uninstall(self) -> None:
        if self._app is None:
            return
        beat_schedule = dict(self._app.conf.beat_schedule or {})
        for name in self.entries():
            beat_schedule.pop(name, None)
        self._app.conf.beat_schedule = beat_schedule
        self._app = None


# Initialize Celery
celery_app = Celery(
    "tasks",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "app.tasks.subscription_tasks"
    ]
)

celery_app.conf.update(
    task_track_started=True,
    timezone="UTC",
    enable_utc=True,
)

lifecycle_schedule = LifecycleSchedule()
lifecycle_schedule.install(celery_app)
