import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eval360.settings")

application = get_wsgi_application()

# Long-running hosts may opt into the in-process reminder sweep;
# serverless deployments run `manage.py run_reminders --once` from a cron instead.
from django.conf import settings  # noqa: E402

if settings.REMINDERS_AUTOSTART:
    from evaluation_app.services.reminders import ReminderService  # noqa: E402

    reminder_service = ReminderService()
    reminder_service.start()
