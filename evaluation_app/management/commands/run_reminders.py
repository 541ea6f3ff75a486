# evaluation_app/management/commands/run_reminders.py
from django.core.management.base import BaseCommand

from evaluation_app.services.mailer import Mailer
from evaluation_app.services.reminders import ReminderService, run_sweep


class Command(BaseCommand):
    help = "Send due evaluation reminders, once or every few minutes until interrupted."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Run a single sweep and exit.")
        parser.add_argument("--force", action="store_true",
                            help="With --once, ignore the configured reminder interval.")
        parser.add_argument("--interval", type=int, default=None,
                            help="Seconds between sweeps (defaults to REMINDER_SWEEP_SECONDS).")

    def handle(self, *args, **options):
        if options["once"]:
            sent = run_sweep(Mailer(), force=options["force"])
            if sent is None:
                self.stdout.write(self.style.WARNING("Reminders disabled or not due yet."))
            else:
                self.stdout.write(self.style.SUCCESS(f"Sent {sent} reminder(s)."))
            return

        service = ReminderService(interval=options["interval"])
        service.start()
        self.stdout.write(self.style.SUCCESS(f"Reminder service running every {service.interval}s, Ctrl+C to stop."))
        try:
            while service.running:
                service._thread.join(1)
        except KeyboardInterrupt:
            pass
        finally:
            service.stop(timeout=5)
            self.stdout.write("Reminder service stopped.")
