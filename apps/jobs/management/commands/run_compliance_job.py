from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import JobExecutionError
from apps.jobs.runner import JOBS, run_job


class Command(BaseCommand):
    help = "Run one compliance job (for cron or systemd timers)."

    def add_arguments(self, parser):
        parser.add_argument("job", choices=sorted(JOBS))

    def handle(self, *args, **options):
        try:
            summary = run_job(options["job"])
        except JobExecutionError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS(f"{summary['job']}: {summary['message']}"))
