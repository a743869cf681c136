from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from checkout.services.checkout_orchestrator import expire_stale_sessions


class Command(BaseCommand):
    help = "Expire pending/open checkout sessions that never completed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Age after which a session is stale (default: CHECKOUT_STALE_AFTER_MINUTES)",
        )

    def handle(self, *args, **options):
        minutes = options.get("minutes")
        if minutes is not None and minutes < 0:
            raise CommandError("--minutes must be >= 0")

        older_than = timedelta(minutes=minutes) if minutes is not None else None
        expired = expire_stale_sessions(older_than=older_than)

        self.stdout.write(self.style.SUCCESS(f"Expired {expired} checkout session(s)."))
