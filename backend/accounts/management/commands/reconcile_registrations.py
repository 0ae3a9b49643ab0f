# accounts/management/commands/reconcile_registrations.py

from django.core.management.base import BaseCommand, CommandError

from accounts.registration import close_orphaned_attempt, orphaned_attempts


class Command(BaseCommand):
    help = "List orphaned registration attempts, or close one after manual reconciliation"

    def add_arguments(self, parser):
        parser.add_argument("--close", type=int, help="RegistrationAttempt id to mark RECONCILED")
        parser.add_argument("--note", default="", help="Reconciliation note stored on the attempt")

    def handle(self, *args, **options):
        attempt_id = options.get("close")
        if attempt_id:
            result = close_orphaned_attempt(attempt_id, note=options["note"])
            if not result.success:
                raise CommandError(result.error)
            self.stdout.write(self.style.SUCCESS(f"Attempt {attempt_id} marked RECONCILED"))
            return

        attempts = list(orphaned_attempts().order_by("created_at"))
        if not attempts:
            self.stdout.write("No orphaned registration attempts.")
            return
        for attempt in attempts:
            self.stdout.write(
                f"{attempt.pk}\t{attempt.airwallex_account_id}\t{attempt.email}\t{attempt.company_name}"
            )
