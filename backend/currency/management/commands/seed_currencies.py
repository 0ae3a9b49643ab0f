# currency/management/commands/seed_currencies.py

from django.core.management.base import BaseCommand

from currency.commands import seed_currencies


class Command(BaseCommand):
    help = "Seed the default currency groups and currencies (idempotent)"

    def handle(self, *args, **options):
        result = seed_currencies()
        self.stdout.write(
            self.style.SUCCESS(
                f"Done! {result.data['groups_created']} group(s), "
                f"{result.data['currencies_created']} currency(ies) created."
            )
        )
