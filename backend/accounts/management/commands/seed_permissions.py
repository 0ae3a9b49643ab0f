# accounts/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand

from accounts.permission_defaults import all_permission_codes
from accounts.permissions import ensure_permissions, seed_default_roles


class Command(BaseCommand):
    help = "Seed default permissions and the built-in roles"

    def handle(self, *args, **options):
        perms = ensure_permissions(all_permission_codes())
        granted = seed_default_roles()

        for role, count in granted.items():
            self.stdout.write(f"{role}: granted {count} permission(s)")
        self.stdout.write(self.style.SUCCESS(f"Done! {len(perms)} permissions present."))
