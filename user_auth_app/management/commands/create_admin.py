from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token

from profiles.models import Profile


class Command(BaseCommand):
    help = "Create or update a portal admin user (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--username", default="admin")
        parser.add_argument("--email", default="admin@example.com")
        parser.add_argument("--password", required=True)
        parser.add_argument("--company", default="")

    def handle(self, *args, **options):
        User = get_user_model()

        u, created = User.objects.get_or_create(
            username=options["username"],
            defaults={"email": options["email"], "first_name": "Admin", "last_name": "User"},
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created user '{u.username}'"))
        else:
            self.stdout.write(f"User '{u.username}' already exists")

        # set (or reset) password and staff flag
        u.set_password(options["password"])
        u.is_staff = True
        u.save(update_fields=["password", "is_staff"])

        # ensure profile with admin role
        prof, _ = Profile.objects.get_or_create(
            user=u, defaults={"role": Profile.Role.ADMIN, "company": options["company"]}
        )
        if prof.role != Profile.Role.ADMIN:
            prof.role = Profile.Role.ADMIN
            prof.save(update_fields=["role"])

        token, _ = Token.objects.get_or_create(user=u)
        self.stdout.write(f"  → role=admin, token={token.key}")

        self.stdout.write(self.style.SUCCESS("Admin user ready."))
