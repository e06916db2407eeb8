"""
Management command: setup_contact_types
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the default **contact-type groups** and **contact types** for one
or more organizations.

The command is **idempotent** — safe to run multiple times.  Existing
groups and types are never modified or deleted.

Usage::

    python manage.py setup_contact_types 3 7
    python manage.py setup_contact_types --all
"""

from django.core.management.base import BaseCommand, CommandError

from accounts.models import CasaOrg
from contacts.services import ContactTypeService


class Command(BaseCommand):
    help = "Seed the default contact-type groups and types for organizations."

    def add_arguments(self, parser):
        parser.add_argument(
            "org_ids",
            nargs="*",
            type=int,
            help="Primary keys of the organizations to seed.",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all_orgs",
            help="Seed every organization.",
        )

    def handle(self, *args, **options):
        org_ids = options["org_ids"]
        if options["all_orgs"]:
            orgs = CasaOrg.objects.all()
        elif org_ids:
            orgs = CasaOrg.objects.filter(pk__in=org_ids)
            missing = set(org_ids) - set(orgs.values_list("pk", flat=True))
            if missing:
                raise CommandError(
                    f"Unknown organization id(s): {', '.join(str(pk) for pk in sorted(missing))}"
                )
        else:
            raise CommandError("Pass one or more organization ids, or --all.")

        for org in orgs:
            groups, types = ContactTypeService.seed_defaults(org)
            if options["verbosity"] >= 1:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"{org}: {groups} group(s), {types} type(s) created."
                    )
                )
