"""Run the expired category record sweep on demand."""

from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError

from apps.categories.services import cleanup


class Command(BaseCommand):
    help = "Delete expired withdrawn and time-limited blacklist records."

    def add_arguments(self, parser):
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the sweep result as JSON.",
        )

    def handle(self, *args, **options):
        result = cleanup()

        if options["json"]:
            self.stdout.write(json.dumps(result.as_dict(), indent=2, sort_keys=True))
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Removed {result.withdrawn_removed} withdrawn and "
                    f"{result.blacklist_removed} blacklist records."
                )
            )

        if result.failed_phases:
            raise CommandError(
                "Cleanup did not finish for: " + ", ".join(result.failed_phases)
            )
