from django.core.management.base import BaseCommand

from apps.fleet.expiry import reconcile_vehicle
from apps.fleet.models import Vehicle


class Command(BaseCommand):
    help = "Recompute the cached expiry dates of every vehicle from its records."

    def add_arguments(self, parser):
        parser.add_argument("--plate", action="append", default=[], help="Limit to these plates.")

    def handle(self, *args, **options):
        qs = Vehicle.objects.order_by("plate")
        if options["plate"]:
            qs = qs.filter(plate__in=[p.replace(" ", "").upper() for p in options["plate"]])

        count = 0
        for vehicle_id in qs.values_list("pk", flat=True):
            reconcile_vehicle(vehicle_id)
            count += 1

        self.stdout.write(self.style.SUCCESS(f"Reconciled {count} vehicle(s)."))
