from django.contrib.auth.decorators import login_required
from django.db.models import Count
from django.http import JsonResponse
from django.shortcuts import redirect
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.fleet.alarms import needs_attention, vehicle_alarms
from apps.fleet.models import Vehicle
from apps.tenants.scoping import scoped_vehicles


def home(request):
    return redirect("core:dashboard")


@login_required
@require_GET
def dashboard(request):
    vehicles = scoped_vehicles(request)
    now = timezone.now()

    by_status = dict(
        vehicles.values("status").annotate(n=Count("id")).values_list("status", "n")
    )

    pivot = {}
    rows = (
        vehicles
        .values("tenant_id", "tenant__name", "status")
        .annotate(n=Count("id"))
        .order_by("tenant__name")
    )
    for row in rows:
        entry = pivot.setdefault(row["tenant_id"], {
            "company": row["tenant__name"],
            "counts": {s: 0 for s, _ in Vehicle.STATUS_CHOICES},
            "total": 0,
        })
        entry["counts"][row["status"]] = row["n"]
        entry["total"] += row["n"]

    # Parked and maintenance vehicles are off the road, so they do not raise alarms
    operational = (
        vehicles
        .exclude(status__in=Vehicle.NON_OPERATIONAL_STATUSES)
        .select_related("tenant", "location")
        .order_by("plate")
    )
    alarms = []
    for v in operational:
        a = vehicle_alarms(v, now)
        if not needs_attention(a):
            continue
        alarms.append({
            "id": v.id,
            "plate": v.plate,
            "company": v.tenant.name,
            "location": v.location.name if v.location_id else None,
            "status": v.status,
            "inspection": a["inspection"].as_dict(),
            "traffic_insurance": a["traffic_insurance"].as_dict(),
        })

    # Most urgent first
    alarms.sort(key=lambda r: min(
        d for d in (
            r["inspection"]["days_remaining"],
            r["traffic_insurance"]["days_remaining"],
        ) if d is not None
    ))

    return JsonResponse({
        "kpis": {
            "total": sum(by_status.values()),
            "active": by_status.get(Vehicle.STATUS_ACTIVE, 0),
            "parked": by_status.get(Vehicle.STATUS_PARKED, 0),
            "legal_hold": by_status.get(Vehicle.STATUS_LEGAL_HOLD, 0),
            "maintenance": by_status.get(Vehicle.STATUS_MAINTENANCE, 0),
            "alarms": len(alarms),
        },
        "companies": list(pivot.values()),
        "alarms": alarms,
    })
