from datetime import timedelta

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.http import api_errors, paginate, parse_body
from apps.fleet.alarms import alert_window_days
from apps.fleet.models import Vehicle
from apps.tenants.scoping import can_delete_records, scoped_vehicles

from .models import InspectionRecord
from . import services


def _serialize(record: InspectionRecord) -> dict:
    v = record.vehicle
    return {
        "id": record.id,
        "vehicle": {
            "id": v.id,
            "plate": v.plate,
            "company": v.tenant.name if v.tenant_id else None,
            "location": v.location.name if v.location_id else None,
        },
        "inspection_date": record.inspection_date,
        "valid_until": record.valid_until,
        "outcome": record.outcome,
        "kind": record.kind,
        "station": record.station,
        "region": record.region,
        "report_number": record.report_number,
        "fee": record.fee,
        "failure_reason": record.failure_reason,
        "failure_detail": record.failure_detail,
        "notes": record.notes,
        "created_at": record.created_at,
    }


@login_required
@require_GET
def inspection_list(request):
    # Only tracked, operational vehicles show up in the tracking list
    vehicles = (
        scoped_vehicles(request)
        .filter(inspection_tracked=True)
        .exclude(status__in=Vehicle.NON_OPERATIONAL_STATUSES)
    )
    base = InspectionRecord.objects.filter(vehicle__in=vehicles)

    qs = base.select_related("vehicle", "vehicle__tenant", "vehicle__location").order_by("-inspection_date", "-created_at")

    q = (request.GET.get("q") or "").strip()
    vehicle_id = (request.GET.get("vehicle") or "").strip()
    outcome = (request.GET.get("outcome") or "").strip()
    kind = (request.GET.get("kind") or "").strip()
    state = (request.GET.get("state") or "").strip()

    if vehicle_id:
        qs = qs.filter(vehicle_id=vehicle_id)
    if outcome:
        qs = qs.filter(outcome=outcome)
    if kind:
        qs = qs.filter(kind=kind)

    today = timezone.localdate()
    soon = today + timedelta(days=alert_window_days())

    if state == "expired":
        qs = qs.filter(valid_until__lt=today)
    elif state == "approaching":
        qs = qs.filter(valid_until__gte=today, valid_until__lte=soon)
    elif state == "valid":
        qs = qs.filter(valid_until__gt=soon)

    if q:
        qs = qs.filter(
            Q(vehicle__plate__icontains=q) |
            Q(station__icontains=q) |
            Q(report_number__icontains=q)
        )

    rows, pagination = paginate(request, qs)

    passed = base.filter(outcome=InspectionRecord.OUTCOME_PASSED)
    total = base.count()
    passed_count = passed.count()

    return JsonResponse({
        "data": [_serialize(r) for r in rows],
        "pagination": pagination,
        "summary": {
            "total": total,
            "passed": passed_count,
            "failed": total - passed_count,
            "expired": passed.filter(valid_until__lt=today).count(),
            "approaching": passed.filter(valid_until__gte=today, valid_until__lte=soon).count(),
            "pass_rate": round(passed_count * 100 / total) if total else 0,
        },
    })


@login_required
@require_POST
@api_errors
def inspection_create(request):
    result = services.create_inspection(parse_body(request), user=request.user, vehicles=scoped_vehicles(request))
    return JsonResponse(
        {"record": _serialize(result.record), "vehicle_inspection_expiry": result.vehicle_expiry},
        status=201,
    )


@login_required
@require_GET
@api_errors
def inspection_detail(request, pk: int):
    record = services.get_inspection(pk, scoped_vehicles(request))
    return JsonResponse(_serialize(record))


@login_required
@require_http_methods(["POST", "PUT", "PATCH"])
@api_errors
def inspection_update(request, pk: int):
    result = services.update_inspection(pk, parse_body(request), vehicles=scoped_vehicles(request))
    return JsonResponse({"record": _serialize(result.record), "vehicle_inspection_expiry": result.vehicle_expiry})


@login_required
@require_http_methods(["POST", "DELETE"])
@api_errors
def inspection_delete(request, pk: int):
    if not can_delete_records(request.user, request.tenant_membership):
        raise PermissionDenied("You are not allowed to delete inspections.")

    expiry = services.delete_inspection(pk, vehicles=scoped_vehicles(request))
    return JsonResponse({"deleted": True, "vehicle_inspection_expiry": expiry})
