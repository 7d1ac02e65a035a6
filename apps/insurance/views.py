from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.http import api_errors, paginate, parse_body
from apps.fleet.alarms import alert_window_days
from apps.fleet.models import Vehicle
from apps.tenants.scoping import can_delete_records, scoped_vehicles

from .models import InsuranceRecord
from . import services


def _serialize(record: InsuranceRecord) -> dict:
    v = record.vehicle
    return {
        "id": record.id,
        "vehicle": {
            "id": v.id,
            "plate": v.plate,
            "company": v.tenant.name if v.tenant_id else None,
            "location": v.location.name if v.location_id else None,
        },
        "sub_type": record.sub_type,
        "policy_number": record.policy_number,
        "insurer": record.insurer,
        "agency": record.agency,
        "start_date": record.start_date,
        "valid_until": record.valid_until,
        "premium": record.premium,
        "payment_status": record.payment_status,
        "payment_plan": record.payment_plan,
        "installment_count": record.installment_count,
        "paid_on": record.paid_on,
        "coverage_notes": record.coverage_notes,
        "notes": record.notes,
        "created_at": record.created_at,
    }


@login_required
@require_GET
def policy_list(request):
    vehicles = (
        scoped_vehicles(request)
        .filter(insurance_tracked=True)
        .exclude(status__in=Vehicle.NON_OPERATIONAL_STATUSES)
    )
    base = InsuranceRecord.objects.filter(vehicle__in=vehicles)

    qs = base.select_related("vehicle", "vehicle__tenant", "vehicle__location").order_by("-valid_until", "-created_at")

    q = (request.GET.get("q") or "").strip()
    vehicle_id = (request.GET.get("vehicle") or "").strip()
    sub_type = (request.GET.get("sub_type") or "").strip()
    payment_status = (request.GET.get("payment_status") or "").strip()
    state = (request.GET.get("state") or "").strip()

    if vehicle_id:
        qs = qs.filter(vehicle_id=vehicle_id)
    if sub_type:
        qs = qs.filter(sub_type=sub_type)
    if payment_status:
        qs = qs.filter(payment_status=payment_status)

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
            Q(policy_number__icontains=q) |
            Q(insurer__icontains=q) |
            Q(agency__icontains=q)
        )

    rows, pagination = paginate(request, qs)

    premium_total = base.aggregate(total=Coalesce(Sum("premium"), Decimal("0.00")))["total"]
    premium_unpaid = (
        base.exclude(payment_status=InsuranceRecord.PAYMENT_PAID)
        .aggregate(total=Coalesce(Sum("premium"), Decimal("0.00")))["total"]
    )

    return JsonResponse({
        "data": [_serialize(r) for r in rows],
        "pagination": pagination,
        "summary": {
            "total": base.count(),
            "expired": base.filter(valid_until__lt=today).count(),
            "approaching": base.filter(valid_until__gte=today, valid_until__lte=soon).count(),
            "premium_total": premium_total,
            "premium_unpaid": premium_unpaid,
        },
    })


@login_required
@require_POST
@api_errors
def policy_create(request):
    result = services.create_policy(parse_body(request), user=request.user, vehicles=scoped_vehicles(request))
    return JsonResponse(
        {"record": _serialize(result.record), "vehicle_expiry": result.vehicle_expiry},
        status=201,
    )


@login_required
@require_GET
@api_errors
def policy_detail(request, pk: int):
    record = services.get_policy(pk, scoped_vehicles(request))
    return JsonResponse(_serialize(record))


@login_required
@require_http_methods(["POST", "PUT", "PATCH"])
@api_errors
def policy_update(request, pk: int):
    result = services.update_policy(pk, parse_body(request), vehicles=scoped_vehicles(request))
    return JsonResponse({"record": _serialize(result.record), "vehicle_expiry": result.vehicle_expiry})


@login_required
@require_http_methods(["POST", "DELETE"])
@api_errors
def policy_delete(request, pk: int):
    if not can_delete_records(request.user, request.tenant_membership):
        raise PermissionDenied("You are not allowed to delete insurance records.")

    expiry = services.delete_policy(pk, vehicles=scoped_vehicles(request))
    return JsonResponse({"deleted": True, "vehicle_expiry": expiry})
