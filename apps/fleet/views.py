from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import Q
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.exceptions import NotFound
from apps.core.http import api_errors, paginate, parse_body
from apps.tenants.models import TenantMembership
from apps.tenants.scoping import scoped_vehicles

from .alarms import AlarmState, vehicle_alarms
from .forms import VehicleForm
from .models import Vehicle


def _require_tenant(request):
    if getattr(request, "tenant", None) is None:
        return False
    return True


def _can_manage_vehicles(request) -> bool:
    if request.user.is_superuser:
        return True
    m = request.tenant_membership
    return bool(m and m.role in (TenantMembership.ROLE_ADMIN, TenantMembership.ROLE_COMPANY_MANAGER))


def serialize_vehicle(v: Vehicle, now=None) -> dict:
    alarms = vehicle_alarms(v, now or timezone.now())
    return {
        "id": v.id,
        "plate": v.plate,
        "company": {"id": v.tenant_id, "name": v.tenant.name},
        "location": {"id": v.location_id, "name": v.location.name} if v.location_id else None,
        "year": v.year,
        "make": v.make,
        "model": v.model,
        "status": v.status,
        "inspection_tracked": v.inspection_tracked,
        "insurance_tracked": v.insurance_tracked,
        "alarms": {name: alarm.as_dict() for name, alarm in alarms.items()},
        "notes": v.notes,
    }


def _get_vehicle(request, pk: int) -> Vehicle:
    v = scoped_vehicles(request).select_related("tenant", "location").filter(pk=pk).first()
    if v is None:
        raise NotFound(f"Vehicle {pk} not found.")
    return v


@login_required
@require_GET
def vehicle_list(request):
    qs = scoped_vehicles(request).select_related("tenant", "location")

    q = (request.GET.get("q") or "").strip()
    status = (request.GET.get("status") or "").strip()
    location_id = (request.GET.get("location") or "").strip()
    alarm = (request.GET.get("alarm") or "").strip()

    if q:
        qs = qs.filter(
            Q(plate__icontains=q) |
            Q(make__icontains=q) |
            Q(model__icontains=q)
        )
    if status:
        qs = qs.filter(status=status)
    if location_id:
        qs = qs.filter(location_id=location_id)

    now = timezone.now()
    vehicles = list(qs)

    # Alarms are computed per read, so this filter cannot be pushed into SQL
    if alarm in {s.value for s in AlarmState}:
        wanted = AlarmState(alarm)
        vehicles = [
            v for v in vehicles
            if any(a.state == wanted for a in vehicle_alarms(v, now).values())
        ]

    rows, pagination = paginate(request, vehicles)
    return JsonResponse({
        "data": [serialize_vehicle(v, now) for v in rows],
        "pagination": pagination,
    })


@login_required
@require_GET
@api_errors
def vehicle_detail(request, pk: int):
    return JsonResponse(serialize_vehicle(_get_vehicle(request, pk)))


@login_required
@require_POST
@api_errors
def vehicle_create(request):
    if not _require_tenant(request) or not _can_manage_vehicles(request):
        raise PermissionDenied("You are not allowed to add vehicles.")

    form = VehicleForm(parse_body(request), tenant=request.tenant)
    if not form.is_valid():
        raise ValidationError({k: list(errs) for k, errs in form.errors.items()})

    v = form.save(commit=False)
    v.tenant = request.tenant
    v.save()
    return JsonResponse(serialize_vehicle(v), status=201)


@login_required
@require_http_methods(["POST", "PUT", "PATCH"])
@api_errors
def vehicle_update(request, pk: int):
    """
    Manual edits: status (including reactivation), tracking flags, location.
    Expiry dates are not editable here; they follow the record history.
    """
    if not _can_manage_vehicles(request):
        raise PermissionDenied("You are not allowed to edit vehicles.")

    v = _get_vehicle(request, pk)
    data = {
        "plate": v.plate,
        "location": v.location_id,
        "year": v.year,
        "make": v.make,
        "model": v.model,
        "status": v.status,
        "inspection_tracked": v.inspection_tracked,
        "insurance_tracked": v.insurance_tracked,
        "notes": v.notes,
    }
    data.update(parse_body(request))

    form = VehicleForm(data, instance=v, tenant=v.tenant)
    if not form.is_valid():
        raise ValidationError({k: list(errs) for k, errs in form.errors.items()})

    form.save()
    return JsonResponse(serialize_vehicle(v))
